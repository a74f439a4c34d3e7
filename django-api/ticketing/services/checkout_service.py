"""Payment capture followed by ticket issuance.

Capturing is idempotent on our side: an order that already has tickets is
returned as-is without contacting the payment processor again.
"""

import logging
from dataclasses import dataclass, field

from ticketing.domain import (
    BoundIdentity,
    Contact,
    GuestIdentity,
    Identity,
    NewAccountIdentity,
    ResolvedIdentity,
    Ticket,
)
from ticketing.domain.errors import (
    AccountCreationFailedError,
    InvalidInputError,
    PaymentNotCompletedError,
)
from ticketing.integrations.interfaces import (
    IdentityProvider,
    NotificationSender,
    PaymentProcessor,
)
from ticketing.services.common import require
from ticketing.services.issuance_service import (
    PURCHASE,
    PURCHASE_NEW_ACCOUNT,
    IssueRequest,
    LineItem,
    TicketIssuanceService,
)
from ticketing.services.linking_service import LinkingService
from ticketing.stores.interfaces import TicketStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckoutCustomer:
    name: str
    email: str
    phone: str = ""
    create_account: bool = False
    password: str = ""

    @property
    def contact(self) -> Contact:
        return Contact(self.name, self.email, self.phone)


@dataclass(frozen=True)
class CheckoutRequest:
    order_id: str
    event_id: str
    customer: CheckoutCustomer
    items: tuple[LineItem, ...]


@dataclass(frozen=True)
class CheckoutResult:
    order_id: str
    tickets: list[Ticket] = field(default_factory=list)
    already_fulfilled: bool = False
    capture_id: str = ""
    user_id: str | None = None
    account_created: bool = False
    custom_token: str | None = None
    linked_count: int = 0


class CheckoutService:
    def __init__(
        self,
        tickets: TicketStore,
        payments: PaymentProcessor,
        identity: IdentityProvider,
        notifier: NotificationSender,
        issuance: TicketIssuanceService,
        linking: LinkingService,
    ) -> None:
        self._tickets = tickets
        self._payments = payments
        self._identity = identity
        self._notifier = notifier
        self._issuance = issuance
        self._linking = linking

    def capture_and_issue(
        self, request: CheckoutRequest, requester: Identity | None = None
    ) -> CheckoutResult:
        """Capture an approved order and issue its tickets.

        Raises:
            InvalidInputError: Missing order id, customer data or items.
            EventNotFoundError / TicketTypeNotFoundError: Before any capture.
            PaymentFailedError: The processor could not capture.
            PaymentNotCompletedError: The capture did not complete.
        """
        customer = request.customer
        require(
            {
                "order_id": request.order_id.strip(),
                "event_id": request.event_id,
                "customer_name": customer.name.strip(),
                "customer_email": customer.contact.normalized_email,
            }
        )
        if not request.items:
            raise InvalidInputError("At least one ticket is required")

        existing = self._tickets.find_by_order(request.order_id)
        if existing:
            logger.info("Order %s already fulfilled, returning its tickets", request.order_id)
            return CheckoutResult(
                order_id=request.order_id,
                tickets=existing,
                already_fulfilled=True,
                capture_id=existing[0].capture_id,
                user_id=existing[0].user_id,
            )

        event, _ = self._issuance.resolve_items(request.event_id, request.items)

        capture = self._payments.capture(request.order_id)
        if not capture.completed:
            logger.warning("Order %s captured with status %s", request.order_id, capture.status)
            raise PaymentNotCompletedError(capture.status)

        identity, custom_token, needs_recovery = self._resolve_identity(customer, requester)
        tickets = self._issuance.issue_tickets(
            IssueRequest(
                event_id=request.event_id,
                items=request.items,
                purchaser=customer.contact,
                identity=identity,
                order_id=request.order_id,
                capture_id=capture.capture_id,
                created_via=(
                    PURCHASE_NEW_ACCOUNT if isinstance(identity, NewAccountIdentity) else PURCHASE
                ),
            )
        )

        linked_count = 0
        if isinstance(identity, NewAccountIdentity):
            linked_count = self._linking.link_orphan_tickets(
                identity.uid, customer.contact.normalized_email
            ).linked_count

        try:
            self._notifier.send_purchase_confirmation(customer.contact, event, tickets)
        except Exception:
            logger.exception("Purchase confirmation for order %s failed", request.order_id)
        if needs_recovery:
            try:
                self._notifier.send_account_recovery(customer.contact)
            except Exception:
                logger.exception("Account recovery e-mail for order %s failed", request.order_id)

        return CheckoutResult(
            order_id=request.order_id,
            tickets=tickets,
            capture_id=capture.capture_id,
            user_id=tickets[0].user_id if tickets else None,
            account_created=isinstance(identity, NewAccountIdentity),
            custom_token=custom_token,
            linked_count=linked_count,
        )

    def _resolve_identity(
        self, customer: CheckoutCustomer, requester: Identity | None
    ) -> tuple[ResolvedIdentity, str | None, bool]:
        """Return the identity to issue for, a sign-in token, and whether recovery mail is due."""
        email = customer.contact.normalized_email
        if requester is not None:
            return BoundIdentity(requester.uid), None, False
        if customer.create_account and customer.password:
            try:
                uid = self._identity.create_user(email, customer.password, customer.name.strip())
                token = self._identity.create_custom_token(uid)
            except AccountCreationFailedError as exc:
                logger.warning("Account creation for %s failed: %s", email, exc.details)
                return GuestIdentity(email), None, True
            return NewAccountIdentity(uid, token), token, False
        return GuestIdentity(email), None, False
