"""Ticket issuance for paid purchases and courtesy grants.

One call produces one order: every ticket shares the order id, gets its own
QR id, and has its authorized days fixed from the ticket type and event.
"""

import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime

from django.utils import timezone

from ticketing.domain import (
    BoundIdentity,
    Contact,
    Event,
    EventId,
    GuestIdentity,
    Identity,
    Money,
    NewAccountIdentity,
    OrphanRecoveryData,
    Quantity,
    ResolvedIdentity,
    Ticket,
    TicketId,
    TicketStatus,
    TicketType,
    TicketTypeId,
)
from ticketing.domain.errors import (
    EventNotFoundError,
    InvalidInputError,
    TicketTypeNotFoundError,
)
from ticketing.domain.value_objects import normalize_email
from ticketing.integrations.interfaces import IdentityProvider, NotificationSender
from ticketing.services.common import Clock, parse_id, require
from ticketing.stores.interfaces import EventStore, TicketStore

logger = logging.getLogger(__name__)

PURCHASE = "purchase"
PURCHASE_NEW_ACCOUNT = "purchase_new_account"
COURTESY_LINKED_IMMEDIATE = "admin_courtesy_linked_immediate"
COURTESY_LINKED = "admin_courtesy_linked"
COURTESY_STANDALONE = "admin_courtesy_standalone"


@dataclass(frozen=True)
class LineItem:
    ticket_type_id: str
    quantity: int


@dataclass(frozen=True)
class Courtesy:
    courtesy_type: str
    notes: str = ""


@dataclass(frozen=True)
class IssueRequest:
    event_id: str
    items: tuple[LineItem, ...]
    purchaser: Contact
    identity: ResolvedIdentity
    order_id: str | None = None
    capture_id: str = ""
    courtesy: Courtesy | None = None
    created_by: str = ""
    created_via: str = PURCHASE


@dataclass(frozen=True)
class CourtesyRequest:
    event_id: str
    ticket_type_id: str
    quantity: int
    requester: Contact
    courtesy_type: str
    notes: str = ""
    auto_link: bool = True
    send_email: bool = False


@dataclass(frozen=True)
class CourtesyGrant:
    """Courtesy tickets created together with how they were linked."""

    order_id: str
    tickets: list[Ticket] = field(default_factory=list)
    auto_link_enabled: bool = True
    immediately_linked: bool = False
    linked_user_id: str | None = None

    @property
    def will_link_on_registration(self) -> bool:
        return self.auto_link_enabled and not self.immediately_linked


def new_order_id(prefix: str, now: datetime) -> str:
    return f"{prefix}_{int(now.timestamp() * 1000)}_{secrets.token_hex(3)}"


def new_qr_id(prefix: str = "tkt") -> str:
    return f"{prefix}_{secrets.token_urlsafe(16)}"


class TicketIssuanceService:
    """Creates ticket records for purchases and courtesy grants."""

    def __init__(
        self,
        events: EventStore,
        tickets: TicketStore,
        identity: IdentityProvider,
        notifier: NotificationSender,
        clock: Clock = timezone.now,
        max_courtesy_quantity: int = 10,
    ) -> None:
        self._events = events
        self._tickets = tickets
        self._identity = identity
        self._notifier = notifier
        self._clock = clock
        self._max_courtesy_quantity = max_courtesy_quantity

    def resolve_items(
        self, event_id: str, items: tuple[LineItem, ...]
    ) -> tuple[Event, list[tuple[TicketType, Quantity]]]:
        """Load the event and every ticket type a request refers to.

        Raises:
            InvalidInputError: Malformed ids, empty items, bad quantities, or a
                ticket type that belongs to another event.
            EventNotFoundError / TicketTypeNotFoundError: Unknown references.
        """
        if not items:
            raise InvalidInputError("At least one ticket is required")
        eid = parse_id(EventId, event_id, "event id")
        event = self._events.get_event(eid)
        if event is None:
            raise EventNotFoundError(event_id)

        resolved = []
        for item in items:
            try:
                quantity = Quantity(int(item.quantity))
            except (TypeError, ValueError):
                raise InvalidInputError(f"Invalid quantity: {item.quantity!r}") from None
            ttid = parse_id(TicketTypeId, item.ticket_type_id, "ticket type id")
            ticket_type = self._events.get_ticket_type(ttid)
            if ticket_type is None:
                raise TicketTypeNotFoundError(item.ticket_type_id)
            if ticket_type.event_id != event.id:
                raise InvalidInputError(
                    f"Ticket type {item.ticket_type_id} does not belong to event {event_id}"
                )
            resolved.append((ticket_type, quantity))
        return event, resolved

    def issue_tickets(self, request: IssueRequest) -> list[Ticket]:
        """Create one ticket per unit of quantity in a single atomic write."""
        event, resolved = self.resolve_items(request.event_id, request.items)
        now = self._clock()
        prefix = "courtesy" if request.courtesy else "order"
        order_id = request.order_id or new_order_id(prefix, now)
        user_id, recovery = self._ownership(request, now)

        tickets = []
        for ticket_type, quantity in resolved:
            authorized_days = ticket_type.authorized_days_for(event)
            if request.courtesy is not None:
                amount = Money.zero(ticket_type.price.currency)
            else:
                amount = ticket_type.price
            for _ in range(quantity.value):
                tickets.append(
                    Ticket(
                        id=TicketId.generate(),
                        qr_id=new_qr_id("courtesy" if request.courtesy else "tkt"),
                        order_id=order_id,
                        event_id=event.id,
                        ticket_type_id=ticket_type.id,
                        ticket_type_name=ticket_type.name,
                        status=TicketStatus.PURCHASED,
                        customer=Contact(
                            name=request.purchaser.name.strip(),
                            email=request.purchaser.normalized_email,
                            phone=request.purchaser.phone.strip(),
                        ),
                        amount_paid=amount,
                        authorized_days=authorized_days,
                        user_id=user_id,
                        is_courtesy=request.courtesy is not None,
                        courtesy_type=request.courtesy.courtesy_type if request.courtesy else "",
                        courtesy_notes=request.courtesy.notes if request.courtesy else "",
                        capture_id=request.capture_id,
                        created_via=request.created_via,
                        created_by=request.created_by,
                        orphan_recovery_data=recovery,
                        created_at=now,
                        updated_at=now,
                    )
                )

        created = self._tickets.create_tickets(tickets)
        logger.info(
            "Issued %d ticket(s) for order %s (event %s, via %s)",
            len(created),
            order_id,
            event.id,
            request.created_via,
        )

        for ticket_type, quantity in resolved:
            try:
                self._events.increment_sold_count(ticket_type.id, quantity.value)
            except Exception:
                logger.exception("Could not update sold count for ticket type %s", ticket_type.id)
        return created

    def issue_courtesy_tickets(self, grant: CourtesyRequest, admin: Identity) -> CourtesyGrant:
        """Grant complimentary tickets to a requester.

        With auto-link on, an existing account for the requester's e-mail gets
        the tickets right away; otherwise they wait for that e-mail to sign up.
        """
        require(
            {
                "event_id": grant.event_id,
                "ticket_type_id": grant.ticket_type_id,
                "requester_name": grant.requester.name.strip(),
                "requester_email": grant.requester.normalized_email,
                "courtesy_type": grant.courtesy_type.strip(),
            }
        )
        if not 1 <= grant.quantity <= self._max_courtesy_quantity:
            raise InvalidInputError(
                f"Quantity must be between 1 and {self._max_courtesy_quantity}"
            )

        email = grant.requester.normalized_email
        existing_uid = self._identity.get_user_id_by_email(email) if grant.auto_link else None
        if existing_uid is not None:
            identity: ResolvedIdentity = BoundIdentity(existing_uid)
            created_via = COURTESY_LINKED_IMMEDIATE
        elif grant.auto_link:
            identity = GuestIdentity(email, auto_link=True)
            created_via = COURTESY_LINKED
        else:
            identity = GuestIdentity(email, auto_link=False)
            created_via = COURTESY_STANDALONE

        tickets = self.issue_tickets(
            IssueRequest(
                event_id=grant.event_id,
                items=(LineItem(grant.ticket_type_id, grant.quantity),),
                purchaser=grant.requester,
                identity=identity,
                courtesy=Courtesy(grant.courtesy_type.strip(), grant.notes.strip()),
                created_by=admin.uid,
                created_via=created_via,
            )
        )
        result = CourtesyGrant(
            order_id=tickets[0].order_id,
            tickets=tickets,
            auto_link_enabled=grant.auto_link,
            immediately_linked=existing_uid is not None,
            linked_user_id=existing_uid,
        )

        if grant.send_email:
            try:
                event = self._events.get_event(tickets[0].event_id)
                self._notifier.send_courtesy_granted(
                    grant.requester, event, tickets, result.will_link_on_registration
                )
            except Exception:
                logger.exception("Courtesy notification for order %s failed", result.order_id)
        return result

    def _ownership(
        self, request: IssueRequest, now: datetime
    ) -> tuple[str | None, OrphanRecoveryData | None]:
        identity = request.identity
        if isinstance(identity, (BoundIdentity, NewAccountIdentity)):
            return identity.uid, None
        if identity.auto_link:
            return None, OrphanRecoveryData(
                target_email=normalize_email(identity.email),
                created_via=request.created_via,
                created_at=now,
                is_courtesy=request.courtesy is not None,
            )
        return None, None
