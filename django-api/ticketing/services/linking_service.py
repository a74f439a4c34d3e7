"""Orphan ticket recovery.

Tickets bought or granted without an account keep the purchaser's e-mail;
when an account with that e-mail appears, they are bound to it.
"""

import logging
from dataclasses import dataclass, field

from django.utils import timezone

from ticketing.domain import Identity, RecoveryStatus, Ticket, TicketId
from ticketing.domain.errors import (
    TicketAlreadyLinkedError,
    TicketNotFoundError,
    UserNotFoundError,
)
from ticketing.domain.value_objects import normalize_email
from ticketing.integrations.interfaces import IdentityProvider, NotificationSender
from ticketing.services.common import Clock, parse_id
from ticketing.services.issuance_service import COURTESY_STANDALONE
from ticketing.stores.interfaces import TicketStore

logger = logging.getLogger(__name__)

AUTO_RECOVERY = "auto_recovery"
MANUAL_ADMIN = "manual_admin"


@dataclass(frozen=True)
class LinkResult:
    linked_count: int = 0
    ticket_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class OrphanListing:
    tickets: list[Ticket] = field(default_factory=list)
    stats: dict[str, int] = field(default_factory=dict)


class LinkingService:
    """Binds unbound tickets to user accounts."""

    def __init__(
        self,
        tickets: TicketStore,
        identity: IdentityProvider,
        notifier: NotificationSender,
        clock: Clock = timezone.now,
    ) -> None:
        self._tickets = tickets
        self._identity = identity
        self._notifier = notifier
        self._clock = clock

    def link_orphan_tickets(self, uid: str, email: str) -> LinkResult:
        """Bind every unbound ticket bought with ``email`` to ``uid``.

        Runs from signup and login hooks, so it never raises: failures are
        logged and reported as nothing linked. Calling it again links nothing.
        """
        email = normalize_email(email)
        if not uid or not email:
            return LinkResult()

        try:
            now = self._clock()
            candidates = self._tickets.find_unbound_by_email(email)
            bound = [ticket.bound_to(uid, now, AUTO_RECOVERY) for ticket in candidates]
            written = self._tickets.bind_tickets(bound) if bound else []
        except Exception:
            logger.exception("Linking orphan tickets for user %s failed", uid)
            return LinkResult()

        if not written:
            return LinkResult()

        logger.info("Linked %d orphan ticket(s) to user %s", len(written), uid)
        try:
            self._notifier.send_tickets_linked(email, len(written))
        except Exception:
            logger.exception("Linked-tickets notification to %s failed", email)
        return LinkResult(len(written), tuple(str(ticket.id) for ticket in written))

    def link_ticket_manually(self, ticket_id: str, uid: str, admin: Identity) -> Ticket:
        """Bind one ticket to an account chosen by an administrator."""
        ticket = self._tickets.get_ticket(parse_id(TicketId, ticket_id, "ticket id"))
        if ticket is None:
            raise TicketNotFoundError(ticket_id)
        if not self._identity.user_exists(uid):
            raise UserNotFoundError(uid)
        if ticket.is_bound:
            raise TicketAlreadyLinkedError()

        bound = ticket.bound_to(uid, self._clock(), MANUAL_ADMIN, by=admin.uid)
        written = self._tickets.bind_tickets([bound])
        if not written:
            raise TicketAlreadyLinkedError()
        logger.info("Admin %s linked ticket %s to user %s", admin.uid, ticket.id, uid)
        return written[0]

    def list_orphan_tickets(self, limit: int = 100) -> OrphanListing:
        tickets = self._tickets.find_unbound(limit, exclude_created_via=(COURTESY_STANDALONE,))
        stats = {"total": len(tickets)}
        for status in RecoveryStatus:
            stats[status.value] = sum(
                1
                for ticket in tickets
                if ticket.orphan_recovery_data is not None
                and ticket.orphan_recovery_data.recovery_status is status
            )
        return OrphanListing(tickets=tickets, stats=stats)
