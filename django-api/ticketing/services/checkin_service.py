"""Check-in state machine.

A check-in consumes the event-local "today" on a ticket. The operator who
performed it may undo it within the undo window, on the same day. Every
transition runs as one locked read-modify-write and appends an audit entry.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from django.utils import timezone

from ticketing.domain import (
    CheckInMethod,
    Event,
    EventId,
    Identity,
    Ticket,
    TicketAction,
    TicketId,
    TicketLog,
    TicketStatus,
    TicketType,
    evaluate_access,
)
from ticketing.domain.errors import (
    CheckInRejectedError,
    EventEndedError,
    EventNotFoundError,
    EventNotStartedError,
    InvalidInputError,
    NothingToUndoError,
    TicketNotConfiguredError,
    TicketNotFoundError,
    TicketTypeNotFoundError,
    UnauthorizedUndoError,
    UndoExpiredError,
)
from ticketing.services.common import Clock, parse_id
from ticketing.stores.interfaces import EventStore, TicketStore

logger = logging.getLogger(__name__)

DEFAULT_UNDO_WINDOW = timedelta(minutes=5)
UNKNOWN_EVENT = "Unknown Event"
NOT_CONFIGURED = "Not configured"


@dataclass(frozen=True)
class CheckInResult:
    ticket: Ticket
    event: Event
    ticket_type: TicketType
    day: date
    undo_deadline: datetime
    can_undo: bool = True


@dataclass(frozen=True)
class UndoResult:
    ticket: Ticket
    day: date


@dataclass(frozen=True)
class PublicLookup:
    """What anyone holding the QR may learn about a ticket."""

    valid: bool
    event_name: str
    attendee_name: str
    status: TicketStatus


class CheckInService:
    def __init__(
        self,
        events: EventStore,
        tickets: TicketStore,
        clock: Clock = timezone.now,
        undo_window: timedelta = DEFAULT_UNDO_WINDOW,
    ) -> None:
        self._events = events
        self._tickets = tickets
        self._clock = clock
        self._undo_window = undo_window

    def check_in(self, qr_id: str, operator: Identity) -> CheckInResult:
        """Consume today's entry on the ticket behind a scanned QR code."""
        with self._tickets.locked_ticket(qr_id=qr_id) as ticket:
            if ticket is None:
                raise TicketNotFoundError(qr_id)
            return self._check_in(ticket, operator, CheckInMethod.QR)

    def manual_check_in(
        self, ticket_id: str, event_id: str, operator: Identity, notes: str = ""
    ) -> CheckInResult:
        """Scanner fallback when the QR cannot be read: look the ticket up by id."""
        tid = parse_id(TicketId, ticket_id, "ticket id")
        eid = parse_id(EventId, event_id, "event id")
        with self._tickets.locked_ticket(ticket_id=tid) as ticket:
            if ticket is None:
                raise TicketNotFoundError(ticket_id)
            if ticket.event_id != eid:
                raise InvalidInputError("Ticket does not belong to this event")
            return self._check_in(ticket, operator, CheckInMethod.MANUAL, notes)

    def undo_check_in(self, qr_id: str, operator: Identity) -> UndoResult:
        with self._tickets.locked_ticket(qr_id=qr_id) as ticket:
            if ticket is None:
                raise TicketNotFoundError(qr_id)
            event = self._event_for(ticket)
            now = self._clock()
            today = event.local_date(now)

            if ticket.can_undo_until is None or now > ticket.can_undo_until:
                raise UndoExpiredError(int(self._undo_window.total_seconds() // 60))
            if ticket.last_checkin_by != operator.uid:
                raise UnauthorizedUndoError()
            if ticket.last_checkin_day != today:
                raise NothingToUndoError()

            updated = ticket.without_check_in(today, now)
            self._tickets.save_ticket(updated)
            self._tickets.append_log(
                TicketLog(
                    ticket_id=ticket.id,
                    qr_id=ticket.qr_id,
                    action=TicketAction.UNDO_CHECKIN,
                    performed_by=operator.uid,
                    performed_at=now,
                    day=today,
                    event_id=ticket.event_id,
                )
            )
        logger.info("Check-in of %s on %s undone by %s", ticket.qr_id, today, operator.uid)
        return UndoResult(ticket=updated, day=today)

    def public_lookup(self, qr_id: str) -> PublicLookup:
        """Pre-scan lookup: any registered QR code is valid.

        Whether the ticket can be used today is decided at check-in.
        """
        ticket = self._tickets.get_ticket_by_qr_id(qr_id)
        if ticket is None:
            raise TicketNotFoundError(qr_id)
        event = self._events.get_event(ticket.event_id)
        return PublicLookup(
            valid=True,
            event_name=event.name if event else UNKNOWN_EVENT,
            attendee_name=ticket.attendee.name or NOT_CONFIGURED,
            status=ticket.status,
        )

    def _event_for(self, ticket: Ticket) -> Event:
        event = self._events.get_event(ticket.event_id)
        if event is None:
            raise EventNotFoundError(str(ticket.event_id))
        return event

    def _check_in(
        self, ticket: Ticket, operator: Identity, method: CheckInMethod, notes: str = ""
    ) -> CheckInResult:
        event = self._event_for(ticket)
        if not ticket.is_ready_for_check_in:
            raise TicketNotConfiguredError(ticket.status.value)

        now = self._clock()
        today = event.local_date(now)
        if today < event.start_date:
            raise EventNotStartedError(event.start_date)
        if today > event.end_date:
            raise EventEndedError(event.end_date)

        ticket_type = self._events.get_ticket_type(ticket.ticket_type_id)
        if ticket_type is None:
            raise TicketTypeNotFoundError(str(ticket.ticket_type_id))

        decision = evaluate_access(
            ticket_type.access_type, ticket.authorized_days, ticket.used_days, today
        )
        if not decision.allowed:
            logger.warning(
                "Check-in of %s refused for %s: %s", ticket.qr_id, operator.uid, decision.reason
            )
            raise CheckInRejectedError(decision.reason, decision.details)

        updated = ticket.with_check_in(decision.day, operator.uid, now, self._undo_window)
        self._tickets.save_ticket(updated)
        self._tickets.append_log(
            TicketLog(
                ticket_id=ticket.id,
                qr_id=ticket.qr_id,
                action=TicketAction.CHECKIN,
                performed_by=operator.uid,
                performed_at=now,
                day=decision.day,
                event_id=ticket.event_id,
                method=method,
                notes=notes,
            )
        )
        logger.info(
            "Checked in %s for %s by %s (%s)",
            ticket.qr_id,
            decision.day,
            operator.uid,
            method.value,
        )
        return CheckInResult(
            ticket=updated,
            event=event,
            ticket_type=ticket_type,
            day=decision.day,
            undo_deadline=updated.can_undo_until,
        )
