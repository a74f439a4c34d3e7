"""Attendee configuration and ticket documents.

Writes re-read the ticket under ``locked_ticket`` and change only their own
fields, so a check-in committed meanwhile is never overwritten. Rendering
runs outside the lock.
"""

import logging
from dataclasses import replace
from typing import Callable

from django.utils import timezone

from ticketing.domain import Contact, Event, Identity, Ticket, TicketId, TicketStatus
from ticketing.domain.errors import (
    DocumentGenerationFailedError,
    DocumentMissingError,
    EmailFailedError,
    EventNotFoundError,
    ForbiddenError,
    TicketLockedError,
    TicketNotConfiguredError,
    TicketNotFoundError,
)
from ticketing.domain.value_objects import MANAGER_ROLES, normalize_email
from ticketing.integrations.interfaces import NotificationSender
from ticketing.rendering import render_ticket_pdf
from ticketing.services.common import Clock, parse_id
from ticketing.stores.interfaces import DocumentStorage, EventStore, TicketStore

logger = logging.getLogger(__name__)

Renderer = Callable[[Ticket, Event], bytes]


def _check_access(ticket: Ticket | None, reference: str, requester: Identity) -> Ticket:
    if ticket is None:
        raise TicketNotFoundError(reference)
    if not (
        requester.has_any_role(MANAGER_ROLES) or ticket.belongs_to(requester.uid, requester.email)
    ):
        raise ForbiddenError("You can only access your own tickets")
    return ticket


class TicketService:
    """Owner-facing operations on a single ticket."""

    def __init__(
        self,
        events: EventStore,
        tickets: TicketStore,
        documents: DocumentStorage,
        notifier: NotificationSender,
        renderer: Renderer = render_ticket_pdf,
        clock: Clock = timezone.now,
    ) -> None:
        self._events = events
        self._tickets = tickets
        self._documents = documents
        self._notifier = notifier
        self._renderer = renderer
        self._clock = clock

    def get_ticket(self, ticket_id: str, requester: Identity) -> Ticket:
        """Return a ticket its owner, an admin or a gestor may see.

        Raises:
            InvalidInputError: If ticket_id is malformed.
            TicketNotFoundError: If the ticket does not exist.
            ForbiddenError: If the requester may not see it.
        """
        ticket = self._tickets.get_ticket(parse_id(TicketId, ticket_id, "ticket id"))
        return _check_access(ticket, ticket_id, requester)

    def configure_attendee(
        self,
        ticket_id: str,
        requester: Identity,
        attendee_name: str | None = None,
        attendee_email: str | None = None,
        attendee_phone: str | None = None,
        special_requirements: str | None = None,
    ) -> Ticket:
        """Set who will attend. ``None`` leaves a field unchanged."""
        tid = parse_id(TicketId, ticket_id, "ticket id")
        with self._tickets.locked_ticket(ticket_id=tid) as current:
            ticket = _check_access(current, ticket_id, requester)
            if ticket.is_used:
                raise TicketLockedError()

            now = self._clock()
            attendee = Contact(
                name=ticket.attendee.name if attendee_name is None else attendee_name.strip(),
                email=(
                    ticket.attendee.email
                    if attendee_email is None
                    else normalize_email(attendee_email)
                ),
                phone=ticket.attendee.phone if attendee_phone is None else attendee_phone.strip(),
            )
            changes = {"attendee": attendee, "updated_at": now}
            if special_requirements is not None:
                changes["special_requirements"] = special_requirements.strip()
            if ticket.status is TicketStatus.PURCHASED and attendee.name:
                changes["status"] = TicketStatus.CONFIGURED
                changes["configured_at"] = now
            updated = self._tickets.save_ticket(replace(ticket, **changes))
        logger.info("Ticket %s configured by %s", ticket.id, requester.uid)

        if updated.attendee.name:
            try:
                updated = self._materialize(updated)
            except Exception:
                logger.exception("Document for ticket %s could not be generated", ticket.id)
        return updated

    def generate_document(self, ticket_id: str, requester: Identity) -> Ticket:
        ticket = self.get_ticket(ticket_id, requester)
        if not ticket.attendee.name:
            raise TicketNotConfiguredError(ticket.status.value)
        return self._materialize(ticket)

    def resend_ticket_email(self, ticket_id: str, requester: Identity) -> Ticket:
        """E-mail an already generated ticket to its purchaser again.

        Raises:
            TicketNotConfiguredError: If the ticket has no attendee.
            DocumentMissingError: If no document was generated yet.
            EmailFailedError: If the mail backend refused the message.
        """
        ticket = self.get_ticket(ticket_id, requester)
        if not ticket.attendee.name:
            raise TicketNotConfiguredError(ticket.status.value)
        if not ticket.pdf_path:
            raise DocumentMissingError()
        event = self._event_for(ticket)

        try:
            self._notifier.send_ticket(ticket.customer, event, ticket)
        except Exception as exc:
            logger.warning("Resending ticket %s failed: %s", ticket.id, exc)
            raise EmailFailedError() from exc
        logger.info(
            "Ticket %s re-sent to %s by %s", ticket.id, ticket.customer.email, requester.uid
        )
        return ticket

    def _event_for(self, ticket: Ticket) -> Event:
        event = self._events.get_event(ticket.event_id)
        if event is None:
            raise EventNotFoundError(str(ticket.event_id))
        return event

    def _materialize(self, ticket: Ticket) -> Ticket:
        event = self._event_for(ticket)
        try:
            path = self._documents.save(f"{ticket.qr_id}.pdf", self._renderer(ticket, event))
        except Exception as exc:
            logger.warning("Rendering ticket %s failed: %s", ticket.id, exc)
            raise DocumentGenerationFailedError() from exc

        with self._tickets.locked_ticket(ticket_id=ticket.id) as current:
            if current is None:
                raise TicketNotFoundError(str(ticket.id))
            status = current.status
            if status in (TicketStatus.PURCHASED, TicketStatus.CONFIGURED):
                status = TicketStatus.GENERATED
            updated = self._tickets.save_ticket(
                replace(current, pdf_path=path, status=status, updated_at=self._clock())
            )
        logger.info("Generated document %s for ticket %s", path, ticket.id)
        return updated
