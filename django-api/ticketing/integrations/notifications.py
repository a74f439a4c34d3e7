"""Plain-text e-mail notifications sent through Django's mail backend."""

import logging

from django.core.mail import EmailMessage

from ticketing.domain import Contact, Event, Ticket
from ticketing.integrations.interfaces import NotificationSender
from ticketing.rendering import make_qr_png

logger = logging.getLogger(__name__)


class EmailNotificationSender(NotificationSender):
    def __init__(self, from_email: str | None = None, app_url: str = "") -> None:
        self._from_email = from_email
        self._app_url = app_url.rstrip("/")

    def _send(self, to: str, subject: str, body: str, tickets: list[Ticket] = ()) -> None:
        message = EmailMessage(subject=subject, body=body, from_email=self._from_email, to=[to])
        for ticket in tickets:
            message.attach(f"ticket-{ticket.qr_id}.png", make_qr_png(ticket.qr_id), "image/png")
        message.send(fail_silently=False)
        logger.info("Sent '%s' to %s", subject, to)

    def _ticket_lines(self, tickets: list[Ticket]) -> str:
        return "\n".join(f"  - {t.ticket_type_name} ({t.qr_id})" for t in tickets)

    def send_purchase_confirmation(
        self, recipient: Contact, event: Event, tickets: list[Ticket]
    ) -> None:
        body = (
            f"Hi {recipient.name},\n\n"
            f"Thank you for your purchase for {event.name}.\n"
            f"Order: {tickets[0].order_id if tickets else ''}\n\n"
            f"{self._ticket_lines(tickets)}\n\n"
            f"Configure each ticket with the attendee's name at {self._app_url}/my-tickets\n"
        )
        self._send(recipient.email, f"Your tickets for {event.name}", body, tickets)

    def send_courtesy_granted(
        self,
        recipient: Contact,
        event: Event,
        tickets: list[Ticket],
        will_link_on_registration: bool,
    ) -> None:
        body = (
            f"Hi {recipient.name},\n\n"
            f"You have received {len(tickets)} courtesy ticket(s) for {event.name}.\n\n"
            f"{self._ticket_lines(tickets)}\n"
        )
        if will_link_on_registration:
            body += (
                f"\nCreate an account with this email at {self._app_url}/register "
                "and the tickets will appear in your account automatically.\n"
            )
        self._send(recipient.email, f"Courtesy tickets for {event.name}", body, tickets)

    def send_account_recovery(self, recipient: Contact) -> None:
        body = (
            f"Hi {recipient.name},\n\n"
            "Your purchase went through, but we could not create your account.\n"
            f"Register at {self._app_url}/register with {recipient.email} "
            "and your tickets will be linked to it.\n"
        )
        self._send(recipient.email, "Finish setting up your account", body)

    def send_tickets_linked(self, email: str, count: int) -> None:
        body = (
            f"We found {count} ticket(s) purchased with {email} and added them "
            f"to your account.\n\nSee them at {self._app_url}/my-tickets\n"
        )
        self._send(email, "Your tickets are now in your account", body)

    def send_ticket(self, recipient: Contact, event: Event, ticket: Ticket) -> None:
        body = (
            f"Hi {recipient.name},\n\n"
            f"Here is your ticket for {event.name} again.\n\n"
            f"{self._ticket_lines([ticket])}\n"
            f"Attendee: {ticket.attendee.name}\n\n"
            f"Download it at {self._app_url}/my-tickets\n"
        )
        self._send(recipient.email, f"Your ticket for {event.name}", body, [ticket])
