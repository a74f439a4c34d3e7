"""Interfaces for the collaborators the services consume.

Each one can be swapped for a fake in tests or for another provider in
production without touching the services.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ticketing.domain import Contact, Event, Identity, Ticket

COMPLETED = "COMPLETED"


@dataclass(frozen=True)
class PaymentCapture:
    """Outcome of capturing an approved payment order."""

    status: str
    capture_id: str = ""

    @property
    def completed(self) -> bool:
        return self.status == COMPLETED


class IdentityProvider(ABC):
    """Accounts, roles and sign-in tokens."""

    @abstractmethod
    def verify_token(self, token: str) -> Identity | None:
        """Return the identity a bearer token belongs to, or None."""
        ...

    @abstractmethod
    def get_user_id_by_email(self, email: str) -> str | None:
        ...

    @abstractmethod
    def user_exists(self, uid: str) -> bool:
        ...

    @abstractmethod
    def create_user(self, email: str, password: str, display_name: str = "") -> str:
        """Create an account and return its uid.

        Raises AccountCreationFailedError when the account cannot be created.
        """
        ...

    @abstractmethod
    def create_custom_token(self, uid: str) -> str:
        """Return a token the client can use to sign in as ``uid`` right away."""
        ...


class PaymentProcessor(ABC):
    @abstractmethod
    def capture(self, order_id: str) -> PaymentCapture:
        """Capture an approved order.

        Raises PaymentFailedError on transport or processor errors.
        """
        ...


class NotificationSender(ABC):
    """Outgoing e-mail. Callers treat every method as best-effort."""

    @abstractmethod
    def send_purchase_confirmation(
        self, recipient: Contact, event: Event, tickets: list[Ticket]
    ) -> None:
        ...

    @abstractmethod
    def send_courtesy_granted(
        self,
        recipient: Contact,
        event: Event,
        tickets: list[Ticket],
        will_link_on_registration: bool,
    ) -> None:
        ...

    @abstractmethod
    def send_account_recovery(self, recipient: Contact) -> None:
        """Tell a purchaser whose account could not be created how to claim tickets."""
        ...

    @abstractmethod
    def send_tickets_linked(self, email: str, count: int) -> None:
        ...

    @abstractmethod
    def send_ticket(self, recipient: Contact, event: Event, ticket: Ticket) -> None:
        """Send one ticket again, for a purchaser who lost the original e-mail."""
        ...
