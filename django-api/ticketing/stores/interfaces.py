"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager

from ticketing.domain import Event, EventId, Ticket, TicketId, TicketLog, TicketType, TicketTypeId


class EventStore(ABC):
    """Interface for event and ticket type persistence operations."""

    @abstractmethod
    def get_event(self, event_id: EventId) -> Event | None:
        """Return an event by ID, or None if not found."""
        ...

    @abstractmethod
    def get_ticket_type(self, ticket_type_id: TicketTypeId) -> TicketType | None:
        """Return a ticket type by ID, or None if not found."""
        ...

    @abstractmethod
    def increment_sold_count(self, ticket_type_id: TicketTypeId, quantity: int) -> None:
        """Atomically add ``quantity`` to the ticket type's sold counter."""
        ...

    @abstractmethod
    def list_published_events(self) -> list[Event]:
        """Published events, earliest start first."""
        ...


class TicketStore(ABC):
    """Interface for ticket and ticket log persistence operations."""

    @abstractmethod
    def get_ticket(self, ticket_id: TicketId) -> Ticket | None:
        ...

    @abstractmethod
    def get_ticket_by_qr_id(self, qr_id: str) -> Ticket | None:
        ...

    @abstractmethod
    def locked_ticket(
        self, *, qr_id: str | None = None, ticket_id: TicketId | None = None
    ) -> AbstractContextManager[Ticket | None]:
        """Open a transaction holding the ticket row for read-modify-write.

        Yields the ticket (or None). ``save_ticket`` and ``append_log`` calls
        made inside the block commit together when it exits cleanly and roll
        back when it raises.
        """
        ...

    @abstractmethod
    def create_tickets(self, tickets: list[Ticket]) -> list[Ticket]:
        """Persist all tickets in one atomic commit, or none of them."""
        ...

    @abstractmethod
    def save_ticket(self, ticket: Ticket) -> Ticket:
        """Overwrite the stored ticket with this state.

        Callers must hold the row through ``locked_ticket`` and pass a ticket
        read inside that block.
        """
        ...

    @abstractmethod
    def bind_tickets(self, tickets: list[Ticket]) -> list[Ticket]:
        """Atomically persist identity bindings for tickets still unbound.

        Only the binding fields are written; check-in state and attendee data
        on the stored row are left as they are. Tickets that gained a user in
        the meantime are skipped. Returns the stored tickets actually bound.
        """
        ...

    @abstractmethod
    def find_by_order(self, order_id: str) -> list[Ticket]:
        ...

    @abstractmethod
    def find_by_user(self, uid: str) -> list[Ticket]:
        ...

    @abstractmethod
    def find_by_customer_email(self, email: str) -> list[Ticket]:
        """Tickets whose purchaser email matches, case-insensitively."""
        ...

    @abstractmethod
    def find_unbound_by_email(self, email: str) -> list[Ticket]:
        """Tickets with no user whose purchaser email matches."""
        ...

    @abstractmethod
    def find_unbound(
        self, limit: int = 100, exclude_created_via: tuple[str, ...] = ()
    ) -> list[Ticket]:
        """Tickets with no user, newest first, skipping the given origins."""
        ...

    @abstractmethod
    def find_courtesy(self, limit: int = 100) -> list[Ticket]:
        """Courtesy tickets, newest first."""
        ...

    @abstractmethod
    def find_by_event(self, event_id: EventId) -> list[Ticket]:
        ...

    @abstractmethod
    def append_log(self, entry: TicketLog) -> None:
        ...

    @abstractmethod
    def logs_for_ticket(self, ticket_id: TicketId) -> list[TicketLog]:
        """Audit entries for a ticket, oldest first."""
        ...


class DocumentStorage(ABC):
    """Where rendered ticket documents are kept."""

    @abstractmethod
    def save(self, name: str, content: bytes) -> str:
        """Store ``content`` and return the path it can be retrieved from."""
        ...
