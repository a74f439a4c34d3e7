"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Self
from uuid import UUID, uuid4


@dataclass(frozen=True)
class EventId:
    """Unique identifier for an Event."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class TicketTypeId:
    """Unique identifier for a TicketType."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class TicketId:
    """Unique identifier for a Ticket."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    @classmethod
    def generate(cls) -> Self:
        return cls(value=uuid4())

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal
    currency: str = "MXN"

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    def __add__(self, other: "Money") -> "Money":
        if other.currency != self.currency:
            raise ValueError("Cannot add amounts in different currencies")
        return Money(self.amount + other.amount, self.currency)

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency}"

    @classmethod
    def zero(cls, currency: str = "MXN") -> "Money":
        return cls(Decimal("0"), currency)


@dataclass(frozen=True)
class Quantity:
    """Positive number of tickets requested in one line item."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 1:
            raise ValueError("Quantity must be at least 1")


@dataclass(frozen=True)
class Contact:
    """Name, email and phone of a purchaser or attendee."""

    name: str = ""
    email: str = ""
    phone: str = ""

    @property
    def normalized_email(self) -> str:
        return normalize_email(self.email)


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


class AccessType(Enum):
    """Which calendar days a ticket type grants entry to."""

    ALL_DAYS = "all_days"
    SPECIFIC_DAYS = "specific_days"
    ANY_SINGLE_DAY = "any_single_day"


class TicketStatus(Enum):
    PURCHASED = "purchased"
    CONFIGURED = "configured"
    GENERATED = "generated"
    USED = "used"


class RecoveryStatus(Enum):
    PENDING = "pending"
    RECOVERED = "recovered"
    EXPIRED = "expired"


class TicketAction(Enum):
    CHECKIN = "checkin"
    UNDO_CHECKIN = "undo_checkin"


class CheckInMethod(Enum):
    QR = "qr"
    MANUAL = "manual"


class Role(Enum):
    ADMIN = "admin"
    GESTOR = "gestor"
    COMPROBADOR = "comprobador"
    USUARIO = "usuario"


# Roles allowed to scan and validate tickets at the door.
VALIDATOR_ROLES = frozenset({Role.ADMIN, Role.GESTOR, Role.COMPROBADOR})
# Roles allowed to grant courtesy tickets and manage other people's tickets.
MANAGER_ROLES = frozenset({Role.ADMIN, Role.GESTOR})
