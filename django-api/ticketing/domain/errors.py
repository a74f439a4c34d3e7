"""Domain error codes for the ticketing module."""

from dataclasses import dataclass
from datetime import date
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    TICKET_TYPE_NOT_FOUND = "TICKET_TYPE_NOT_FOUND"
    TICKET_NOT_FOUND = "TICKET_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    INVALID_INPUT = "INVALID_INPUT"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_CONFIGURED = "NOT_CONFIGURED"
    EVENT_NOT_STARTED = "EVENT_NOT_STARTED"
    EVENT_ENDED = "EVENT_ENDED"
    NOT_AUTHORIZED_TODAY = "NOT_AUTHORIZED_TODAY"
    ALREADY_USED = "ALREADY_USED"
    ALREADY_CHECKED_IN_TODAY = "ALREADY_CHECKED_IN_TODAY"
    UNDO_EXPIRED = "UNDO_EXPIRED"
    UNAUTHORIZED_UNDO = "UNAUTHORIZED_UNDO"
    NOTHING_TO_UNDO = "NOTHING_TO_UNDO"
    PAYMENT_NOT_COMPLETED = "PAYMENT_NOT_COMPLETED"
    PAYMENT_FAILED = "PAYMENT_FAILED"
    ACCOUNT_CREATION_FAILED = "ACCOUNT_CREATION_FAILED"
    ALREADY_LINKED = "ALREADY_LINKED"
    TICKET_LOCKED = "TICKET_LOCKED"
    DOCUMENT_GENERATION_FAILED = "DOCUMENT_GENERATION_FAILED"
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    DOCUMENT_MISSING = "DOCUMENT_MISSING"
    EMAIL_FAILED = "EMAIL_FAILED"


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code, user-safe message and operator details."""

    code: ErrorCode
    message: str
    details: str = ""

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message="Event not found",
            details="The event associated with this request no longer exists",
        )
        self.event_id = event_id


class TicketTypeNotFoundError(DomainError):
    """Raised when a ticket type is not found."""

    def __init__(self, ticket_type_id: str) -> None:
        super().__init__(
            code=ErrorCode.TICKET_TYPE_NOT_FOUND,
            message="Ticket type not found",
        )
        self.ticket_type_id = ticket_type_id


class TicketNotFoundError(DomainError):
    """Raised when a ticket cannot be resolved by id or QR id."""

    def __init__(self, reference: str) -> None:
        super().__init__(
            code=ErrorCode.TICKET_NOT_FOUND,
            message="Ticket not found",
            details="This QR code is not registered in our system",
        )
        self.reference = reference


class UserNotFoundError(DomainError):
    def __init__(self, user_id: str) -> None:
        super().__init__(code=ErrorCode.USER_NOT_FOUND, message="User not found")
        self.user_id = user_id


class InvalidInputError(DomainError):
    """Raised when required fields are missing or out of range."""

    def __init__(self, details: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_INPUT,
            message="Invalid input",
            details=details,
        )


class ForbiddenError(DomainError):
    def __init__(self, details: str = "Insufficient permissions") -> None:
        super().__init__(code=ErrorCode.FORBIDDEN, message="Forbidden", details=details)


class TicketNotConfiguredError(DomainError):
    """Raised when a ticket has no attendee yet and cannot be used."""

    def __init__(self, status: str) -> None:
        super().__init__(
            code=ErrorCode.NOT_CONFIGURED,
            message="Ticket not configured",
            details=(
                f"This ticket has status '{status}' and needs to be configured "
                "with attendee information first"
            ),
        )


class EventNotStartedError(DomainError):
    def __init__(self, start_date: date) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_STARTED,
            message="Event not started",
            details=f"This event starts on {start_date.isoformat()}",
        )


class EventEndedError(DomainError):
    def __init__(self, end_date: date) -> None:
        super().__init__(
            code=ErrorCode.EVENT_ENDED,
            message="Event ended",
            details=f"This event ended on {end_date.isoformat()}",
        )


class CheckInRejectedError(DomainError):
    """Raised when the access policy refuses today's check-in."""

    def __init__(self, code: ErrorCode, details: str) -> None:
        messages = {
            ErrorCode.NOT_AUTHORIZED_TODAY: "Not authorized for today",
            ErrorCode.ALREADY_USED: "Already used",
            ErrorCode.ALREADY_CHECKED_IN_TODAY: "Already checked in today",
        }
        super().__init__(code=code, message=messages[code], details=details)


class UndoExpiredError(DomainError):
    def __init__(self, window_minutes: int) -> None:
        super().__init__(
            code=ErrorCode.UNDO_EXPIRED,
            message="Undo time expired",
            details=f"You can only undo check-ins within {window_minutes} minutes",
        )


class UnauthorizedUndoError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.UNAUTHORIZED_UNDO,
            message="Unauthorized undo",
            details="You can only undo your own check-ins",
        )


class NothingToUndoError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.NOTHING_TO_UNDO,
            message="No check-in to undo",
            details="No check-in found for today",
        )


class PaymentNotCompletedError(DomainError):
    def __init__(self, status: str) -> None:
        super().__init__(
            code=ErrorCode.PAYMENT_NOT_COMPLETED,
            message="Payment not completed",
            details=f"Payment processor reported status '{status}'",
        )
        self.status = status


class PaymentFailedError(DomainError):
    """Raised when the payment processor cannot be reached or refuses capture."""

    def __init__(self, details: str = "Payment capture failed") -> None:
        super().__init__(
            code=ErrorCode.PAYMENT_FAILED,
            message="Payment processing failed",
            details=details,
        )


class AccountCreationFailedError(DomainError):
    def __init__(self, email: str, details: str = "") -> None:
        super().__init__(
            code=ErrorCode.ACCOUNT_CREATION_FAILED,
            message="Account could not be created",
            details=details,
        )
        self.email = email


class TicketAlreadyLinkedError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_LINKED,
            message="Ticket is already linked to a user",
        )


class TicketLockedError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.TICKET_LOCKED,
            message="Cannot update used tickets",
        )


class DocumentGenerationFailedError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.DOCUMENT_GENERATION_FAILED,
            message="Ticket document could not be generated",
        )


class OrderNotFoundError(DomainError):
    def __init__(self, order_id: str) -> None:
        super().__init__(
            code=ErrorCode.ORDER_NOT_FOUND,
            message="No tickets found for this order",
        )
        self.order_id = order_id


class DocumentMissingError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.DOCUMENT_MISSING,
            message="No document found for this ticket",
            details="Generate the ticket document first",
        )


class EmailFailedError(DomainError):
    """Raised when an e-mail the caller explicitly asked for cannot be sent."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.EMAIL_FAILED,
            message="Email could not be sent",
        )
