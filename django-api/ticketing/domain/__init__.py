from ticketing.domain.access_policy import AccessDecision, evaluate_access
from ticketing.domain.models import (
    BoundIdentity,
    Event,
    GuestIdentity,
    Identity,
    NewAccountIdentity,
    OrphanRecoveryData,
    ResolvedIdentity,
    Ticket,
    TicketLog,
    TicketType,
)
from ticketing.domain.value_objects import (
    AccessType,
    CheckInMethod,
    Contact,
    EventId,
    Money,
    Quantity,
    RecoveryStatus,
    Role,
    TicketAction,
    TicketId,
    TicketStatus,
    TicketTypeId,
)

__all__ = [
    "AccessDecision",
    "evaluate_access",
    "Event",
    "TicketType",
    "Ticket",
    "TicketLog",
    "OrphanRecoveryData",
    "Identity",
    "BoundIdentity",
    "GuestIdentity",
    "NewAccountIdentity",
    "ResolvedIdentity",
    "EventId",
    "TicketTypeId",
    "TicketId",
    "Money",
    "Quantity",
    "Contact",
    "AccessType",
    "TicketStatus",
    "RecoveryStatus",
    "TicketAction",
    "CheckInMethod",
    "Role",
]
