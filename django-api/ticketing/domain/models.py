"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in ticketing/models.py (persistence layer).
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from ticketing.domain.value_objects import (
    AccessType,
    CheckInMethod,
    Contact,
    EventId,
    Money,
    RecoveryStatus,
    Role,
    TicketAction,
    TicketId,
    TicketStatus,
    TicketTypeId,
)


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event.

    Dates are calendar dates in the event's own time zone.
    """

    id: EventId
    name: str
    slug: str
    location: str
    start_date: date
    end_date: date
    time_zone: str = "UTC"
    description: str = ""
    published: bool = False

    def __post_init__(self) -> None:
        if self.end_date < self.start_date:
            raise ValueError("Event cannot end before it starts")

    def days(self) -> tuple[date, ...]:
        """Every calendar day from start_date to end_date inclusive."""
        span = (self.end_date - self.start_date).days
        return tuple(self.start_date + timedelta(days=offset) for offset in range(span + 1))

    def local_date(self, moment: datetime) -> date:
        """Calendar day of ``moment`` as seen at the event's location."""
        return moment.astimezone(ZoneInfo(self.time_zone)).date()

    def has_ended(self, today: date) -> bool:
        return today > self.end_date


@dataclass(frozen=True)
class TicketType:
    """Domain representation of a TicketType."""

    id: TicketTypeId
    event_id: EventId
    name: str
    access_type: AccessType
    price: Money
    available_days: tuple[date, ...] = ()
    is_courtesy: bool = False
    sold_count: int = 0

    def authorized_days_for(self, event: Event) -> tuple[date, ...]:
        """Days a ticket of this type may be used, fixed at issuance."""
        if self.access_type is AccessType.SPECIFIC_DAYS:
            return tuple(self.available_days)
        # any_single_day keeps the whole range as candidates; the first
        # check-in consumes the single use.
        return event.days()


@dataclass(frozen=True)
class OrphanRecoveryData:
    """Sidecar kept on unbound tickets so a later signup can claim them."""

    target_email: str
    created_via: str
    created_at: datetime
    recovery_status: RecoveryStatus = RecoveryStatus.PENDING
    is_courtesy: bool = False
    auto_link_enabled: bool = True
    recovered_at: datetime | None = None
    linked_to_user: str | None = None
    recovery_method: str | None = None

    def recovered(self, uid: str, now: datetime, method: str) -> "OrphanRecoveryData":
        return replace(
            self,
            recovery_status=RecoveryStatus.RECOVERED,
            recovered_at=now,
            linked_to_user=uid,
            recovery_method=method,
        )


READY_FOR_CHECK_IN = frozenset({TicketStatus.CONFIGURED, TicketStatus.GENERATED})


@dataclass(frozen=True)
class Ticket:
    """Domain representation of a Ticket.

    Invariant: used_days is a duplicate-free subset of authorized_days.
    """

    id: TicketId
    qr_id: str
    order_id: str
    event_id: EventId
    ticket_type_id: TicketTypeId
    ticket_type_name: str
    status: TicketStatus
    customer: Contact
    amount_paid: Money
    authorized_days: tuple[date, ...]
    used_days: tuple[date, ...] = ()
    user_id: str | None = None
    attendee: Contact = field(default_factory=Contact)
    special_requirements: str = ""
    is_courtesy: bool = False
    courtesy_type: str = ""
    courtesy_notes: str = ""
    capture_id: str = ""
    created_via: str = ""
    created_by: str = ""
    orphan_recovery_data: OrphanRecoveryData | None = None
    linked_at: datetime | None = None
    linked_via: str = ""
    linked_by: str = ""
    last_checkin: datetime | None = None
    last_checkin_by: str | None = None
    last_checkin_day: date | None = None
    can_undo_until: datetime | None = None
    pdf_path: str = ""
    configured_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if len(set(self.used_days)) != len(self.used_days):
            raise ValueError("A day can only be used once per ticket")
        if not set(self.used_days) <= set(self.authorized_days):
            raise ValueError("Used days must be a subset of authorized days")

    @property
    def is_bound(self) -> bool:
        return self.user_id is not None

    @property
    def is_ready_for_check_in(self) -> bool:
        return self.status in READY_FOR_CHECK_IN and bool(self.attendee.name.strip())

    @property
    def is_used(self) -> bool:
        return self.status is TicketStatus.USED or bool(self.used_days)

    def belongs_to(self, uid: str, email: str = "") -> bool:
        if self.user_id is not None:
            return self.user_id == uid
        return bool(email) and self.customer.normalized_email == email.strip().lower()

    def with_check_in(
        self, day: date, operator_uid: str, now: datetime, undo_window: timedelta
    ) -> "Ticket":
        return replace(
            self,
            used_days=self.used_days + (day,),
            last_checkin=now,
            last_checkin_by=operator_uid,
            last_checkin_day=day,
            can_undo_until=now + undo_window,
            updated_at=now,
        )

    def without_check_in(self, day: date, now: datetime) -> "Ticket":
        return replace(
            self,
            used_days=tuple(d for d in self.used_days if d != day),
            last_checkin=None,
            last_checkin_by=None,
            last_checkin_day=None,
            can_undo_until=None,
            updated_at=now,
        )

    def bound_to(self, uid: str, now: datetime, via: str, by: str = "") -> "Ticket":
        recovery = self.orphan_recovery_data
        if recovery is not None:
            recovery = recovery.recovered(uid, now, via)
        return replace(
            self,
            user_id=uid,
            linked_at=now,
            linked_via=via,
            linked_by=by,
            orphan_recovery_data=recovery,
            updated_at=now,
        )


@dataclass(frozen=True)
class TicketLog:
    """Append-only audit record of one check-in state transition."""

    ticket_id: TicketId
    qr_id: str
    action: TicketAction
    performed_by: str
    performed_at: datetime
    day: date
    event_id: EventId
    method: CheckInMethod = CheckInMethod.QR
    notes: str = ""


@dataclass(frozen=True)
class Identity:
    """An authenticated caller as reported by the identity provider."""

    uid: str
    email: str = ""
    roles: frozenset[Role] = frozenset()

    @property
    def is_authenticated(self) -> bool:
        return True

    def has_any_role(self, roles) -> bool:
        return bool(self.roles & frozenset(roles))


@dataclass(frozen=True)
class BoundIdentity:
    """Tickets go straight to a known account."""

    uid: str


@dataclass(frozen=True)
class GuestIdentity:
    """No account yet; auto_link decides whether a recovery sidecar is kept."""

    email: str
    auto_link: bool = True


@dataclass(frozen=True)
class NewAccountIdentity:
    """Account created during checkout, with a token for immediate sign-in."""

    uid: str
    custom_token: str


ResolvedIdentity = BoundIdentity | GuestIdentity | NewAccountIdentity
