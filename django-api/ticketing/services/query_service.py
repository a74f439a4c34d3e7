"""Read-side views over tickets: Event -> Order -> Ticket groupings."""

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

from django.utils import timezone

from ticketing.domain import Event, EventId, Identity, Ticket, TicketStatus
from ticketing.domain.errors import EventNotFoundError, ForbiddenError, OrderNotFoundError
from ticketing.domain.value_objects import MANAGER_ROLES, normalize_email
from ticketing.services.common import Clock, parse_id
from ticketing.stores.interfaces import EventStore, TicketStore

logger = logging.getLogger(__name__)

USED = "used"
CONFIGURED = "configured"
PENDING = "pending"

HAPPENING_NOW = "happening_now"
UPCOMING = "upcoming"
MAX_UPCOMING_SCANNER_EVENTS = 10

_EPOCH = datetime(1970, 1, 1, tzinfo=dt_timezone.utc)


def ticket_bucket(ticket: Ticket) -> str:
    if ticket.is_used:
        return USED
    if ticket.status in (TicketStatus.CONFIGURED, TicketStatus.GENERATED):
        return CONFIGURED
    return PENDING


def _created(ticket: Ticket) -> datetime:
    return ticket.created_at or _EPOCH


@dataclass(frozen=True)
class Counts:
    total: int = 0
    used: int = 0
    configured: int = 0
    pending: int = 0
    amount: Decimal = Decimal("0")

    @classmethod
    def of(cls, tickets: list[Ticket]) -> "Counts":
        buckets = Counter(ticket_bucket(ticket) for ticket in tickets)
        return cls(
            total=len(tickets),
            used=buckets[USED],
            configured=buckets[CONFIGURED],
            pending=buckets[PENDING],
            amount=sum((ticket.amount_paid.amount for ticket in tickets), Decimal("0")),
        )


@dataclass(frozen=True)
class OrderGroup:
    order_id: str
    tickets: list[Ticket]
    counts: Counts

    @property
    def created_at(self) -> datetime:
        return min(_created(ticket) for ticket in self.tickets)

    @property
    def currency(self) -> str:
        return self.tickets[0].amount_paid.currency


@dataclass(frozen=True)
class EventGroup:
    event_id: EventId
    event: Event | None
    orders: list[OrderGroup]
    counts: Counts
    is_upcoming: bool = False


@dataclass(frozen=True)
class TicketsSummary:
    total_tickets: int = 0
    total_events: int = 0
    total_orders: int = 0
    total_amount: Decimal = Decimal("0")
    used: int = 0
    configured: int = 0
    pending: int = 0


@dataclass(frozen=True)
class UserTickets:
    events: list[EventGroup] = field(default_factory=list)
    summary: TicketsSummary = field(default_factory=TicketsSummary)


@dataclass(frozen=True)
class CourtesyListing:
    tickets: list[Ticket] = field(default_factory=list)
    stats: dict = field(default_factory=dict)


@dataclass(frozen=True)
class OrderTickets:
    order: OrderGroup
    events: list[Event] = field(default_factory=list)


@dataclass(frozen=True)
class ScannerEvent:
    event: Event
    status: str
    counts: Counts


@dataclass(frozen=True)
class ScannerEvents:
    happening_now: list[ScannerEvent] = field(default_factory=list)
    upcoming: list[ScannerEvent] = field(default_factory=list)


def group_orders(tickets: list[Ticket]) -> list[OrderGroup]:
    by_order: dict[str, list[Ticket]] = defaultdict(list)
    for ticket in tickets:
        by_order[ticket.order_id].append(ticket)
    orders = []
    for order_id, members in by_order.items():
        members.sort(key=lambda t: (_created(t), str(t.id)), reverse=True)
        orders.append(OrderGroup(order_id=order_id, tickets=members, counts=Counts.of(members)))
    orders.sort(key=lambda order: (order.created_at, order.order_id), reverse=True)
    return orders


class TicketQueryService:
    def __init__(
        self, events: EventStore, tickets: TicketStore, clock: Clock = timezone.now
    ) -> None:
        self._events = events
        self._tickets = tickets
        self._clock = clock

    def get_user_tickets(self, uid: str, email: str = "") -> UserTickets:
        """A user's tickets grouped by event and order.

        Tickets bound to ``uid`` win; only when there are none are tickets
        bought with ``email`` shown instead. Upcoming events come first,
        soonest first, then past events, most recent first.
        """
        tickets = self._tickets.find_by_user(uid)
        if not tickets and normalize_email(email):
            tickets = self._tickets.find_by_customer_email(normalize_email(email))

        by_event: dict[EventId, list[Ticket]] = defaultdict(list)
        for ticket in tickets:
            by_event[ticket.event_id].append(ticket)

        now = self._clock()
        groups = [
            self._event_group(event_id, self._events.get_event(event_id), members, now)
            for event_id, members in by_event.items()
        ]
        upcoming = sorted(
            (g for g in groups if g.is_upcoming), key=lambda g: g.event.start_date
        )
        past = sorted(
            (g for g in groups if not g.is_upcoming and g.event is not None),
            key=lambda g: g.event.start_date,
            reverse=True,
        )
        unknown = [g for g in groups if g.event is None]
        if unknown:
            logger.warning("User %s holds tickets for %d missing event(s)", uid, len(unknown))
        ordered = upcoming + past + unknown

        counts = Counts.of(tickets)
        summary = TicketsSummary(
            total_tickets=counts.total,
            total_events=len(ordered),
            total_orders=sum(len(g.orders) for g in ordered),
            total_amount=counts.amount,
            used=counts.used,
            configured=counts.configured,
            pending=counts.pending,
        )
        return UserTickets(events=ordered, summary=summary)

    def get_event_tickets(self, event_id: str) -> EventGroup:
        eid = parse_id(EventId, event_id, "event id")
        event = self._events.get_event(eid)
        if event is None:
            raise EventNotFoundError(event_id)
        return self._event_group(eid, event, self._tickets.find_by_event(eid), self._clock())

    def get_order_tickets(self, order_id: str, requester: Identity) -> OrderTickets:
        """Every ticket of one order, for its owner or a manager.

        Raises:
            OrderNotFoundError: If no ticket carries ``order_id``.
            ForbiddenError: If any ticket in the order is not the requester's.
        """
        tickets = self._tickets.find_by_order(order_id)
        if not tickets:
            raise OrderNotFoundError(order_id)
        if not requester.has_any_role(MANAGER_ROLES) and not all(
            ticket.belongs_to(requester.uid, requester.email) for ticket in tickets
        ):
            raise ForbiddenError("You can only view your own orders")

        [order] = group_orders(tickets)
        events = []
        for event_id in dict.fromkeys(ticket.event_id for ticket in order.tickets):
            event = self._events.get_event(event_id)
            if event is None:
                logger.warning("Order %s references missing event %s", order_id, event_id)
            else:
                events.append(event)
        return OrderTickets(order=order, events=events)

    def list_scanner_events(self) -> ScannerEvents:
        """Published events door staff can scan now or soon.

        Past events are left out; upcoming ones are capped.
        """
        now = self._clock()
        happening, upcoming = [], []
        for event in self._events.list_published_events():
            today = event.local_date(now)
            if event.has_ended(today):
                continue
            counts = Counts.of(self._tickets.find_by_event(event.id))
            if today >= event.start_date:
                happening.append(ScannerEvent(event, HAPPENING_NOW, counts))
            else:
                upcoming.append(ScannerEvent(event, UPCOMING, counts))
        return ScannerEvents(
            happening_now=happening, upcoming=upcoming[:MAX_UPCOMING_SCANNER_EVENTS]
        )

    def list_courtesy_tickets(self, limit: int = 100) -> CourtesyListing:
        tickets = sorted(
            self._tickets.find_courtesy(limit),
            key=lambda t: (_created(t), str(t.id)),
            reverse=True,
        )
        linked = sum(1 for ticket in tickets if ticket.is_bound)
        stats = {
            "total": len(tickets),
            "by_type": dict(Counter(ticket.courtesy_type for ticket in tickets)),
            "by_status": dict(Counter(ticket.status.value for ticket in tickets)),
            "linked": linked,
            "unlinked": len(tickets) - linked,
        }
        return CourtesyListing(tickets=tickets, stats=stats)

    @staticmethod
    def _event_group(
        event_id: EventId, event: Event | None, tickets: list[Ticket], now: datetime
    ) -> EventGroup:
        return EventGroup(
            event_id=event_id,
            event=event,
            orders=group_orders(tickets),
            counts=Counts.of(tickets),
            is_upcoming=event is not None and not event.has_ended(event.local_date(now)),
        )
