"""Unit tests for TicketQueryService groupings.

Run with: pytest tests/test_query_service.py -v
"""

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from uuid import uuid4

import pytest

from ticketing.domain import Identity, Role, TicketStatus
from ticketing.domain.errors import (
    EventNotFoundError,
    ForbiddenError,
    InvalidInputError,
    OrderNotFoundError,
)
from tests.fakes import UTC, make_event, make_ticket, make_ticket_type


def at(day: int, hour: int = 10) -> datetime:
    return datetime(2024, 12, day, hour, 0, tzinfo=UTC)


@pytest.fixture
def festivals(event_store):
    """Two past events and two upcoming ones relative to 2025-01-02."""
    past_old = make_event(date(2024, 6, 1), date(2024, 6, 2), name="June")
    past_recent = make_event(date(2024, 11, 1), date(2024, 11, 2), name="November")
    running = make_event(date(2025, 1, 1), date(2025, 1, 3), name="Running")
    later = make_event(date(2025, 3, 1), date(2025, 3, 2), name="March")
    events = [past_old, past_recent, running, later]
    types = [make_ticket_type(event) for event in events]
    event_store.add(*events, *types)
    return list(zip(events, types))


class TestGetUserTickets:
    def test_upcoming_soonest_first_then_past_most_recent_first(
        self, queries, ticket_store, festivals
    ):
        for event, ticket_type in festivals:
            ticket_store.add(make_ticket(event, ticket_type, order_id=f"ORDER-{event.name}"))

        result = queries.get_user_tickets("user-1")

        assert [g.event.name for g in result.events] == ["Running", "March", "November", "June"]
        assert [g.is_upcoming for g in result.events] == [True, True, False, False]

    def test_orders_and_tickets_newest_first(self, queries, ticket_store, festivals):
        event, ticket_type = festivals[2]
        ticket_store.add(
            make_ticket(event, ticket_type, order_id="OLD", created_at=at(1)),
            make_ticket(event, ticket_type, order_id="NEW", created_at=at(5)),
            make_ticket(event, ticket_type, order_id="NEW", created_at=at(5, 11)),
        )

        [group] = queries.get_user_tickets("user-1").events

        assert [o.order_id for o in group.orders] == ["NEW", "OLD"]
        new_order = group.orders[0]
        assert [t.created_at for t in new_order.tickets] == [at(5, 11), at(5)]
        assert new_order.created_at == at(5)

    def test_counts_and_summary(self, queries, ticket_store, festivals):
        event, ticket_type = festivals[2]
        ticket_store.add(
            make_ticket(event, ticket_type, used_days=(date(2025, 1, 1),)),
            make_ticket(event, ticket_type),
            make_ticket(event, ticket_type, status=TicketStatus.PURCHASED, attendee_name=""),
        )

        result = queries.get_user_tickets("user-1")

        counts = result.events[0].counts
        assert (counts.total, counts.used, counts.configured, counts.pending) == (3, 1, 1, 1)
        assert counts.amount == Decimal("750.00")
        assert result.summary.total_tickets == 3
        assert result.summary.total_events == 1
        assert result.summary.total_orders == 1
        assert result.summary.total_amount == Decimal("750.00")

    def test_email_fallback_only_when_nothing_bound(self, queries, ticket_store, festivals):
        event, ticket_type = festivals[2]
        ticket_store.add(make_ticket(event, ticket_type, user_id=None, email="guest@x.com"))

        assert queries.get_user_tickets("user-9").summary.total_tickets == 0
        result = queries.get_user_tickets("user-9", "Guest@X.com")
        assert result.summary.total_tickets == 1

    def test_missing_event_sorted_last(self, queries, event_store, ticket_store, festivals):
        event, ticket_type = festivals[3]
        ghost = make_event(name="Ghost")
        ticket_store.add(
            make_ticket(ghost, make_ticket_type(ghost)),
            make_ticket(event, ticket_type),
        )

        result = queries.get_user_tickets("user-1")

        assert result.events[0].event.name == "March"
        assert result.events[-1].event is None
        assert result.events[-1].event_id == ghost.id

    def test_no_tickets(self, queries):
        result = queries.get_user_tickets("nobody")

        assert result.events == []
        assert result.summary.total_tickets == 0


class TestGetEventTickets:
    def test_groups_all_tickets_of_the_event(self, queries, ticket_store, festivals):
        event, ticket_type = festivals[2]
        other_event, other_type = festivals[3]
        ticket_store.add(
            make_ticket(event, ticket_type, order_id="A", user_id="u1"),
            make_ticket(event, ticket_type, order_id="B", user_id="u2"),
            make_ticket(other_event, other_type, order_id="C"),
        )

        group = queries.get_event_tickets(str(event.id))

        assert group.event == event
        assert {o.order_id for o in group.orders} == {"A", "B"}
        assert group.counts.total == 2

    def test_unknown_event(self, queries):
        with pytest.raises(EventNotFoundError):
            queries.get_event_tickets(str(uuid4()))

    def test_malformed_event_id(self, queries):
        with pytest.raises(InvalidInputError):
            queries.get_event_tickets("festival")


class TestListCourtesyTickets:
    def test_stats_by_type_status_and_binding(self, queries, ticket_store, festivals):
        event, ticket_type = festivals[2]
        ticket_store.add(
            make_ticket(event, ticket_type, is_courtesy=True, courtesy_type="press"),
            make_ticket(
                event,
                ticket_type,
                is_courtesy=True,
                courtesy_type="press",
                user_id=None,
                status=TicketStatus.PURCHASED,
                attendee_name="",
            ),
            make_ticket(event, ticket_type, is_courtesy=True, courtesy_type="staff", user_id=None),
            make_ticket(event, ticket_type),
        )

        listing = queries.list_courtesy_tickets()

        assert len(listing.tickets) == 3
        assert listing.stats == {
            "total": 3,
            "by_type": {"press": 2, "staff": 1},
            "by_status": {"configured": 2, "purchased": 1},
            "linked": 1,
            "unlinked": 2,
        }


class TestGetOrderTickets:
    OWNER = Identity(uid="user-1", email="buyer@example.com")

    def test_owner_sees_the_whole_order(self, queries, ticket_store, festivals):
        event, ticket_type = festivals[2]
        ticket_store.add(
            make_ticket(event, ticket_type, order_id="ORDER-7", created_at=at(3)),
            make_ticket(event, ticket_type, order_id="ORDER-7", created_at=at(4)),
            make_ticket(event, ticket_type, order_id="ORDER-8"),
        )

        result = queries.get_order_tickets("ORDER-7", self.OWNER)

        assert result.order.order_id == "ORDER-7"
        assert [t.created_at for t in result.order.tickets] == [at(4), at(3)]
        assert result.order.counts.total == 2
        assert [e.name for e in result.events] == ["Running"]

    def test_guest_order_visible_by_purchaser_email(self, queries, ticket_store, festivals):
        event, ticket_type = festivals[2]
        ticket_store.add(make_ticket(event, ticket_type, user_id=None, order_id="ORDER-7"))
        buyer = Identity(uid="user-9", email="Buyer@Example.com")

        assert queries.get_order_tickets("ORDER-7", buyer).order.counts.total == 1

    def test_stranger_forbidden(self, queries, ticket_store, festivals):
        event, ticket_type = festivals[2]
        ticket_store.add(make_ticket(event, ticket_type, order_id="ORDER-7"))

        with pytest.raises(ForbiddenError):
            queries.get_order_tickets("ORDER-7", Identity(uid="user-2", email="x@example.com"))

    def test_manager_sees_any_order(self, queries, ticket_store, festivals):
        event, ticket_type = festivals[2]
        ticket_store.add(make_ticket(event, ticket_type, order_id="ORDER-7"))
        gestor = Identity(uid="gestor-1", roles=frozenset({Role.GESTOR}))

        assert queries.get_order_tickets("ORDER-7", gestor).order.order_id == "ORDER-7"

    def test_unknown_order(self, queries):
        with pytest.raises(OrderNotFoundError):
            queries.get_order_tickets("ORDER-404", self.OWNER)


class TestListScannerEvents:
    def test_running_and_upcoming_events_only(self, queries, ticket_store, festivals):
        event, ticket_type = festivals[2]
        ticket_store.add(
            make_ticket(event, ticket_type, used_days=(date(2025, 1, 1),)),
            make_ticket(event, ticket_type),
        )

        result = queries.list_scanner_events()

        assert [s.event.name for s in result.happening_now] == ["Running"]
        assert [s.event.name for s in result.upcoming] == ["March"]
        running = result.happening_now[0]
        assert running.status == "happening_now"
        assert (running.counts.total, running.counts.used) == (2, 1)

    def test_unpublished_events_hidden(self, queries, event_store, festivals):
        event, _ = festivals[3]
        event_store.events[event.id] = replace(event, published=False)

        assert queries.list_scanner_events().upcoming == []

    def test_upcoming_list_is_capped(self, queries, event_store):
        event_store.add(
            *(make_event(date(2025, 2, day), date(2025, 2, day)) for day in range(1, 13))
        )

        result = queries.list_scanner_events()

        assert len(result.upcoming) == 10
        assert result.upcoming[0].event.start_date == date(2025, 2, 1)
