"""Unit tests for the check-in state machine.

Run with: pytest tests/test_checkin_service.py -v
"""

from datetime import date, datetime, timedelta
from uuid import uuid4

import pytest

from ticketing.domain import AccessType, CheckInMethod, Identity, Role, TicketAction, TicketStatus
from ticketing.domain.errors import (
    CheckInRejectedError,
    ErrorCode,
    EventEndedError,
    EventNotStartedError,
    InvalidInputError,
    NothingToUndoError,
    TicketNotConfiguredError,
    TicketNotFoundError,
    UnauthorizedUndoError,
    UndoExpiredError,
)
from tests.fakes import UTC, make_event, make_ticket, make_ticket_type

OPERATOR_A = Identity(uid="op-a", roles=frozenset({Role.COMPROBADOR}))
OPERATOR_B = Identity(uid="op-b", roles=frozenset({Role.COMPROBADOR}))


@pytest.fixture
def event(event_store):
    event = make_event(date(2025, 1, 1), date(2025, 1, 3))
    event_store.add(event)
    return event


@pytest.fixture
def all_days(event_store, event):
    ticket_type = make_ticket_type(event)
    event_store.add(ticket_type)
    return ticket_type


@pytest.fixture
def ticket(ticket_store, event, all_days):
    ticket = make_ticket(event, all_days)
    ticket_store.add(ticket)
    return ticket


class TestCheckIn:
    def test_consumes_today_and_logs(self, checkin, ticket_store, ticket, clock):
        result = checkin.check_in(ticket.qr_id, OPERATOR_A)

        stored = ticket_store.tickets[ticket.id]
        assert result.day == date(2025, 1, 2)
        assert stored.used_days == (date(2025, 1, 2),)
        assert stored.last_checkin == clock.now
        assert stored.last_checkin_by == "op-a"
        assert stored.can_undo_until == clock.now + timedelta(minutes=5)
        assert result.undo_deadline == stored.can_undo_until

        [entry] = ticket_store.logs_for_ticket(ticket.id)
        assert entry.action is TicketAction.CHECKIN
        assert entry.method is CheckInMethod.QR
        assert entry.performed_by == "op-a"
        assert entry.day == date(2025, 1, 2)

    def test_second_scan_same_day_rejected(self, checkin, ticket_store, ticket):
        checkin.check_in(ticket.qr_id, OPERATOR_A)

        with pytest.raises(CheckInRejectedError) as exc:
            checkin.check_in(ticket.qr_id, OPERATOR_B)
        assert exc.value.code is ErrorCode.ALREADY_CHECKED_IN_TODAY
        assert len(ticket_store.logs) == 1

    def test_multi_day_ticket_reusable_next_day(self, checkin, ticket_store, ticket, clock):
        checkin.check_in(ticket.qr_id, OPERATOR_A)
        clock.advance(days=1)

        checkin.check_in(ticket.qr_id, OPERATOR_A)

        assert ticket_store.tickets[ticket.id].used_days == (date(2025, 1, 2), date(2025, 1, 3))

    def test_unknown_qr(self, checkin):
        with pytest.raises(TicketNotFoundError):
            checkin.check_in("missing", OPERATOR_A)

    def test_purchased_ticket_not_configured_until_attendee_set(
        self, checkin, ticket_store, event, all_days
    ):
        unconfigured = make_ticket(event, all_days, status=TicketStatus.PURCHASED, attendee_name="")
        ticket_store.add(unconfigured)

        with pytest.raises(TicketNotConfiguredError) as exc:
            checkin.check_in(unconfigured.qr_id, OPERATOR_A)
        assert "purchased" in exc.value.details

        ticket_store.save_ticket(
            make_ticket(
                event,
                all_days,
                id=unconfigured.id,
                qr_id=unconfigured.qr_id,
            )
        )
        assert checkin.check_in(unconfigured.qr_id, OPERATOR_A).day == date(2025, 1, 2)

    def test_before_event_start(self, checkin, ticket, clock):
        clock.now = datetime(2024, 12, 31, 12, 0, tzinfo=UTC)
        with pytest.raises(EventNotStartedError):
            checkin.check_in(ticket.qr_id, OPERATOR_A)

    def test_after_event_end(self, checkin, ticket, clock):
        clock.now = datetime(2025, 1, 4, 12, 0, tzinfo=UTC)
        with pytest.raises(EventEndedError):
            checkin.check_in(ticket.qr_id, OPERATOR_A)

    def test_specific_days_gap_rejected(self, checkin, event_store, ticket_store, event):
        weekend = make_ticket_type(
            event, AccessType.SPECIFIC_DAYS, (date(2025, 1, 1), date(2025, 1, 3))
        )
        event_store.add(weekend)
        ticket = make_ticket(event, weekend)
        ticket_store.add(ticket)

        with pytest.raises(CheckInRejectedError) as exc:
            checkin.check_in(ticket.qr_id, OPERATOR_A)
        assert exc.value.code is ErrorCode.NOT_AUTHORIZED_TODAY
        assert ticket_store.tickets[ticket.id].used_days == ()

    def test_any_single_day_used_once(self, checkin, event_store, ticket_store, event):
        single = make_ticket_type(event, AccessType.ANY_SINGLE_DAY)
        event_store.add(single)
        ticket = make_ticket(event, single, used_days=(date(2025, 1, 1),))
        ticket_store.add(ticket)

        with pytest.raises(CheckInRejectedError) as exc:
            checkin.check_in(ticket.qr_id, OPERATOR_A)
        assert exc.value.code is ErrorCode.ALREADY_USED

    def test_today_is_event_local(self, event_store, ticket_store, checkin, clock):
        """03:00 UTC on Jan 4 is still Jan 3 in Mexico City, the last event day."""
        event = make_event(date(2025, 1, 1), date(2025, 1, 3), time_zone="America/Mexico_City")
        ticket_type = make_ticket_type(event)
        ticket = make_ticket(event, ticket_type)
        event_store.add(event, ticket_type)
        ticket_store.add(ticket)
        clock.now = datetime(2025, 1, 4, 3, 0, tzinfo=UTC)

        assert checkin.check_in(ticket.qr_id, OPERATOR_A).day == date(2025, 1, 3)


class TestUndoCheckIn:
    def test_undo_within_window(self, checkin, ticket_store, ticket, clock):
        checkin.check_in(ticket.qr_id, OPERATOR_A)
        clock.advance(minutes=4, seconds=59)

        result = checkin.undo_check_in(ticket.qr_id, OPERATOR_A)

        stored = ticket_store.tickets[ticket.id]
        assert result.day == date(2025, 1, 2)
        assert stored.used_days == ()
        assert stored.last_checkin is None
        assert stored.can_undo_until is None
        assert [e.action for e in ticket_store.logs] == [
            TicketAction.CHECKIN,
            TicketAction.UNDO_CHECKIN,
        ]

    def test_undo_after_window_expired(self, checkin, ticket_store, ticket, clock):
        checkin.check_in(ticket.qr_id, OPERATOR_A)
        clock.advance(minutes=5, seconds=1)

        with pytest.raises(UndoExpiredError):
            checkin.undo_check_in(ticket.qr_id, OPERATOR_A)
        assert ticket_store.tickets[ticket.id].used_days == (date(2025, 1, 2),)

    def test_other_operator_cannot_undo(self, checkin, ticket_store, ticket):
        checkin.check_in(ticket.qr_id, OPERATOR_A)

        with pytest.raises(UnauthorizedUndoError):
            checkin.undo_check_in(ticket.qr_id, OPERATOR_B)
        assert ticket_store.tickets[ticket.id].used_days == (date(2025, 1, 2),)

    def test_never_checked_in(self, checkin, ticket):
        with pytest.raises(UndoExpiredError):
            checkin.undo_check_in(ticket.qr_id, OPERATOR_A)

    def test_check_in_from_previous_day(self, checkin, ticket, clock):
        """A check-in at 23:58 cannot be undone after midnight, even inside the window."""
        clock.now = datetime(2025, 1, 2, 23, 58, tzinfo=UTC)
        checkin.check_in(ticket.qr_id, OPERATOR_A)
        clock.advance(minutes=3)

        with pytest.raises(NothingToUndoError):
            checkin.undo_check_in(ticket.qr_id, OPERATOR_A)

    def test_used_days_stay_consistent_across_sequences(self, checkin, ticket_store, ticket, clock):
        for _ in range(3):
            checkin.check_in(ticket.qr_id, OPERATOR_A)
            checkin.undo_check_in(ticket.qr_id, OPERATOR_A)
        checkin.check_in(ticket.qr_id, OPERATOR_A)
        clock.advance(days=1)
        checkin.check_in(ticket.qr_id, OPERATOR_A)

        stored = ticket_store.tickets[ticket.id]
        assert len(set(stored.used_days)) == len(stored.used_days)
        assert set(stored.used_days) <= set(stored.authorized_days)


class TestManualCheckIn:
    def test_logged_as_manual_with_notes(self, checkin, ticket_store, ticket, event):
        checkin.manual_check_in(str(ticket.id), str(event.id), OPERATOR_A, "QR damaged")

        [entry] = ticket_store.logs
        assert entry.method is CheckInMethod.MANUAL
        assert entry.notes == "QR damaged"

    def test_ticket_from_another_event(self, checkin, ticket):
        with pytest.raises(InvalidInputError):
            checkin.manual_check_in(str(ticket.id), str(uuid4()), OPERATOR_A)

    def test_unknown_ticket(self, checkin, event):
        with pytest.raises(TicketNotFoundError):
            checkin.manual_check_in(str(uuid4()), str(event.id), OPERATOR_A)


class TestPublicLookup:
    def test_reports_event_and_attendee_only(self, checkin, ticket, event):
        lookup = checkin.public_lookup(ticket.qr_id)

        assert lookup.valid
        assert lookup.event_name == event.name
        assert lookup.attendee_name == "Ana López"
        assert lookup.status is TicketStatus.CONFIGURED

    def test_unknown_qr(self, checkin):
        with pytest.raises(TicketNotFoundError):
            checkin.public_lookup("missing")

    def test_purchased_ticket_is_valid_before_configuration(
        self, checkin, ticket_store, event, all_days
    ):
        ticket = make_ticket(event, all_days, status=TicketStatus.PURCHASED, attendee_name="")
        ticket_store.add(ticket)

        lookup = checkin.public_lookup(ticket.qr_id)

        assert lookup.valid
        assert lookup.attendee_name == "Not configured"
        assert lookup.status is TicketStatus.PURCHASED

    def test_missing_event_reported_as_unknown(self, checkin, event_store, ticket, event):
        del event_store.events[event.id]

        lookup = checkin.public_lookup(ticket.qr_id)

        assert lookup.valid
        assert lookup.event_name == "Unknown Event"
