"""Unit tests for TicketIssuanceService.

Run with: pytest tests/test_issuance_service.py -v
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from ticketing.domain import (
    AccessType,
    BoundIdentity,
    Contact,
    GuestIdentity,
    Identity,
    RecoveryStatus,
    Role,
    TicketStatus,
)
from ticketing.domain.errors import (
    EventNotFoundError,
    InvalidInputError,
    TicketTypeNotFoundError,
)
from ticketing.services.issuance_service import CourtesyRequest, IssueRequest, LineItem
from tests.fakes import make_event, make_ticket_type

ADMIN = Identity(uid="admin-1", email="admin@example.com", roles=frozenset({Role.ADMIN}))
BUYER = Contact("Ana López", "Ana@Example.com", "5550001111")


@pytest.fixture
def catalog(event_store):
    event = make_event(date(2025, 1, 1), date(2025, 1, 3))
    general = make_ticket_type(event)
    weekend = make_ticket_type(
        event, AccessType.SPECIFIC_DAYS, (date(2025, 1, 1), date(2025, 1, 3)), name="Weekend"
    )
    event_store.add(event, general, weekend)
    return event, general, weekend


def purchase(event, ticket_type, quantity=2, identity=None, **kwargs):
    return IssueRequest(
        event_id=str(event.id),
        items=(LineItem(str(ticket_type.id), quantity),),
        purchaser=BUYER,
        identity=identity or GuestIdentity("ana@example.com"),
        order_id=kwargs.pop("order_id", "PAYPAL-ORDER-1"),
        **kwargs,
    )


def courtesy(event, ticket_type, quantity=3, **kwargs):
    return CourtesyRequest(
        event_id=str(event.id),
        ticket_type_id=str(ticket_type.id),
        quantity=quantity,
        requester=Contact("Prensa MX", "press@example.com"),
        courtesy_type="press",
        **kwargs,
    )


class TestIssueTickets:
    def test_one_ticket_per_unit_sharing_the_order(self, issuance, ticket_store, catalog):
        event, general, _ = catalog

        tickets = issuance.issue_tickets(purchase(event, general, quantity=3))

        assert len(tickets) == 3
        assert {t.order_id for t in tickets} == {"PAYPAL-ORDER-1"}
        assert len({t.qr_id for t in tickets}) == 3
        assert len(ticket_store.tickets) == 3
        assert all(t.status is TicketStatus.PURCHASED for t in tickets)
        assert all(t.amount_paid.amount == Decimal("250.00") for t in tickets)

    def test_guest_purchase_keeps_pending_recovery_data(self, issuance, catalog):
        event, general, _ = catalog

        tickets = issuance.issue_tickets(purchase(event, general))

        for ticket in tickets:
            assert ticket.user_id is None
            assert ticket.customer.email == "ana@example.com"
            assert ticket.orphan_recovery_data.recovery_status is RecoveryStatus.PENDING
            assert ticket.orphan_recovery_data.target_email == "ana@example.com"

    def test_bound_purchase_has_no_recovery_data(self, issuance, catalog):
        event, general, _ = catalog

        tickets = issuance.issue_tickets(purchase(event, general, identity=BoundIdentity("uid-1")))

        assert all(t.user_id == "uid-1" for t in tickets)
        assert all(t.orphan_recovery_data is None for t in tickets)

    def test_guest_without_auto_link_has_no_recovery_data(self, issuance, catalog):
        event, general, _ = catalog

        tickets = issuance.issue_tickets(
            purchase(event, general, identity=GuestIdentity("ana@example.com", auto_link=False))
        )

        assert all(t.user_id is None and t.orphan_recovery_data is None for t in tickets)

    def test_authorized_days_follow_access_type(self, issuance, catalog):
        event, general, weekend = catalog

        all_days = issuance.issue_tickets(purchase(event, general, quantity=1))[0]
        specific = issuance.issue_tickets(
            purchase(event, weekend, quantity=1, order_id="PAYPAL-ORDER-2")
        )[0]

        assert all_days.authorized_days == event.days()
        assert specific.authorized_days == (date(2025, 1, 1), date(2025, 1, 3))

    def test_unknown_event_rejected_before_any_write(self, issuance, ticket_store, catalog):
        _, general, _ = catalog
        request = IssueRequest(
            event_id=str(uuid4()),
            items=(LineItem(str(general.id), 1),),
            purchaser=BUYER,
            identity=GuestIdentity("ana@example.com"),
        )

        with pytest.raises(EventNotFoundError):
            issuance.issue_tickets(request)
        assert ticket_store.tickets == {}

    def test_unknown_ticket_type_rejected(self, issuance, ticket_store, catalog):
        event, _, _ = catalog
        request = IssueRequest(
            event_id=str(event.id),
            items=(LineItem(str(uuid4()), 1),),
            purchaser=BUYER,
            identity=GuestIdentity("ana@example.com"),
        )

        with pytest.raises(TicketTypeNotFoundError):
            issuance.issue_tickets(request)
        assert ticket_store.tickets == {}

    def test_ticket_type_from_another_event_rejected(self, issuance, event_store, catalog):
        event, _, _ = catalog
        other = make_event(name="Other")
        foreign = make_ticket_type(other)
        event_store.add(other, foreign)

        with pytest.raises(InvalidInputError):
            issuance.issue_tickets(purchase(event, foreign))

    def test_malformed_event_id_is_invalid_input(self, issuance, catalog):
        _, general, _ = catalog
        request = IssueRequest(
            event_id="nope",
            items=(LineItem(str(general.id), 1),),
            purchaser=BUYER,
            identity=GuestIdentity("ana@example.com"),
        )

        with pytest.raises(InvalidInputError):
            issuance.issue_tickets(request)

    def test_sold_count_incremented(self, issuance, event_store, catalog):
        event, general, _ = catalog

        issuance.issue_tickets(purchase(event, general, quantity=2))

        assert event_store.ticket_types[general.id].sold_count == 2

    def test_sold_count_failure_keeps_tickets(self, issuance, event_store, ticket_store, catalog):
        event, general, _ = catalog
        event_store.fail_sold_count = True

        tickets = issuance.issue_tickets(purchase(event, general, quantity=2))

        assert len(tickets) == 2
        assert len(ticket_store.tickets) == 2


class TestIssueCourtesyTickets:
    def test_existing_account_is_linked_immediately(self, issuance, identity, catalog):
        event, general, _ = catalog
        identity.add_user("uid-press", "press@example.com")

        grant = issuance.issue_courtesy_tickets(courtesy(event, general), ADMIN)

        assert grant.immediately_linked
        assert grant.linked_user_id == "uid-press"
        assert not grant.will_link_on_registration
        assert all(t.user_id == "uid-press" for t in grant.tickets)
        assert all(t.created_via == "admin_courtesy_linked_immediate" for t in grant.tickets)
        assert all(t.orphan_recovery_data is None for t in grant.tickets)

    def test_unknown_requester_waits_for_registration(self, issuance, catalog):
        event, general, _ = catalog

        grant = issuance.issue_courtesy_tickets(courtesy(event, general), ADMIN)

        assert grant.will_link_on_registration
        assert grant.order_id.startswith("courtesy_")
        for ticket in grant.tickets:
            assert ticket.user_id is None
            assert ticket.created_via == "admin_courtesy_linked"
            assert ticket.orphan_recovery_data.is_courtesy
            assert ticket.orphan_recovery_data.target_email == "press@example.com"

    def test_standalone_courtesy_has_no_sidecar(self, issuance, identity, catalog):
        event, general, _ = catalog
        identity.add_user("uid-press", "press@example.com")

        grant = issuance.issue_courtesy_tickets(courtesy(event, general, auto_link=False), ADMIN)

        assert not grant.immediately_linked
        assert not grant.will_link_on_registration
        for ticket in grant.tickets:
            assert ticket.user_id is None
            assert ticket.orphan_recovery_data is None
            assert ticket.created_via == "admin_courtesy_standalone"

    def test_courtesy_tickets_are_free_and_unconfigured(self, issuance, catalog):
        event, general, _ = catalog

        grant = issuance.issue_courtesy_tickets(courtesy(event, general, notes="Columna"), ADMIN)

        for ticket in grant.tickets:
            assert ticket.is_courtesy
            assert ticket.courtesy_type == "press"
            assert ticket.courtesy_notes == "Columna"
            assert ticket.amount_paid.amount == 0
            assert ticket.attendee == Contact()
            assert ticket.created_by == "admin-1"
            assert ticket.customer.email == "press@example.com"

    @pytest.mark.parametrize("quantity", [0, 11])
    def test_quantity_out_of_range(self, issuance, ticket_store, catalog, quantity):
        event, general, _ = catalog

        with pytest.raises(InvalidInputError):
            issuance.issue_courtesy_tickets(courtesy(event, general, quantity=quantity), ADMIN)
        assert ticket_store.tickets == {}

    def test_missing_courtesy_type(self, issuance, catalog):
        event, general, _ = catalog
        request = CourtesyRequest(
            event_id=str(event.id),
            ticket_type_id=str(general.id),
            quantity=1,
            requester=Contact("Prensa MX", "press@example.com"),
            courtesy_type="  ",
        )

        with pytest.raises(InvalidInputError):
            issuance.issue_courtesy_tickets(request, ADMIN)

    def test_failed_write_persists_nothing(self, issuance, ticket_store, catalog):
        """A failure on the third of five tickets leaves no ticket behind."""
        event, general, _ = catalog
        ticket_store.fail_on_create_index = 2

        with pytest.raises(RuntimeError):
            issuance.issue_courtesy_tickets(courtesy(event, general, quantity=5), ADMIN)
        assert ticket_store.tickets == {}

    def test_courtesy_email_is_best_effort(self, issuance, notifier, ticket_store, catalog):
        event, general, _ = catalog
        notifier.fail = True

        grant = issuance.issue_courtesy_tickets(courtesy(event, general, send_email=True), ADMIN)

        assert len(grant.tickets) == 3
        assert len(ticket_store.tickets) == 3

    def test_courtesy_email_sent_when_requested(self, issuance, notifier, catalog):
        event, general, _ = catalog

        issuance.issue_courtesy_tickets(courtesy(event, general, send_email=True), ADMIN)

        assert notifier.sent == [("courtesy", "press@example.com", 3, True)]
