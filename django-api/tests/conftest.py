"""Pytest configuration and shared fixtures."""

from datetime import datetime

import pytest
from rest_framework.test import APIClient

from ticketing.services.checkin_service import CheckInService
from ticketing.services.checkout_service import CheckoutService
from ticketing.services.issuance_service import TicketIssuanceService
from ticketing.services.linking_service import LinkingService
from ticketing.services.query_service import TicketQueryService
from ticketing.services.ticket_service import TicketService
from tests.fakes import (
    UTC,
    FakeIdentityProvider,
    FakePaymentProcessor,
    FixedClock,
    InMemoryDocumentStorage,
    InMemoryEventStore,
    InMemoryTicketStore,
    RecordingNotifier,
)


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2025, 1, 2, 12, 0, tzinfo=UTC))


@pytest.fixture
def event_store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def ticket_store() -> InMemoryTicketStore:
    return InMemoryTicketStore()


@pytest.fixture
def identity() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def payments() -> FakePaymentProcessor:
    return FakePaymentProcessor()


@pytest.fixture
def documents() -> InMemoryDocumentStorage:
    return InMemoryDocumentStorage()


@pytest.fixture
def issuance(event_store, ticket_store, identity, notifier, clock) -> TicketIssuanceService:
    return TicketIssuanceService(event_store, ticket_store, identity, notifier, clock=clock)


@pytest.fixture
def linking(ticket_store, identity, notifier, clock) -> LinkingService:
    return LinkingService(ticket_store, identity, notifier, clock=clock)


@pytest.fixture
def checkin(event_store, ticket_store, clock) -> CheckInService:
    return CheckInService(event_store, ticket_store, clock=clock)


@pytest.fixture
def queries(event_store, ticket_store, clock) -> TicketQueryService:
    return TicketQueryService(event_store, ticket_store, clock=clock)


@pytest.fixture
def checkout(ticket_store, payments, identity, notifier, issuance, linking) -> CheckoutService:
    return CheckoutService(ticket_store, payments, identity, notifier, issuance, linking)


@pytest.fixture
def tickets_service(event_store, ticket_store, documents, notifier, clock) -> TicketService:
    return TicketService(
        event_store,
        ticket_store,
        documents,
        notifier,
        renderer=lambda t, e: b"%PDF-1.4",
        clock=clock,
    )
