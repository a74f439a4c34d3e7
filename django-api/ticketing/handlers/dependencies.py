"""Service wiring.

The only place that reads ticketing settings and picks concrete stores and
integrations. Views ask for a fresh service per request.
"""

from datetime import timedelta

from django.conf import settings
from django.utils import timezone

from ticketing.integrations.django_identity import DjangoIdentityProvider
from ticketing.integrations.interfaces import (
    IdentityProvider,
    NotificationSender,
    PaymentProcessor,
)
from ticketing.integrations.notifications import EmailNotificationSender
from ticketing.integrations.paypal import PayPalProcessor
from ticketing.services.checkin_service import CheckInService
from ticketing.services.checkout_service import CheckoutService
from ticketing.services.issuance_service import TicketIssuanceService
from ticketing.services.linking_service import LinkingService
from ticketing.services.query_service import TicketQueryService
from ticketing.services.ticket_service import TicketService
from ticketing.stores.django_store import (
    DjangoDocumentStorage,
    DjangoEventStore,
    DjangoTicketStore,
)

DEFAULTS = {
    "UNDO_WINDOW_SECONDS": 300,
    "COURTESY_MAX_QUANTITY": 10,
    "PAYPAL_CLIENT_ID": "",
    "PAYPAL_CLIENT_SECRET": "",
    "PAYPAL_SANDBOX": True,
    "PAYPAL_TIMEOUT_SECONDS": 30,
    "APP_URL": "http://localhost:3000",
    "DOCUMENTS_DIR": "tickets",
}


def ticketing_setting(name: str):
    return getattr(settings, "TICKETING", {}).get(name, DEFAULTS[name])


def clock():
    return timezone.now()


def event_store() -> DjangoEventStore:
    return DjangoEventStore()


def ticket_store() -> DjangoTicketStore:
    return DjangoTicketStore()


def identity_provider() -> IdentityProvider:
    return DjangoIdentityProvider()


def notification_sender() -> NotificationSender:
    return EmailNotificationSender(
        from_email=settings.DEFAULT_FROM_EMAIL, app_url=ticketing_setting("APP_URL")
    )


def payment_processor() -> PaymentProcessor:
    return PayPalProcessor(
        client_id=ticketing_setting("PAYPAL_CLIENT_ID"),
        client_secret=ticketing_setting("PAYPAL_CLIENT_SECRET"),
        sandbox=ticketing_setting("PAYPAL_SANDBOX"),
        timeout=ticketing_setting("PAYPAL_TIMEOUT_SECONDS"),
    )


def issuance_service() -> TicketIssuanceService:
    return TicketIssuanceService(
        events=event_store(),
        tickets=ticket_store(),
        identity=identity_provider(),
        notifier=notification_sender(),
        clock=clock,
        max_courtesy_quantity=ticketing_setting("COURTESY_MAX_QUANTITY"),
    )


def linking_service() -> LinkingService:
    return LinkingService(
        tickets=ticket_store(),
        identity=identity_provider(),
        notifier=notification_sender(),
        clock=clock,
    )


def checkin_service() -> CheckInService:
    return CheckInService(
        events=event_store(),
        tickets=ticket_store(),
        clock=clock,
        undo_window=timedelta(seconds=ticketing_setting("UNDO_WINDOW_SECONDS")),
    )


def query_service() -> TicketQueryService:
    return TicketQueryService(events=event_store(), tickets=ticket_store(), clock=clock)


def ticket_service() -> TicketService:
    return TicketService(
        events=event_store(),
        tickets=ticket_store(),
        documents=DjangoDocumentStorage(prefix=ticketing_setting("DOCUMENTS_DIR")),
        notifier=notification_sender(),
        clock=clock,
    )


def checkout_service() -> CheckoutService:
    return CheckoutService(
        tickets=ticket_store(),
        payments=payment_processor(),
        identity=identity_provider(),
        notifier=notification_sender(),
        issuance=issuance_service(),
        linking=linking_service(),
    )
