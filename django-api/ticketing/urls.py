from django.urls import path

from ticketing.handlers import (
    CourtesyTicketsView,
    EventTicketsView,
    LinkOrphanTicketsView,
    LinkTicketView,
    ManualCheckInView,
    OrderTicketsView,
    OrphanTicketsView,
    PaymentCaptureView,
    ResendTicketEmailView,
    ScannerEventsView,
    TicketDetailView,
    TicketDocumentView,
    UserTicketsView,
    ValidateTicketView,
)

urlpatterns = [
    path("admin/courtesy-tickets", CourtesyTicketsView.as_view(), name="courtesy-tickets"),
    path("admin/orphan-tickets", OrphanTicketsView.as_view(), name="orphan-tickets"),
    path("admin/link-ticket", LinkTicketView.as_view(), name="link-ticket"),
    path("payments/capture", PaymentCaptureView.as_view(), name="payment-capture"),
    path("tickets/user/<str:user_id>", UserTicketsView.as_view(), name="user-tickets"),
    path("tickets/order/<str:order_id>", OrderTicketsView.as_view(), name="order-tickets"),
    path("tickets/<str:ticket_id>", TicketDetailView.as_view(), name="ticket-detail"),
    path(
        "tickets/<str:ticket_id>/generate",
        TicketDocumentView.as_view(),
        name="ticket-generate",
    ),
    path(
        "tickets/<str:ticket_id>/resend-email",
        ResendTicketEmailView.as_view(),
        name="ticket-resend-email",
    ),
    path("validate/<str:qr_id>", ValidateTicketView.as_view(), name="validate-ticket"),
    path("scanner/manual-checkin", ManualCheckInView.as_view(), name="manual-checkin"),
    path("scanner/events", ScannerEventsView.as_view(), name="scanner-events"),
    path(
        "scanner/events/<str:event_id>/tickets",
        EventTicketsView.as_view(),
        name="event-tickets",
    ),
    path(
        "auth/link-orphan-tickets",
        LinkOrphanTicketsView.as_view(),
        name="link-orphan-tickets",
    ),
]
