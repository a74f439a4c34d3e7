from ticketing.handlers.views import (
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

__all__ = [
    "CourtesyTicketsView",
    "EventTicketsView",
    "LinkOrphanTicketsView",
    "LinkTicketView",
    "ManualCheckInView",
    "OrderTicketsView",
    "OrphanTicketsView",
    "PaymentCaptureView",
    "ResendTicketEmailView",
    "ScannerEventsView",
    "TicketDetailView",
    "TicketDocumentView",
    "UserTicketsView",
    "ValidateTicketView",
]
