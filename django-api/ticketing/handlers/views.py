"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Leave domain error mapping to the exception handler
- Never contain business logic
- Never expose internal error details
"""

import logging

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from ticketing.domain import Contact, Role
from ticketing.domain.errors import ForbiddenError
from ticketing.handlers import dependencies
from ticketing.handlers.permissions import IsAdmin, IsManager, IsValidator
from ticketing.handlers.serializers import (
    CheckoutSerializer,
    ConfigureTicketSerializer,
    CourtesyRequestSerializer,
    EventSummarySerializer,
    LinkTicketSerializer,
    ManualCheckInSerializer,
    OrderTicketsSerializer,
    PublicLookupSerializer,
    ScannerEventSerializer,
    ScannerEventsSerializer,
    TicketSerializer,
    TicketTypeSummarySerializer,
    UserTicketsSerializer,
    ValidateActionSerializer,
)
from ticketing.services.checkin_service import CheckInResult
from ticketing.services.checkout_service import CheckoutCustomer, CheckoutRequest
from ticketing.services.issuance_service import CourtesyRequest, LineItem

logger = logging.getLogger(__name__)


def _check_in_payload(result: CheckInResult) -> dict:
    return {
        "success": True,
        "action_performed": "checked_in",
        "ticket": TicketSerializer(result.ticket).data,
        "event": EventSummarySerializer(result.event).data,
        "ticket_type": TicketTypeSummarySerializer(result.ticket_type).data,
        "day": result.day.isoformat(),
        "can_undo": result.can_undo,
        "undo_deadline": result.undo_deadline.isoformat(),
    }


class CourtesyTicketsView(APIView):
    """Handler for POST/GET /api/admin/courtesy-tickets"""

    permission_classes = [IsManager]

    def post(self, request: Request) -> Response:
        serializer = CourtesyRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        grant = dependencies.issuance_service().issue_courtesy_tickets(
            CourtesyRequest(
                event_id=data["event_id"],
                ticket_type_id=data["ticket_type_id"],
                quantity=data["quantity"],
                requester=Contact(
                    data["requester_name"], data["requester_email"], data["requester_phone"]
                ),
                courtesy_type=data["courtesy_type"],
                notes=data["notes"],
                auto_link=data["auto_link"],
                send_email=data["send_email"],
            ),
            request.user,
        )
        return Response(
            {
                "success": True,
                "order_id": grant.order_id,
                "tickets": TicketSerializer(grant.tickets, many=True).data,
                "linking": {
                    "auto_link_enabled": grant.auto_link_enabled,
                    "immediately_linked": grant.immediately_linked,
                    "linked_user_id": grant.linked_user_id,
                    "will_link_on_registration": grant.will_link_on_registration,
                },
            },
            status=status.HTTP_201_CREATED,
        )

    def get(self, request: Request) -> Response:
        listing = dependencies.query_service().list_courtesy_tickets()
        return Response(
            {
                "success": True,
                "tickets": TicketSerializer(listing.tickets, many=True).data,
                "stats": listing.stats,
            }
        )


class OrphanTicketsView(APIView):
    """Handler for GET /api/admin/orphan-tickets"""

    permission_classes = [IsAdmin]

    def get(self, request: Request) -> Response:
        listing = dependencies.linking_service().list_orphan_tickets()
        return Response(
            {
                "success": True,
                "tickets": TicketSerializer(listing.tickets, many=True).data,
                "stats": listing.stats,
            }
        )


class LinkTicketView(APIView):
    """Handler for POST /api/admin/link-ticket"""

    permission_classes = [IsAdmin]

    def post(self, request: Request) -> Response:
        serializer = LinkTicketSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ticket = dependencies.linking_service().link_ticket_manually(
            serializer.validated_data["ticket_id"],
            serializer.validated_data["user_id"],
            request.user,
        )
        return Response({"success": True, "ticket": TicketSerializer(ticket).data})


class PaymentCaptureView(APIView):
    """Handler for POST /api/payments/capture

    Open to guests; a valid bearer token binds the tickets to the caller.
    """

    permission_classes = [AllowAny]

    def post(self, request: Request) -> Response:
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        customer = data["customer"]

        requester = request.user if request.user.is_authenticated else None
        result = dependencies.checkout_service().capture_and_issue(
            CheckoutRequest(
                order_id=data["order_id"],
                event_id=data["event_id"],
                customer=CheckoutCustomer(
                    name=customer["name"],
                    email=customer["email"],
                    phone=customer["phone"],
                    create_account=customer["create_account"],
                    password=customer["password"],
                ),
                items=tuple(LineItem(i["ticket_type_id"], i["quantity"]) for i in data["items"]),
            ),
            requester,
        )
        return Response(
            {
                "success": True,
                "order_id": result.order_id,
                "capture_id": result.capture_id,
                "already_fulfilled": result.already_fulfilled,
                "user_id": result.user_id,
                "account_created": result.account_created,
                "custom_token": result.custom_token,
                "linked_count": result.linked_count,
                "tickets": TicketSerializer(result.tickets, many=True).data,
            },
            status=status.HTTP_200_OK if result.already_fulfilled else status.HTTP_201_CREATED,
        )


class UserTicketsView(APIView):
    """Handler for GET /api/tickets/user/{user_id}"""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request, user_id: str) -> Response:
        identity = request.user
        if identity.uid == user_id:
            email = identity.email
        elif identity.has_any_role({Role.ADMIN}):
            email = request.query_params.get("email", "")
        else:
            raise ForbiddenError("You can only view your own tickets")

        tickets = dependencies.query_service().get_user_tickets(user_id, email)
        return Response({"success": True, **UserTicketsSerializer(tickets).data})


class TicketDetailView(APIView):
    """Handler for GET/PUT /api/tickets/{ticket_id}"""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request, ticket_id: str) -> Response:
        ticket = dependencies.ticket_service().get_ticket(ticket_id, request.user)
        return Response({"success": True, "ticket": TicketSerializer(ticket).data})

    def put(self, request: Request, ticket_id: str) -> Response:
        serializer = ConfigureTicketSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ticket = dependencies.ticket_service().configure_attendee(
            ticket_id, request.user, **serializer.validated_data
        )
        return Response({"success": True, "ticket": TicketSerializer(ticket).data})


class OrderTicketsView(APIView):
    """Handler for GET /api/tickets/order/{order_id}"""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request, order_id: str) -> Response:
        order = dependencies.query_service().get_order_tickets(order_id, request.user)
        return Response({"success": True, **OrderTicketsSerializer(order).data})


class ResendTicketEmailView(APIView):
    """Handler for POST /api/tickets/{ticket_id}/resend-email"""

    permission_classes = [IsManager]

    def post(self, request: Request, ticket_id: str) -> Response:
        ticket = dependencies.ticket_service().resend_ticket_email(ticket_id, request.user)
        return Response({"success": True, "sent_to": ticket.customer.email})


class TicketDocumentView(APIView):
    """Handler for POST /api/tickets/{ticket_id}/generate"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request, ticket_id: str) -> Response:
        ticket = dependencies.ticket_service().generate_document(ticket_id, request.user)
        return Response(
            {"success": True, "pdf_path": ticket.pdf_path, "ticket": TicketSerializer(ticket).data}
        )


class ValidateTicketView(APIView):
    """Handler for GET/POST /api/validate/{qr_id}

    GET is the public lookup; POST checks in or undoes for door staff.
    """

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [IsValidator()]

    def get(self, request: Request, qr_id: str) -> Response:
        lookup = dependencies.checkin_service().public_lookup(qr_id)
        return Response({"success": True, **PublicLookupSerializer(lookup).data})

    def post(self, request: Request, qr_id: str) -> Response:
        serializer = ValidateActionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        service = dependencies.checkin_service()

        if serializer.validated_data["action"] == "checkin":
            return Response(_check_in_payload(service.check_in(qr_id, request.user)))

        result = service.undo_check_in(qr_id, request.user)
        return Response(
            {
                "success": True,
                "action_performed": "undo_checkin",
                "ticket": TicketSerializer(result.ticket).data,
                "day": result.day.isoformat(),
                "can_undo": False,
            }
        )


class ManualCheckInView(APIView):
    """Handler for POST /api/scanner/manual-checkin"""

    permission_classes = [IsValidator]

    def post(self, request: Request) -> Response:
        serializer = ManualCheckInSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = dependencies.checkin_service().manual_check_in(
            data["ticket_id"], data["event_id"], request.user, data["notes"]
        )
        return Response(_check_in_payload(result))


class ScannerEventsView(APIView):
    """Handler for GET /api/scanner/events"""

    permission_classes = [IsValidator]

    def get(self, request: Request) -> Response:
        events = dependencies.query_service().list_scanner_events()
        return Response({"success": True, "events": ScannerEventsSerializer(events).data})


class EventTicketsView(APIView):
    """Handler for GET /api/scanner/events/{event_id}/tickets"""

    permission_classes = [IsValidator]

    def get(self, request: Request, event_id: str) -> Response:
        group = dependencies.query_service().get_event_tickets(event_id)
        return Response({"success": True, **ScannerEventSerializer(group).data})


class LinkOrphanTicketsView(APIView):
    """Handler for POST /api/auth/link-orphan-tickets"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request) -> Response:
        result = dependencies.linking_service().link_orphan_tickets(
            request.user.uid, request.user.email
        )
        return Response(
            {
                "success": True,
                "linked_count": result.linked_count,
                "ticket_ids": list(result.ticket_ids),
            }
        )
