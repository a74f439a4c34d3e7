"""Serializers for request payloads and domain model responses.

Output serializers read frozen domain dataclasses; enum and value-object
fields are reached through dotted ``source`` paths.
"""

from rest_framework import serializers

# Responses


class EventSummarySerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    slug = serializers.CharField()
    location = serializers.CharField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    time_zone = serializers.CharField()


class TicketTypeSummarySerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    access_type = serializers.CharField(source="access_type.value")
    price = serializers.DecimalField(source="price.amount", max_digits=10, decimal_places=2)
    currency = serializers.CharField(source="price.currency")


class OrphanRecoverySerializer(serializers.Serializer):
    target_email = serializers.EmailField()
    recovery_status = serializers.CharField(source="recovery_status.value")
    created_via = serializers.CharField()
    is_courtesy = serializers.BooleanField()
    auto_link_enabled = serializers.BooleanField()
    created_at = serializers.DateTimeField()
    recovered_at = serializers.DateTimeField()
    linked_to_user = serializers.CharField()
    recovery_method = serializers.CharField()


class TicketSerializer(serializers.Serializer):
    """Serializer for the Ticket domain model."""

    id = serializers.CharField()
    qr_id = serializers.CharField()
    order_id = serializers.CharField()
    event_id = serializers.CharField()
    ticket_type_id = serializers.CharField()
    ticket_type_name = serializers.CharField()
    status = serializers.CharField(source="status.value")
    user_id = serializers.CharField()
    customer_name = serializers.CharField(source="customer.name")
    customer_email = serializers.CharField(source="customer.email")
    customer_phone = serializers.CharField(source="customer.phone")
    attendee_name = serializers.CharField(source="attendee.name")
    attendee_email = serializers.CharField(source="attendee.email")
    attendee_phone = serializers.CharField(source="attendee.phone")
    special_requirements = serializers.CharField()
    amount_paid = serializers.DecimalField(
        source="amount_paid.amount", max_digits=10, decimal_places=2
    )
    currency = serializers.CharField(source="amount_paid.currency")
    capture_id = serializers.CharField()
    is_courtesy = serializers.BooleanField()
    courtesy_type = serializers.CharField()
    courtesy_notes = serializers.CharField()
    created_via = serializers.CharField()
    authorized_days = serializers.ListField(child=serializers.DateField())
    used_days = serializers.ListField(child=serializers.DateField())
    last_checkin = serializers.DateTimeField()
    last_checkin_by = serializers.CharField()
    last_checkin_day = serializers.DateField()
    can_undo_until = serializers.DateTimeField()
    linked_at = serializers.DateTimeField()
    linked_via = serializers.CharField()
    orphan_recovery_data = OrphanRecoverySerializer()
    pdf_path = serializers.CharField()
    configured_at = serializers.DateTimeField()
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class ScannerTicketSerializer(serializers.Serializer):
    """What door staff see for each attendee. No payment data."""

    id = serializers.CharField()
    qr_id = serializers.CharField()
    order_id = serializers.CharField()
    ticket_type_name = serializers.CharField()
    status = serializers.CharField(source="status.value")
    attendee_name = serializers.CharField(source="attendee.name")
    customer_name = serializers.CharField(source="customer.name")
    is_courtesy = serializers.BooleanField()
    authorized_days = serializers.ListField(child=serializers.DateField())
    used_days = serializers.ListField(child=serializers.DateField())
    last_checkin = serializers.DateTimeField()


class PublicLookupSerializer(serializers.Serializer):
    valid = serializers.BooleanField()
    event_name = serializers.CharField()
    attendee_name = serializers.CharField()
    status = serializers.CharField(source="status.value")


class CountsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    used = serializers.IntegerField()
    configured = serializers.IntegerField()
    pending = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)


class OrderGroupSerializer(serializers.Serializer):
    order_id = serializers.CharField()
    created_at = serializers.DateTimeField()
    currency = serializers.CharField()
    counts = CountsSerializer()
    tickets = TicketSerializer(many=True)


class EventGroupSerializer(serializers.Serializer):
    event_id = serializers.CharField()
    event = EventSummarySerializer()
    is_upcoming = serializers.BooleanField()
    counts = CountsSerializer()
    orders = OrderGroupSerializer(many=True)


class ScannerOrderSerializer(serializers.Serializer):
    order_id = serializers.CharField()
    counts = CountsSerializer()
    tickets = ScannerTicketSerializer(many=True)


class ScannerEventSerializer(serializers.Serializer):
    event = EventSummarySerializer()
    counts = CountsSerializer()
    orders = ScannerOrderSerializer(many=True)


class SummarySerializer(serializers.Serializer):
    total_tickets = serializers.IntegerField()
    total_events = serializers.IntegerField()
    total_orders = serializers.IntegerField()
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    used = serializers.IntegerField()
    configured = serializers.IntegerField()
    pending = serializers.IntegerField()


class UserTicketsSerializer(serializers.Serializer):
    events = EventGroupSerializer(many=True)
    summary = SummarySerializer()


class OrderTicketsSerializer(serializers.Serializer):
    order_id = serializers.CharField(source="order.order_id")
    created_at = serializers.DateTimeField(source="order.created_at")
    currency = serializers.CharField(source="order.currency")
    counts = CountsSerializer(source="order.counts")
    tickets = TicketSerializer(source="order.tickets", many=True)
    events = EventSummarySerializer(many=True)


class ScannerEventSummarySerializer(serializers.Serializer):
    event = EventSummarySerializer()
    status = serializers.CharField()
    counts = CountsSerializer()


class ScannerEventsSerializer(serializers.Serializer):
    happening_now = ScannerEventSummarySerializer(many=True)
    upcoming = ScannerEventSummarySerializer(many=True)


# Requests


class CourtesyRequestSerializer(serializers.Serializer):
    event_id = serializers.CharField()
    ticket_type_id = serializers.CharField()
    quantity = serializers.IntegerField()
    requester_name = serializers.CharField()
    requester_email = serializers.EmailField()
    requester_phone = serializers.CharField(required=False, allow_blank=True, default="")
    courtesy_type = serializers.CharField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    auto_link = serializers.BooleanField(required=False, default=True)
    send_email = serializers.BooleanField(required=False, default=False)


class LinkTicketSerializer(serializers.Serializer):
    ticket_id = serializers.CharField()
    user_id = serializers.CharField()


class LineItemSerializer(serializers.Serializer):
    ticket_type_id = serializers.CharField()
    quantity = serializers.IntegerField(min_value=1)


class CheckoutCustomerSerializer(serializers.Serializer):
    name = serializers.CharField()
    email = serializers.EmailField()
    phone = serializers.CharField(required=False, allow_blank=True, default="")
    create_account = serializers.BooleanField(required=False, default=False)
    password = serializers.CharField(
        required=False, allow_blank=True, default="", write_only=True, trim_whitespace=False
    )


class CheckoutSerializer(serializers.Serializer):
    order_id = serializers.CharField()
    event_id = serializers.CharField()
    customer = CheckoutCustomerSerializer()
    items = LineItemSerializer(many=True, allow_empty=False)


class ConfigureTicketSerializer(serializers.Serializer):
    attendee_name = serializers.CharField(required=False, allow_blank=True)
    attendee_email = serializers.EmailField(required=False, allow_blank=True)
    attendee_phone = serializers.CharField(required=False, allow_blank=True)
    special_requirements = serializers.CharField(required=False, allow_blank=True)


class ValidateActionSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=["checkin", "undo"])


class ManualCheckInSerializer(serializers.Serializer):
    ticket_id = serializers.CharField()
    event_id = serializers.CharField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")
