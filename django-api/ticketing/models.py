"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.conf import settings
from django.db import models

DEFAULT_CURRENCY = getattr(settings, "TICKETING", {}).get("DEFAULT_CURRENCY", "MXN")


class Event(models.Model):
    """Persistence model for events."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True)
    description = models.TextField(blank=True, default="")
    location = models.CharField(max_length=255)
    start_date = models.DateField()
    end_date = models.DateField()
    time_zone = models.CharField(max_length=64, default=settings.TIME_ZONE)
    published = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-start_date"]
        indexes = [
            models.Index(fields=["-start_date"]),
        ]

    def __str__(self) -> str:
        return self.name


class TicketType(models.Model):
    """Persistence model for ticket types."""

    class AccessType(models.TextChoices):
        ALL_DAYS = "all_days", "All days"
        SPECIFIC_DAYS = "specific_days", "Specific days"
        ANY_SINGLE_DAY = "any_single_day", "Any single day"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="ticket_types")
    name = models.CharField(max_length=100)
    access_type = models.CharField(
        max_length=20, choices=AccessType.choices, default=AccessType.ALL_DAYS
    )
    # ISO dates ("YYYY-MM-DD"), only meaningful for specific_days.
    available_days = models.JSONField(default=list, blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default=DEFAULT_CURRENCY)
    is_courtesy = models.BooleanField(default=False)
    sold_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["event"]),
        ]

    def __str__(self) -> str:
        return f"{self.name} - {self.price}"


class Ticket(models.Model):
    """Persistence model for issued tickets."""

    class Status(models.TextChoices):
        PURCHASED = "purchased", "Purchased"
        CONFIGURED = "configured", "Configured"
        GENERATED = "generated", "Generated"
        USED = "used", "Used"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    qr_id = models.CharField(max_length=64, unique=True)
    order_id = models.CharField(max_length=128, db_index=True)
    # Tickets pin their event: events with tickets cannot be deleted.
    event = models.ForeignKey(Event, on_delete=models.PROTECT, related_name="tickets")
    ticket_type = models.ForeignKey(
        TicketType, on_delete=models.PROTECT, related_name="tickets"
    )
    ticket_type_name = models.CharField(max_length=100)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PURCHASED)

    user_id = models.CharField(max_length=128, null=True, blank=True, db_index=True)
    customer_name = models.CharField(max_length=255)
    customer_email = models.EmailField(db_index=True)
    customer_phone = models.CharField(max_length=40, blank=True, default="")
    attendee_name = models.CharField(max_length=255, blank=True, default="")
    attendee_email = models.EmailField(blank=True, default="")
    attendee_phone = models.CharField(max_length=40, blank=True, default="")
    special_requirements = models.TextField(blank=True, default="")

    amount_paid = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    currency = models.CharField(max_length=3, default=DEFAULT_CURRENCY)
    capture_id = models.CharField(max_length=128, blank=True, default="")

    is_courtesy = models.BooleanField(default=False, db_index=True)
    courtesy_type = models.CharField(max_length=64, blank=True, default="")
    courtesy_notes = models.TextField(blank=True, default="")
    created_via = models.CharField(max_length=64, blank=True, default="")
    created_by = models.CharField(max_length=128, blank=True, default="")

    authorized_days = models.JSONField(default=list)
    used_days = models.JSONField(default=list)
    orphan_recovery_data = models.JSONField(null=True, blank=True)

    linked_at = models.DateTimeField(null=True, blank=True)
    linked_via = models.CharField(max_length=32, blank=True, default="")
    linked_by = models.CharField(max_length=128, blank=True, default="")

    last_checkin = models.DateTimeField(null=True, blank=True)
    last_checkin_by = models.CharField(max_length=128, null=True, blank=True)
    last_checkin_day = models.DateField(null=True, blank=True)
    can_undo_until = models.DateTimeField(null=True, blank=True)

    pdf_path = models.CharField(max_length=500, blank=True, default="")
    configured_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["event", "status"]),
            models.Index(fields=["customer_email", "user_id"]),
        ]

    def __str__(self) -> str:
        return f"{self.ticket_type_name} - {self.qr_id}"


class TicketLog(models.Model):
    """Append-only audit trail of check-in transitions."""

    class Action(models.TextChoices):
        CHECKIN = "checkin", "Check-in"
        UNDO_CHECKIN = "undo_checkin", "Undo check-in"

    class Method(models.TextChoices):
        QR = "qr", "QR scan"
        MANUAL = "manual", "Manual"

    ticket = models.ForeignKey(Ticket, on_delete=models.PROTECT, related_name="logs")
    event = models.ForeignKey(Event, on_delete=models.PROTECT, related_name="ticket_logs")
    qr_id = models.CharField(max_length=64)
    action = models.CharField(max_length=20, choices=Action.choices)
    method = models.CharField(max_length=10, choices=Method.choices, default=Method.QR)
    performed_by = models.CharField(max_length=128)
    performed_at = models.DateTimeField()
    day = models.DateField()
    notes = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["performed_at", "id"]
        indexes = [
            models.Index(fields=["ticket", "performed_at"]),
        ]

    def __str__(self) -> str:
        return f"{self.action} {self.qr_id} {self.day}"
