"""Django ORM implementation of the ticketing stores.

Every row is mapped to a domain model at this boundary; rows with unknown
access types, statuses or recovery states fail loudly instead of leaking
half-understood documents into the services.
"""

from contextlib import contextmanager
from datetime import date, datetime
from typing import Iterator

from django.core.files.base import ContentFile
from django.core.files.storage import Storage, default_storage
from django.db import transaction
from django.db.models import F

from ticketing import models
from ticketing.domain import (
    AccessType,
    CheckInMethod,
    Contact,
    Event,
    EventId,
    Money,
    OrphanRecoveryData,
    RecoveryStatus,
    Ticket,
    TicketAction,
    TicketId,
    TicketLog,
    TicketStatus,
    TicketType,
    TicketTypeId,
)
from ticketing.stores.interfaces import DocumentStorage, EventStore, TicketStore


def _days_from_json(values: list | None) -> tuple[date, ...]:
    return tuple(date.fromisoformat(str(value)[:10]) for value in values or [])


def _days_to_json(days: tuple[date, ...]) -> list[str]:
    return [day.isoformat() for day in days]


def _dt_to_json(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _dt_from_json(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _event_to_domain(row: models.Event) -> Event:
    return Event(
        id=EventId(row.id),
        name=row.name,
        slug=row.slug,
        location=row.location,
        start_date=row.start_date,
        end_date=row.end_date,
        time_zone=row.time_zone,
        description=row.description,
        published=row.published,
    )


def _ticket_type_to_domain(row: models.TicketType) -> TicketType:
    return TicketType(
        id=TicketTypeId(row.id),
        event_id=EventId(row.event_id),
        name=row.name,
        access_type=AccessType(row.access_type),
        price=Money(row.price, row.currency),
        available_days=_days_from_json(row.available_days),
        is_courtesy=row.is_courtesy,
        sold_count=row.sold_count,
    )


def _recovery_to_domain(data: dict | None) -> OrphanRecoveryData | None:
    if not data:
        return None
    return OrphanRecoveryData(
        target_email=data["target_email"],
        created_via=data.get("created_via", ""),
        created_at=_dt_from_json(data.get("created_at")),
        recovery_status=RecoveryStatus(data["recovery_status"]),
        is_courtesy=data.get("is_courtesy", False),
        auto_link_enabled=data.get("auto_link_enabled", True),
        recovered_at=_dt_from_json(data.get("recovered_at")),
        linked_to_user=data.get("linked_to_user"),
        recovery_method=data.get("recovery_method"),
    )


def _recovery_to_json(recovery: OrphanRecoveryData | None) -> dict | None:
    if recovery is None:
        return None
    return {
        "target_email": recovery.target_email,
        "created_via": recovery.created_via,
        "created_at": _dt_to_json(recovery.created_at),
        "recovery_status": recovery.recovery_status.value,
        "is_courtesy": recovery.is_courtesy,
        "auto_link_enabled": recovery.auto_link_enabled,
        "recovered_at": _dt_to_json(recovery.recovered_at),
        "linked_to_user": recovery.linked_to_user,
        "recovery_method": recovery.recovery_method,
    }


def _ticket_to_domain(row: models.Ticket) -> Ticket:
    return Ticket(
        id=TicketId(row.id),
        qr_id=row.qr_id,
        order_id=row.order_id,
        event_id=EventId(row.event_id),
        ticket_type_id=TicketTypeId(row.ticket_type_id),
        ticket_type_name=row.ticket_type_name,
        status=TicketStatus(row.status),
        customer=Contact(row.customer_name, row.customer_email, row.customer_phone),
        amount_paid=Money(row.amount_paid, row.currency),
        authorized_days=_days_from_json(row.authorized_days),
        used_days=_days_from_json(row.used_days),
        user_id=row.user_id,
        attendee=Contact(row.attendee_name, row.attendee_email, row.attendee_phone),
        special_requirements=row.special_requirements,
        is_courtesy=row.is_courtesy,
        courtesy_type=row.courtesy_type,
        courtesy_notes=row.courtesy_notes,
        capture_id=row.capture_id,
        created_via=row.created_via,
        created_by=row.created_by,
        orphan_recovery_data=_recovery_to_domain(row.orphan_recovery_data),
        linked_at=row.linked_at,
        linked_via=row.linked_via,
        linked_by=row.linked_by,
        last_checkin=row.last_checkin,
        last_checkin_by=row.last_checkin_by,
        last_checkin_day=row.last_checkin_day,
        can_undo_until=row.can_undo_until,
        pdf_path=row.pdf_path,
        configured_at=row.configured_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _ticket_to_row(ticket: Ticket) -> models.Ticket:
    return models.Ticket(
        id=ticket.id.value,
        qr_id=ticket.qr_id,
        order_id=ticket.order_id,
        event_id=ticket.event_id.value,
        ticket_type_id=ticket.ticket_type_id.value,
        ticket_type_name=ticket.ticket_type_name,
        status=ticket.status.value,
        user_id=ticket.user_id,
        customer_name=ticket.customer.name,
        customer_email=ticket.customer.normalized_email,
        customer_phone=ticket.customer.phone,
        attendee_name=ticket.attendee.name,
        attendee_email=ticket.attendee.email,
        attendee_phone=ticket.attendee.phone,
        special_requirements=ticket.special_requirements,
        amount_paid=ticket.amount_paid.amount,
        currency=ticket.amount_paid.currency,
        capture_id=ticket.capture_id,
        is_courtesy=ticket.is_courtesy,
        courtesy_type=ticket.courtesy_type,
        courtesy_notes=ticket.courtesy_notes,
        created_via=ticket.created_via,
        created_by=ticket.created_by,
        authorized_days=_days_to_json(ticket.authorized_days),
        used_days=_days_to_json(ticket.used_days),
        orphan_recovery_data=_recovery_to_json(ticket.orphan_recovery_data),
        linked_at=ticket.linked_at,
        linked_via=ticket.linked_via,
        linked_by=ticket.linked_by,
        last_checkin=ticket.last_checkin,
        last_checkin_by=ticket.last_checkin_by,
        last_checkin_day=ticket.last_checkin_day,
        can_undo_until=ticket.can_undo_until,
        pdf_path=ticket.pdf_path,
        configured_at=ticket.configured_at,
        created_at=ticket.created_at,
        updated_at=ticket.updated_at or ticket.created_at,
    )


def _log_to_domain(row: models.TicketLog) -> TicketLog:
    return TicketLog(
        ticket_id=TicketId(row.ticket_id),
        qr_id=row.qr_id,
        action=TicketAction(row.action),
        performed_by=row.performed_by,
        performed_at=row.performed_at,
        day=row.day,
        event_id=EventId(row.event_id),
        method=CheckInMethod(row.method),
        notes=row.notes,
    )


class DjangoEventStore(EventStore):
    """Relational event store using Django ORM."""

    def get_event(self, event_id: EventId) -> Event | None:
        row = models.Event.objects.filter(pk=event_id.value).first()
        return _event_to_domain(row) if row else None

    def get_ticket_type(self, ticket_type_id: TicketTypeId) -> TicketType | None:
        row = models.TicketType.objects.filter(pk=ticket_type_id.value).first()
        return _ticket_type_to_domain(row) if row else None

    def increment_sold_count(self, ticket_type_id: TicketTypeId, quantity: int) -> None:
        models.TicketType.objects.filter(pk=ticket_type_id.value).update(
            sold_count=F("sold_count") + quantity
        )

    def list_published_events(self) -> list[Event]:
        rows = models.Event.objects.filter(published=True).order_by("start_date", "name")
        return [_event_to_domain(row) for row in rows]


class DjangoTicketStore(TicketStore):
    """Relational ticket store using Django ORM."""

    def get_ticket(self, ticket_id: TicketId) -> Ticket | None:
        row = models.Ticket.objects.filter(pk=ticket_id.value).first()
        return _ticket_to_domain(row) if row else None

    def get_ticket_by_qr_id(self, qr_id: str) -> Ticket | None:
        row = models.Ticket.objects.filter(qr_id=qr_id).first()
        return _ticket_to_domain(row) if row else None

    @contextmanager
    def locked_ticket(
        self, *, qr_id: str | None = None, ticket_id: TicketId | None = None
    ) -> Iterator[Ticket | None]:
        with transaction.atomic():
            rows = models.Ticket.objects.select_for_update()
            if qr_id is not None:
                row = rows.filter(qr_id=qr_id).first()
            else:
                row = rows.filter(pk=ticket_id.value).first()
            yield _ticket_to_domain(row) if row else None

    def create_tickets(self, tickets: list[Ticket]) -> list[Ticket]:
        with transaction.atomic():
            for ticket in tickets:
                _ticket_to_row(ticket).save(force_insert=True)
        return list(tickets)

    def save_ticket(self, ticket: Ticket) -> Ticket:
        _ticket_to_row(ticket).save(force_update=True)
        return ticket

    def bind_tickets(self, tickets: list[Ticket]) -> list[Ticket]:
        written = []
        with transaction.atomic():
            for ticket in tickets:
                updated = models.Ticket.objects.filter(
                    pk=ticket.id.value, user_id__isnull=True
                ).update(
                    user_id=ticket.user_id,
                    linked_at=ticket.linked_at,
                    linked_via=ticket.linked_via,
                    linked_by=ticket.linked_by,
                    orphan_recovery_data=_recovery_to_json(ticket.orphan_recovery_data),
                    updated_at=ticket.updated_at,
                )
                if updated:
                    written.append(ticket.id)
        return [self.get_ticket(ticket_id) for ticket_id in written]
    def find_by_order(self, order_id: str) -> list[Ticket]:
        return self._many(models.Ticket.objects.filter(order_id=order_id))

    def find_by_user(self, uid: str) -> list[Ticket]:
        return self._many(models.Ticket.objects.filter(user_id=uid))

    def find_by_customer_email(self, email: str) -> list[Ticket]:
        return self._many(models.Ticket.objects.filter(customer_email__iexact=email))

    def find_unbound_by_email(self, email: str) -> list[Ticket]:
        return self._many(
            models.Ticket.objects.filter(customer_email__iexact=email, user_id__isnull=True)
        )

    def find_unbound(
        self, limit: int = 100, exclude_created_via: tuple[str, ...] = ()
    ) -> list[Ticket]:
        rows = models.Ticket.objects.filter(user_id__isnull=True).exclude(
            created_via__in=exclude_created_via
        )
        return self._many(rows.order_by("-created_at")[:limit])

    def find_courtesy(self, limit: int = 100) -> list[Ticket]:
        return self._many(
            models.Ticket.objects.filter(is_courtesy=True).order_by("-created_at")[:limit]
        )

    def find_by_event(self, event_id: EventId) -> list[Ticket]:
        return self._many(models.Ticket.objects.filter(event_id=event_id.value))

    def append_log(self, entry: TicketLog) -> None:
        models.TicketLog.objects.create(
            ticket_id=entry.ticket_id.value,
            event_id=entry.event_id.value,
            qr_id=entry.qr_id,
            action=entry.action.value,
            method=entry.method.value,
            performed_by=entry.performed_by,
            performed_at=entry.performed_at,
            day=entry.day,
            notes=entry.notes,
        )

    def logs_for_ticket(self, ticket_id: TicketId) -> list[TicketLog]:
        rows = models.TicketLog.objects.filter(ticket_id=ticket_id.value)
        return [_log_to_domain(row) for row in rows]

    @staticmethod
    def _many(queryset) -> list[Ticket]:
        return [_ticket_to_domain(row) for row in queryset]


class DjangoDocumentStorage(DocumentStorage):
    """Keeps ticket PDFs in a Django storage backend (MEDIA_ROOT by default)."""

    def __init__(self, prefix: str = "tickets", storage: Storage | None = None) -> None:
        self._prefix = prefix.strip("/")
        self._storage = storage or default_storage

    def save(self, name: str, content: bytes) -> str:
        path = f"{self._prefix}/{name}" if self._prefix else name
        if self._storage.exists(path):
            self._storage.delete(path)
        return self._storage.save(path, ContentFile(content))
