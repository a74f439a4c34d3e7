from django.contrib import admin

from ticketing.models import Event, Ticket, TicketLog, TicketType


class TicketTypeInline(admin.TabularInline):
    model = TicketType
    extra = 1
    fields = ["name", "access_type", "available_days", "price", "currency", "is_courtesy"]


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ["name", "location", "start_date", "end_date", "published"]
    list_filter = ["published"]
    search_fields = ["name", "location", "slug"]
    prepopulated_fields = {"slug": ["name"]}
    inlines = [TicketTypeInline]


@admin.register(TicketType)
class TicketTypeAdmin(admin.ModelAdmin):
    list_display = ["name", "event", "access_type", "price", "sold_count"]
    list_filter = ["event", "access_type", "is_courtesy"]
    readonly_fields = ["sold_count"]


@admin.register(Ticket)
class TicketAdmin(admin.ModelAdmin):
    list_display = ["qr_id", "event", "ticket_type_name", "status", "customer_email", "user_id"]
    list_filter = ["event", "status", "is_courtesy"]
    search_fields = ["qr_id", "order_id", "customer_email", "attendee_name"]
    readonly_fields = ["qr_id", "order_id", "used_days", "orphan_recovery_data", "created_at"]

    # Tickets are issued through checkout and courtesy grants only.
    def has_add_permission(self, request) -> bool:
        return False


@admin.register(TicketLog)
class TicketLogAdmin(admin.ModelAdmin):
    list_display = ["qr_id", "action", "day", "performed_by", "performed_at", "method"]
    list_filter = ["action", "method", "event"]

    def has_change_permission(self, request, obj=None) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False
