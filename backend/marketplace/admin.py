from django.contrib import admin

from .models import (
    Account,
    Assignment,
    Booking,
    PaymentRecord,
    PendingPayment,
    Plan,
    ServiceFeedback,
    WebhookEvent,
)


class PlanInline(admin.TabularInline):
    model = Plan
    extra = 0
    fields = ("plan_id", "title", "status", "start_date", "end_date", "sprays_allowed", "sprays_used")
    readonly_fields = fields


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = ("name", "email", "role", "plan_active", "is_active", "updated_at")
    search_fields = ("name", "email", "phone")
    list_filter = ("role", "plan_active", "is_active")
    exclude = ("password",)
    inlines = [PlanInline]


@admin.register(Plan)
class PlanAdmin(admin.ModelAdmin):
    list_display = ("account", "title", "status", "sprays_used", "sprays_allowed", "end_date")
    search_fields = ("account__email", "plan_id", "title")
    list_filter = ("status",)


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("owner", "service_title", "status", "sprays_count", "schedule_date", "assigned_sprayer")
    search_fields = ("owner__email", "field", "address", "pincode")
    list_filter = ("status",)


@admin.register(Assignment)
class AssignmentAdmin(admin.ModelAdmin):
    list_display = ("sprayer", "booking", "farmer", "schedule_date", "status")
    search_fields = ("sprayer__email", "farmer__email")
    list_filter = ("status",)


@admin.register(ServiceFeedback)
class ServiceFeedbackAdmin(admin.ModelAdmin):
    list_display = ("booking", "author", "rating", "created_at")
    list_filter = ("rating",)


@admin.register(PendingPayment)
class PendingPaymentAdmin(admin.ModelAdmin):
    list_display = ("account", "order_id", "plan_id", "amount", "currency", "created_at")
    search_fields = ("account__email", "order_id")


@admin.register(PaymentRecord)
class PaymentRecordAdmin(admin.ModelAdmin):
    list_display = ("account", "order_id", "payment_id", "amount", "currency", "source", "created_at")
    search_fields = ("account__email", "order_id", "payment_id")
    list_filter = ("source", "currency")

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(WebhookEvent)
class WebhookEventAdmin(admin.ModelAdmin):
    list_display = ("provider", "event_type", "event_id", "status", "received_at", "processed_at")
    search_fields = ("event_id", "event_type")
    list_filter = ("provider", "status")
