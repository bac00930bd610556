from django.contrib import admin
from django.urls import reverse
from django.utils.html import format_html

from .models import Payment, PaymentDistribution, PlatformTransaction


def order_link(obj):
    url = reverse("admin:marketplace_order_change", args=[obj.order_id])
    return format_html('<a href="{}">{}</a>', url, str(obj.order_id)[:8])


order_link.short_description = "Order"


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = [
        "id_short",
        order_link,
        "shop",
        "payment_method",
        "payment_provider",
        "status_badge",
        "total_amount",
        "platform_fee",
        "seller_amount",
        "created_at",
    ]
    list_filter = ["status", "payment_method", "payment_provider", "created_at"]
    search_fields = ["order__id", "shop__name", "buyer__username"]
    readonly_fields = ["id", "created_at"]

    fieldsets = (
        ("Basic Information", {"fields": ("id", "status", "payment_method", "payment_provider")}),
        ("Amounts", {"fields": ("total_amount", "platform_fee", "seller_amount")}),
        ("Relationships", {"fields": ("order", "shop", "buyer")}),
        ("Timestamps", {"fields": ("processed_at", "completed_at", "created_at")}),
    )

    def id_short(self, obj):
        return str(obj.id)[:8] + "..."

    id_short.short_description = "ID"

    def status_badge(self, obj):
        color = "#28a745" if obj.status == "completed" else "#ffc107"
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 8px; border-radius: 3px;">{}</span>',
            color,
            obj.get_status_display(),
        )

    status_badge.short_description = "Status"


@admin.register(PlatformTransaction)
class PlatformTransactionAdmin(admin.ModelAdmin):
    list_display = ["id", "type", order_link, "shop", "amount", "currency", "created_at"]
    list_filter = ["type", "currency", "created_at"]
    search_fields = ["order__id", "shop__name", "description"]
    readonly_fields = ["id", "created_at", "metadata"]


@admin.register(PaymentDistribution)
class PaymentDistributionAdmin(admin.ModelAdmin):
    list_display = [order_link, "shop", "seller_amount", "platform_fee", "status", "transfer_reference", "distributed_at"]
    list_filter = ["status", "distributed_at"]
    search_fields = ["order__id", "shop__name", "transfer_reference"]
    readonly_fields = ["id", "created_at"]
