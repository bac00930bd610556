from django.contrib import admin

from .models import (
    Notification,
    Order,
    OrderComment,
    OrderItem,
    OrderShipping,
    Product,
    SavedCart,
    SellerStats,
    Shop,
)


class ProductInline(admin.TabularInline):
    model = Product
    extra = 0
    fields = ("name", "price", "stock_quantity", "in_stock")


@admin.register(Shop)
class ShopAdmin(admin.ModelAdmin):
    list_display = ("name", "owner", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name", "owner__username")
    inlines = [ProductInline]


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "shop", "price", "stock_quantity", "in_stock", "updated_at")
    list_filter = ("in_stock", "shop")
    search_fields = ("name", "shop__name")
    fieldsets = (
        ("Product", {"fields": ("shop", "name", "image_url", "price")}),
        ("Inventory", {"fields": ("stock_quantity", "in_stock")}),
        (
            "Fees",
            {
                "fields": (
                    "delivery_fee_local",
                    "delivery_fee_uptown",
                    "delivery_fee_outoftown",
                    "delivery_fee_countrywide",
                    "runner_fee",
                    "transport_fee",
                    "free_delivery_threshold",
                )
            },
        ),
    )


@admin.register(SellerStats)
class SellerStatsAdmin(admin.ModelAdmin):
    list_display = ("shop", "total_revenue", "total_orders_settled", "last_updated")
    readonly_fields = ("total_revenue", "total_orders_settled", "last_updated")


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("product", "quantity", "price", "runner_fee", "transport_fee")


class OrderShippingInline(admin.StackedInline):
    model = OrderShipping
    extra = 0


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "buyer", "shop", "status", "payment_status", "payment_method", "total_amount", "created_at")
    list_filter = ("status", "payment_status", "payment_method", "delivery_location", "created_at")
    search_fields = ("id", "buyer__username", "shop__name", "phone_number")
    readonly_fields = ("id", "total_amount", "created_at", "updated_at")
    inlines = [OrderItemInline, OrderShippingInline]


@admin.register(OrderComment)
class OrderCommentAdmin(admin.ModelAdmin):
    list_display = ("order", "user", "created_at")
    search_fields = ("order__id", "message")


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("type", "user", "title", "is_read", "created_at")
    list_filter = ("type", "is_read")


@admin.register(SavedCart)
class SavedCartAdmin(admin.ModelAdmin):
    list_display = ("buyer", "total_items", "total_amount", "updated_at")
