import uuid

from django.contrib.auth import get_user_model
from django.db import models

from marketplace.catalog.domain.models.catalog import Product, Shop
from marketplace.ordering.domain.models.order import Order

User = get_user_model()


class Notification(models.Model):
    TYPE_CHOICES = [
        ("new_order", "New Order"),
        ("order_confirmed", "Order Confirmed"),
        ("payment_approved", "Payment Approved"),
        ("payment_rejected", "Payment Rejected"),
        ("payment_received", "Payment Received"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="notifications")
    type = models.CharField(max_length=32, choices=TYPE_CHOICES)
    title = models.CharField(max_length=200)
    message = models.TextField()

    order = models.ForeignKey(Order, on_delete=models.CASCADE, null=True, blank=True, related_name="notifications")
    shop = models.ForeignKey(Shop, on_delete=models.CASCADE, null=True, blank=True, related_name="notifications")
    product = models.ForeignKey(
        Product, on_delete=models.SET_NULL, null=True, blank=True, related_name="notifications"
    )

    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        app_label = "marketplace"
        db_table = "notifications"
        indexes = [
            models.Index(fields=["user", "is_read"], name="notifications_user_read_idx"),
        ]

    def __str__(self):
        return f"{self.type} for {self.user_id}: {self.title}"
