from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import models

from marketplace.cart.domain.aggregate import Cart

User = get_user_model()


class SavedCart(models.Model):
    """Durable copy of a buyer's cart, stored as the aggregate's payload."""

    buyer = models.OneToOneField(User, on_delete=models.CASCADE, related_name="saved_cart")
    lines = models.JSONField(default=list, blank=True)
    total_items = models.PositiveIntegerField(default=0)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Saved Cart"
        verbose_name_plural = "Saved Carts"
        app_label = "marketplace"
        db_table = "saved_carts"

    def to_cart(self) -> Cart:
        return Cart.from_payload({"lines": self.lines})

    def store(self, cart: Cart) -> None:
        payload = cart.to_payload()
        self.lines = payload["lines"]
        self.total_items = payload["total_items"]
        self.total_amount = Decimal(payload["total_amount"])
        self.save()

    def __str__(self):
        return f"Cart for {self.buyer.username}"
