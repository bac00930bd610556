import uuid

from django.contrib.auth import get_user_model
from django.core.validators import MinValueValidator
from django.db import models

User = get_user_model()


class Shop(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(User, on_delete=models.CASCADE, related_name="shops")
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)

    # Destination reference handed to the payment provider on payout
    payout_account = models.CharField(max_length=200, blank=True)

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        app_label = "marketplace"
        db_table = "shops"

    def __str__(self):
        return self.name


class Product(models.Model):
    """
    A sellable item.

    In-stock products ship from the shop's inventory. Products marked out of
    stock are still sold "on order": the shop sources them after checkout and
    charges the per-unit delivery, runner and transport fees below.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    shop = models.ForeignKey(Shop, on_delete=models.CASCADE, related_name="products")
    name = models.CharField(max_length=200)
    image_url = models.URLField(max_length=2000, blank=True)

    # Pricing and Inventory
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    stock_quantity = models.PositiveIntegerField(default=0)
    in_stock = models.BooleanField(default=True)

    # Per-unit fees for on-order fulfilment, by delivery zone
    delivery_fee_local = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    delivery_fee_uptown = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    delivery_fee_outoftown = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    delivery_fee_countrywide = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    runner_fee = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    transport_fee = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    free_delivery_threshold = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        app_label = "marketplace"
        db_table = "products"
        indexes = [
            models.Index(fields=["shop", "in_stock"], name="products_shop_in_stock_idx"),
        ]

    def __str__(self):
        return self.name


class SellerStats(models.Model):
    """Cumulative settlement totals per shop, only ever incremented by payout."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    shop = models.OneToOneField(Shop, on_delete=models.CASCADE, related_name="stats")
    total_revenue = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    total_orders_settled = models.PositiveIntegerField(default=0)
    last_updated = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "marketplace"
        db_table = "seller_stats"
        verbose_name_plural = "seller stats"

    def __str__(self):
        return f"Stats for {self.shop.name}"
