import uuid
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import models


User = get_user_model()


class Payment(models.Model):
    """
    Buyer payment for one order.

    Cash orders are recorded as completed at checkout. Every other method stays
    pending until the seller approves the uploaded payment proof.
    """

    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("completed", "Completed"),
    ]

    PROVIDER_CHOICES = [
        ("cash", "Cash"),
        ("ewallet", "E-Wallet"),
        ("mobile_money", "Mobile Money"),
        ("bank", "Bank"),
        ("easy_wallet", "Easy Wallet"),
        ("other", "Other"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey("marketplace.Order", on_delete=models.CASCADE, related_name="payments")
    shop = models.ForeignKey("marketplace.Shop", on_delete=models.CASCADE, related_name="payments")
    buyer = models.ForeignKey(User, on_delete=models.CASCADE, related_name="payments")

    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    platform_fee = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    seller_amount = models.DecimalField(max_digits=12, decimal_places=2)

    payment_method = models.CharField(max_length=20)
    payment_provider = models.CharField(max_length=20, choices=PROVIDER_CHOICES, default="other")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending")

    processed_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "payments"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["order", "status"], name="payments_order_status_idx"),
            models.Index(fields=["shop", "status"], name="payments_shop_status_idx"),
        ]

    def __str__(self):
        return f"Payment {str(self.id)[:8]} for order {str(self.order_id)[:8]} ({self.status})"


class PlatformTransaction(models.Model):
    """Commission retained by the platform, written once a payment completes."""

    TYPE_CHOICES = [
        ("commission", "Commission"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default="commission")
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default="NAD")

    order = models.ForeignKey("marketplace.Order", on_delete=models.CASCADE, related_name="platform_transactions")
    shop = models.ForeignKey("marketplace.Shop", on_delete=models.CASCADE, related_name="platform_transactions")
    payment = models.ForeignKey(Payment, on_delete=models.CASCADE, related_name="platform_transactions")

    description = models.CharField(max_length=255)
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "platform_transactions"
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.type} {self.amount} {self.currency} on order {str(self.order_id)[:8]}"


class PaymentDistribution(models.Model):
    """
    Seller settlement for a delivered order.

    At most one row exists per order; its presence is what stops a second
    payout for the same order. A row still at ``transferred`` has been paid
    out but not yet credited to the seller's stats.
    """

    STATUS_CHOICES = [
        ("transferred", "Transferred"),
        ("completed", "Completed"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.OneToOneField("marketplace.Order", on_delete=models.CASCADE, related_name="distribution")
    shop = models.ForeignKey("marketplace.Shop", on_delete=models.CASCADE, related_name="distributions")

    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    platform_fee = models.DecimalField(max_digits=12, decimal_places=2)
    seller_amount = models.DecimalField(max_digits=12, decimal_places=2)

    transfer_reference = models.CharField(max_length=255, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="completed")
    distributed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "payment_distributions"
        ordering = ["-created_at"]

    def __str__(self):
        return f"Distribution of {self.seller_amount} for order {str(self.order_id)[:8]}"
