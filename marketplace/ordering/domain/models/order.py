import uuid

from django.contrib.auth import get_user_model
from django.db import models

from marketplace.catalog.domain.models.catalog import Product, Shop

User = get_user_model()


class Order(models.Model):
    """
    One shop's share of a buyer's checkout.

    ``total_amount`` is fixed when the order is created; later changes only
    move ``status`` and ``payment_status`` forward.
    """

    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("pending_payment_verification", "Pending Payment Verification"),
        ("processing", "Processing"),
        ("shipped", "Shipped"),
        ("delivered", "Delivered"),
        ("cancelled", "Cancelled"),
    ]

    PAYMENT_STATUS_CHOICES = [
        ("unpaid", "Unpaid"),
        ("proof_submitted", "Proof Submitted"),
        ("proof_rejected", "Proof Rejected"),
        ("paid", "Paid"),
    ]

    PAYMENT_METHOD_CHOICES = [
        ("cash", "Cash on Delivery"),
        ("ewallet", "E-Wallet"),
        ("pay_to_cell", "Pay to Cell"),
        ("bank_transfer", "Bank Transfer"),
        ("easy_wallet", "Easy Wallet"),
    ]

    DELIVERY_LOCATION_CHOICES = [
        ("local", "Local"),
        ("uptown", "Uptown"),
        ("outoftown", "Out of Town"),
        ("countrywide", "Countrywide"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    buyer = models.ForeignKey(User, on_delete=models.CASCADE, related_name="orders")
    shop = models.ForeignKey(Shop, on_delete=models.CASCADE, related_name="orders")

    # Order Details
    status = models.CharField(max_length=32, choices=STATUS_CHOICES, default="pending")
    payment_status = models.CharField(max_length=20, choices=PAYMENT_STATUS_CHOICES, default="unpaid")
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES)

    # Pricing
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    delivery_fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    runner_fees_total = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    transport_fees_total = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    transport_fees_paid = models.BooleanField(default=False)
    has_on_order_items = models.BooleanField(default=False)
    is_deposit_payment = models.BooleanField(default=False)

    # Delivery
    delivery_address = models.TextField()
    phone_number = models.CharField(max_length=32)
    delivery_location = models.CharField(max_length=20, choices=DELIVERY_LOCATION_CHOICES, default="local")
    special_instructions = models.TextField(blank=True)

    # Payment proof for non-cash methods
    # Holds a placeholder instead of a URL when the upload failed
    payment_proof_url = models.CharField(max_length=2000, null=True, blank=True)
    payment_proof_uploaded_at = models.DateTimeField(null=True, blank=True)

    # Timestamps
    payment_date = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        app_label = "marketplace"
        db_table = "orders"
        indexes = [
            models.Index(fields=["buyer", "-created_at"], name="orders_buyer_created_idx"),
            models.Index(fields=["shop", "status"], name="orders_shop_status_idx"),
            models.Index(fields=["shop", "payment_status", "payment_date"], name="orders_shop_paystatus_idx"),
        ]

    def __str__(self):
        return f"Order {str(self.id)[:8]} for {self.shop_id}"


class OrderItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="order_items")

    quantity = models.PositiveIntegerField(default=1)

    # Snapshot at time of purchase
    price = models.DecimalField(max_digits=10, decimal_places=2)
    runner_fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    transport_fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        app_label = "marketplace"
        db_table = "order_items"

    def __str__(self):
        return f"{self.quantity}x {self.product_id} in order {str(self.order_id)[:8]}"


class OrderShipping(models.Model):
    """Delivery details captured at checkout, kept apart from the order row."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.OneToOneField(Order, on_delete=models.CASCADE, related_name="shipping_info")
    delivery_address = models.TextField()
    phone_number = models.CharField(max_length=32)
    delivery_location = models.CharField(max_length=20)
    special_instructions = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        app_label = "marketplace"
        db_table = "order_shipping"

    def __str__(self):
        return f"Shipping for order {str(self.order_id)[:8]}"


class OrderComment(models.Model):
    """Buyer/seller conversation attached to an order."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="comments")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="order_comments")
    message = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        app_label = "marketplace"
        db_table = "order_comments"

    def __str__(self):
        return f"Comment on order {str(self.order_id)[:8]}"
