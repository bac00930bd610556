from rest_framework import serializers


# ===== Common Response Serializers =====


class ErrorResponseSerializer(serializers.Serializer):
    """Standard error response"""

    error = serializers.CharField(help_text="Error code identifier", required=False)
    detail = serializers.CharField(help_text="Human-readable error message")


class SuccessResponseSerializer(serializers.Serializer):
    """Generic success response"""

    detail = serializers.CharField(help_text="Success message")


# ===== Cart Request Serializers =====


class AddToCartRequestSerializer(serializers.Serializer):
    """Request body for adding item to cart"""

    product_id = serializers.UUIDField(help_text="Product UUID to add")
    quantity = serializers.IntegerField(min_value=1, default=1, help_text="Quantity to add (default: 1)")


class UpdateCartRequestSerializer(serializers.Serializer):
    """Request body for updating cart item"""

    product_id = serializers.UUIDField(help_text="Product UUID to update")
    quantity = serializers.IntegerField(help_text="New quantity (0 or less removes the item)")


class RemoveFromCartRequestSerializer(serializers.Serializer):
    """Request body for removing item from cart"""

    product_id = serializers.UUIDField(help_text="Product UUID to remove")


class CartFeesRequestSerializer(serializers.Serializer):
    """Query parameters for the checkout fee preview"""

    delivery_location = serializers.ChoiceField(
        choices=["local", "uptown", "outoftown", "countrywide"],
        default="local",
        help_text="Delivery zone",
    )
    is_deposit_payment = serializers.BooleanField(default=False, help_text="Pay a deposit on on-order items")


# ===== Order Response Serializers =====


class OrderItemResponseSerializer(serializers.Serializer):
    id = serializers.CharField()
    product_id = serializers.CharField()
    quantity = serializers.IntegerField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2)
    runner_fee = serializers.DecimalField(max_digits=10, decimal_places=2)
    transport_fee = serializers.DecimalField(max_digits=10, decimal_places=2)


class OrderResponseSerializer(serializers.Serializer):
    id = serializers.CharField()
    buyer_id = serializers.CharField()
    shop_id = serializers.CharField()
    status = serializers.CharField()
    payment_status = serializers.CharField()
    payment_method = serializers.CharField()
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    delivery_fee = serializers.DecimalField(max_digits=10, decimal_places=2)
    runner_fees_total = serializers.DecimalField(max_digits=10, decimal_places=2)
    transport_fees_total = serializers.DecimalField(max_digits=10, decimal_places=2)
    transport_fees_paid = serializers.BooleanField()
    has_on_order_items = serializers.BooleanField()
    is_deposit_payment = serializers.BooleanField()
    delivery_address = serializers.CharField()
    phone_number = serializers.CharField()
    delivery_location = serializers.CharField()
    special_instructions = serializers.CharField(allow_blank=True)
    payment_proof_url = serializers.CharField(allow_null=True)
    payment_proof_uploaded_at = serializers.DateTimeField(allow_null=True)
    payment_date = serializers.DateTimeField(allow_null=True)
    delivered_at = serializers.DateTimeField(allow_null=True)
    created_at = serializers.DateTimeField()


class OrderDetailResponseSerializer(serializers.Serializer):
    """Order with its items, shipping snapshot and payments"""

    order = OrderResponseSerializer()
    items = OrderItemResponseSerializer(many=True)
    shipping = serializers.JSONField(allow_null=True)
    payments = serializers.JSONField()
