from rest_framework import serializers


class CartLineSerializer(serializers.Serializer):
    product_id = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    shop_id = serializers.CharField(read_only=True)
    shop_name = serializers.CharField(read_only=True)
    quantity = serializers.IntegerField(read_only=True)
    in_stock = serializers.BooleanField(read_only=True)
    image = serializers.CharField(read_only=True, allow_blank=True, allow_null=True)
    extended_price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)


class ShopGroupSerializer(serializers.Serializer):
    shop_id = serializers.CharField(read_only=True)
    shop_name = serializers.CharField(read_only=True)
    items = CartLineSerializer(many=True, read_only=True)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)


class CartServiceOutputSerializer(serializers.Serializer):
    """Serializes a Cart aggregate."""

    lines = CartLineSerializer(many=True, read_only=True)
    total_items = serializers.IntegerField(read_only=True)
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    shops = serializers.SerializerMethodField()

    def get_shops(self, cart):
        return ShopGroupSerializer(cart.items_grouped_by_shop(), many=True).data


class FeeBreakdownSerializer(serializers.Serializer):
    standard_total = serializers.DecimalField(max_digits=12, decimal_places=2)
    full_on_order_total = serializers.DecimalField(max_digits=12, decimal_places=2)
    on_order_total = serializers.DecimalField(max_digits=12, decimal_places=2)
    deposit_balance_due = serializers.DecimalField(max_digits=12, decimal_places=2)
    delivery_fees_total = serializers.DecimalField(max_digits=12, decimal_places=2)
    runner_fees_total = serializers.DecimalField(max_digits=12, decimal_places=2)
    transport_fees_total = serializers.DecimalField(max_digits=12, decimal_places=2)
    shipping_fee = serializers.DecimalField(max_digits=12, decimal_places=2)
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
