from rest_framework import serializers


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField(required=False, help_text="Error code")
    detail = serializers.CharField(help_text="Error message")
    field = serializers.CharField(required=False, help_text="Offending input field")


class FailedOrderSerializer(serializers.Serializer):
    shop_id = serializers.CharField()
    shop_name = serializers.CharField(required=False)
    order_id = serializers.CharField(required=False)
    orphaned_order_id = serializers.CharField(required=False)
    error = serializers.CharField()


class PaymentResultSerializer(serializers.Serializer):
    order_id = serializers.CharField()
    payment_id = serializers.CharField()
    status = serializers.CharField()
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    seller_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    platform_fee = serializers.DecimalField(max_digits=12, decimal_places=2)
    payment_status = serializers.CharField()
    order_status = serializers.CharField()
    proof_url = serializers.CharField(allow_null=True)


class CheckoutResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    orders = serializers.JSONField(help_text="Placed orders with items and payment")
    failed_orders = FailedOrderSerializer(many=True)
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    payment_method = serializers.CharField()
    requires_payment_proof = serializers.BooleanField()


class DistributionResponseSerializer(serializers.Serializer):
    order_id = serializers.CharField()
    shop_id = serializers.CharField()
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    platform_fee = serializers.DecimalField(max_digits=12, decimal_places=2)
    seller_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    transfer_reference = serializers.CharField()
    distribution_id = serializers.CharField()


class SellerEarningsResponseSerializer(serializers.Serializer):
    shop_id = serializers.CharField()
    order_count = serializers.IntegerField()
    total_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    platform_fees = serializers.DecimalField(max_digits=14, decimal_places=2)
    net_earnings = serializers.DecimalField(max_digits=14, decimal_places=2)
    distributed_total = serializers.DecimalField(max_digits=14, decimal_places=2)
    currency = serializers.CharField()
