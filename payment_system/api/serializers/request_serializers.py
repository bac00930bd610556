from rest_framework import serializers


class CheckoutRequestSerializer(serializers.Serializer):
    """
    Checkout input. Field values are checked again by the checkout service, which
    owns the payment-method allow-list and the delivery zone rules.
    """

    payment_method = serializers.CharField(
        help_text="cash, ewallet, pay_to_cell, bank_transfer or easy_wallet (case-insensitive)"
    )
    delivery_address = serializers.CharField(required=False, allow_blank=True, help_text="Delivery address")
    phone_number = serializers.CharField(required=False, allow_blank=True, help_text="Contact phone number")
    delivery_location = serializers.CharField(
        required=False, allow_blank=True, default="local", help_text="local, uptown, outoftown or countrywide"
    )
    special_instructions = serializers.CharField(required=False, allow_blank=True, default="")
    is_deposit_payment = serializers.BooleanField(required=False, default=False)
    lines = serializers.JSONField(
        required=False, help_text="Cart lines; defaults to the buyer's saved cart when omitted"
    )
    payment_proof = serializers.FileField(required=False, help_text="Payment proof image for non-cash methods")


class PaymentProofUploadRequestSerializer(serializers.Serializer):
    payment_proof = serializers.FileField(required=True, help_text="Payment proof image")


class PaymentProofRejectRequestSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="", help_text="Why the proof was rejected")


class SellerEarningsQuerySerializer(serializers.Serializer):
    start = serializers.DateTimeField(required=False, help_text="Only orders created at or after this time")
    end = serializers.DateTimeField(required=False, help_text="Only orders created at or before this time")
