import json
import logging

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from infrastructure.container import container
from infrastructure.persistence import Tables
from marketplace.services.base import ErrorCodes
from payment_system.api.permissions import IsStaffOrInternalService
from payment_system.api.serializers.request_serializers import (
    CheckoutRequestSerializer,
    PaymentProofRejectRequestSerializer,
    PaymentProofUploadRequestSerializer,
    SellerEarningsQuerySerializer,
)
from payment_system.api.serializers.response_serializers import (
    CheckoutResponseSerializer,
    DistributionResponseSerializer,
    ErrorResponseSerializer,
    PaymentResultSerializer,
    SellerEarningsResponseSerializer,
)
from payment_system.domain.exceptions import CheckoutValidationError


logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorCodes.ORDER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCodes.PAYMENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCodes.PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    ErrorCodes.NOT_SHOP_OWNER: status.HTTP_403_FORBIDDEN,
    ErrorCodes.INVALID_ORDER_STATE: status.HTTP_409_CONFLICT,
    ErrorCodes.INVALID_PAYMENT_STATE: status.HTTP_409_CONFLICT,
    ErrorCodes.ALREADY_DISTRIBUTED: status.HTTP_409_CONFLICT,
    ErrorCodes.PAYOUT_FAILED: status.HTTP_502_BAD_GATEWAY,
}


def error_response(result):
    return Response(
        {"error": result.error, "detail": result.error_detail},
        status=ERROR_STATUS.get(result.error, status.HTTP_400_BAD_REQUEST),
    )


def _checkout_lines(request, data):
    """Lines from the request body, or the buyer's saved cart when none were sent."""
    lines = data.get("lines")
    if lines is None:
        return container.cart_service().load(request.user), True
    if isinstance(lines, str):
        try:
            lines = json.loads(lines)
        except ValueError as e:
            raise CheckoutValidationError("lines must be a JSON list of cart lines", field="lines") from e
    if not isinstance(lines, list):
        raise CheckoutValidationError("lines must be a list of cart lines", field="lines")
    return lines, False


@extend_schema(
    operation_id="payment_checkout",
    summary="Place the buyer's cart",
    description="""
    **What it receives:**
    - `payment_method`: cash, ewallet, pay_to_cell, bank_transfer or easy_wallet
    - `delivery_address`, `phone_number` (required)
    - `delivery_location` (default local), `special_instructions`, `is_deposit_payment`
    - `lines` (optional): cart lines; the saved cart is used when omitted
    - `payment_proof` (optional file, multipart): proof for non-cash methods

    **What it returns:**
    - One order per shop with its payment outcome
    - Shops that failed, each with its error
    - Total of the placed orders and whether a payment proof is still needed
    """,
    request=CheckoutRequestSerializer,
    responses={
        201: OpenApiResponse(response=CheckoutResponseSerializer, description="At least one order placed"),
        400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid checkout input"),
        409: OpenApiResponse(response=CheckoutResponseSerializer, description="No order could be placed"),
    },
    tags=["Payments - Checkout"],
)
@api_view(["POST"])
@permission_classes([IsAuthenticated])
@parser_classes([JSONParser, MultiPartParser, FormParser])
def checkout(request):
    serializer = CheckoutRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        lines, from_saved_cart = _checkout_lines(request, data)
        result = container.checkout_service().process_checkout(
            buyer_id=request.user.id,
            lines=lines,
            order_details=data,
            payment_method=data["payment_method"],
            proof_image=data.get("payment_proof"),
        )
    except CheckoutValidationError as e:
        logger.info(f"Checkout rejected for user {request.user.id}: {e}")
        return Response(
            {"error": ErrorCodes.VALIDATION_ERROR, "detail": str(e), "field": e.field},
            status=status.HTTP_400_BAD_REQUEST,
        )

    if not result.success:
        return Response(result.to_dict(), status=status.HTTP_409_CONFLICT)

    if from_saved_cart:
        try:
            container.cart_service().clear(request.user)
        except Exception as e:
            logger.warning(f"Failed to clear cart after checkout for user {request.user.id}: {e}", exc_info=True)

    return Response(result.to_dict(), status=status.HTTP_201_CREATED)


@extend_schema(
    operation_id="payment_proof_submit",
    summary="Upload a payment proof",
    description="""
    **What it receives:**
    - `order_id` (UUID) in URL
    - `payment_proof` (file, multipart)

    **What it returns:**
    - Updated order with payment status `proof_submitted`
    """,
    request=PaymentProofUploadRequestSerializer,
    responses={
        200: OpenApiResponse(description="Proof submitted"),
        403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the buyer"),
        404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
        409: OpenApiResponse(response=ErrorResponseSerializer, description="Order does not take a proof now"),
    },
    tags=["Payments - Verification"],
)
@api_view(["POST"])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def submit_payment_proof(request, order_id):
    serializer = PaymentProofUploadRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    result = container.payment_service().submit_payment_proof(
        str(order_id), serializer.validated_data["payment_proof"], buyer_id=request.user.id
    )
    if not result.ok:
        return error_response(result)

    return Response({"order": result.value}, status=status.HTTP_200_OK)


@extend_schema(
    operation_id="payment_proof_approve",
    summary="Approve a payment proof (shop owner)",
    description="""
    **What it receives:**
    - `order_id` (UUID) in URL

    **What it returns:**
    - Completed payment; the commission is recorded and the order moves to processing
    """,
    request=None,
    responses={
        200: OpenApiResponse(response=PaymentResultSerializer, description="Payment approved"),
        403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the shop owner"),
        404: OpenApiResponse(response=ErrorResponseSerializer, description="Order or payment not found"),
        409: OpenApiResponse(response=ErrorResponseSerializer, description="No proof awaiting verification"),
    },
    tags=["Payments - Verification"],
)
@api_view(["POST"])
@permission_classes([IsAuthenticated])
def approve_payment_proof(request, order_id):
    result = container.payment_service().approve_payment_proof(str(order_id), request.user.id)
    if not result.ok:
        return error_response(result)

    return Response(PaymentResultSerializer(result.value.to_dict()).data, status=status.HTTP_200_OK)


@extend_schema(
    operation_id="payment_proof_reject",
    summary="Reject a payment proof (shop owner)",
    description="""
    **What it receives:**
    - `order_id` (UUID) in URL
    - `reason` (optional)

    **What it returns:**
    - Updated order with payment status `proof_rejected`; the buyer is notified
    """,
    request=PaymentProofRejectRequestSerializer,
    responses={
        200: OpenApiResponse(description="Proof rejected"),
        403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the shop owner"),
        404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
        409: OpenApiResponse(response=ErrorResponseSerializer, description="No proof awaiting verification"),
    },
    tags=["Payments - Verification"],
)
@api_view(["POST"])
@permission_classes([IsAuthenticated])
def reject_payment_proof(request, order_id):
    serializer = PaymentProofRejectRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    result = container.payment_service().reject_payment_proof(
        str(order_id), request.user.id, serializer.validated_data["reason"]
    )
    if not result.ok:
        return error_response(result)

    return Response({"order": result.value}, status=status.HTTP_200_OK)


@extend_schema(
    operation_id="payment_distribute",
    summary="Distribute a delivered order's payment",
    description="""
    **What it receives:**
    - `order_id` (UUID) in URL
    - Staff login or a whitelisted internal address

    **What it returns:**
    - Seller amount, platform fee and transfer reference
    """,
    request=None,
    responses={
        200: OpenApiResponse(response=DistributionResponseSerializer, description="Payment distributed"),
        404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
        409: OpenApiResponse(response=ErrorResponseSerializer, description="Not delivered or already distributed"),
        502: OpenApiResponse(response=ErrorResponseSerializer, description="Payout transfer failed"),
    },
    tags=["Payments - Distribution"],
)
@api_view(["POST"])
@permission_classes([IsStaffOrInternalService])
def distribute_order_payment(request, order_id):
    result = container.payout_service().distribute(str(order_id))
    if not result.ok:
        return error_response(result)

    return Response(DistributionResponseSerializer(result.value.to_dict()).data, status=status.HTTP_200_OK)


@extend_schema(
    operation_id="payment_seller_earnings",
    summary="Shop earnings summary (shop owner)",
    description="""
    **What it receives:**
    - `shop_id` (UUID) in URL
    - `start`, `end` (optional ISO datetimes, query), matched against the payment date

    **What it returns:**
    - Paid order count, revenue, platform fees and net earnings
    - Amount already distributed to the shop
    """,
    parameters=[
        OpenApiParameter(name="start", type=str, description="Range start (ISO 8601)"),
        OpenApiParameter(name="end", type=str, description="Range end (ISO 8601)"),
    ],
    responses={
        200: OpenApiResponse(response=SellerEarningsResponseSerializer, description="Earnings summary"),
        403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the shop owner"),
    },
    tags=["Payments - Distribution"],
)
@api_view(["GET"])
@permission_classes([IsAuthenticated])
def seller_earnings(request, shop_id):
    params = SellerEarningsQuerySerializer(data=request.query_params)
    if not params.is_valid():
        return Response(params.errors, status=status.HTTP_400_BAD_REQUEST)

    shop = container.persistence().select_one(Tables.SHOPS, {"id": str(shop_id)})
    if shop is None or (str(shop["owner_id"]) != str(request.user.id) and not request.user.is_staff):
        return Response(
            {"error": ErrorCodes.NOT_SHOP_OWNER, "detail": "You do not own this shop"},
            status=status.HTTP_403_FORBIDDEN,
        )

    result = container.payout_service().get_seller_earnings(
        str(shop_id), params.validated_data.get("start"), params.validated_data.get("end")
    )
    if not result.ok:
        return error_response(result)

    return Response(SellerEarningsResponseSerializer(result.value).data, status=status.HTTP_200_OK)
