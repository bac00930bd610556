from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.serializers import (
    ErrorResponseSerializer,
    OrderDetailResponseSerializer,
    OrderResponseSerializer,
)
from marketplace.ordering.domain.services import OrderService
from marketplace.services.base import ErrorCodes

ERROR_STATUS = {
    ErrorCodes.ORDER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCodes.PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    ErrorCodes.INVALID_ORDER_STATE: status.HTTP_409_CONFLICT,
}


def error_response(result):
    return Response(
        {"error": result.error, "detail": result.error_detail},
        status=ERROR_STATUS.get(result.error, status.HTTP_400_BAD_REQUEST),
    )


class OrderViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]

    def get_service(self) -> OrderService:
        return container.order_service()

    @extend_schema(
        operation_id="orders_retrieve",
        summary="Get order details",
        description="""
        **What it receives:**
        - `id` (UUID): Order ID in URL
        - Authentication; only the buyer and the shop owner may read the order

        **What it returns:**
        - Order row with fee breakdown and payment status
        - Order items with price snapshots
        - Shipping snapshot and payments
        """,
        responses={
            200: OpenApiResponse(response=OrderDetailResponseSerializer, description="Order retrieved successfully"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the buyer or shop owner"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
        },
        tags=["Marketplace - Orders"],
    )
    def retrieve(self, request, pk=None):
        result = self.get_service().get_order_details(pk, user_id=request.user.id)
        if not result.ok:
            return error_response(result)

        return Response(OrderDetailResponseSerializer(result.value).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="orders_confirm_delivery",
        summary="Confirm order delivery",
        description="""
        **What it receives:**
        - `id` (UUID): Order ID in URL
        - Authentication; buyer or shop owner

        **What it returns:**
        - Updated order with status `delivered`
        - Payment distribution to the seller is queued in the background
        """,
        request=None,
        responses={
            200: OpenApiResponse(response=OrderResponseSerializer, description="Order marked delivered"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the buyer or shop owner"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
            409: OpenApiResponse(response=ErrorResponseSerializer, description="Order cannot be delivered yet"),
        },
        tags=["Marketplace - Orders"],
    )
    @action(detail=True, methods=["post"])
    def confirm_delivery(self, request, pk=None):
        result = self.get_service().confirm_delivery(pk, user_id=request.user.id)
        if not result.ok:
            return error_response(result)

        return Response(OrderResponseSerializer(result.value).data, status=status.HTTP_200_OK)
