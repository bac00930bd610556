from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from infrastructure.container import container  # For DI
from marketplace.api.serializers import (
    AddToCartRequestSerializer,
    CartFeesRequestSerializer,
    ErrorResponseSerializer,
    RemoveFromCartRequestSerializer,
    UpdateCartRequestSerializer,
)
from marketplace.cart.api.serializers.cart_serializers import (
    CartServiceOutputSerializer,
    FeeBreakdownSerializer,
    ShopGroupSerializer,
)
from marketplace.cart.domain.services import CartService
from marketplace.services.base import ErrorCodes


class CartViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]

    def get_service(self) -> CartService:
        # Inject CartService via DI container
        return container.cart_service()

    def get_output_serializer(self, *args, **kwargs):
        return CartServiceOutputSerializer(*args, **kwargs)

    @extend_schema(
        operation_id="cart_get",
        summary="Get user's shopping cart",
        description="""
        **What it receives:**
        - Authentication (session or basic)

        **What it returns:**
        - Cart lines with product snapshots
        - Running totals (total_items, total_amount)
        - Lines grouped by shop with subtotals
        """,
        responses={
            200: OpenApiResponse(response=CartServiceOutputSerializer, description="Cart retrieved successfully"),
        },
        tags=["Marketplace - Cart"],
    )
    def list(self, request):
        cart = self.get_service().load(request.user)
        return Response(self.get_output_serializer(cart).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="cart_add_item",
        summary="Add item to cart",
        description="""
        **What it receives:**
        - `product_id` (UUID): Product to add
        - `quantity` (integer, optional): Quantity to add (default: 1)

        **What it returns:**
        - Updated cart with all lines
        - Updated totals
        """,
        request=AddToCartRequestSerializer,
        responses={
            200: OpenApiResponse(response=CartServiceOutputSerializer, description="Item added successfully"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid data"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
        },
        tags=["Marketplace - Cart"],
    )
    @action(detail=False, methods=["post"])
    def add_item(self, request):
        input_serializer = AddToCartRequestSerializer(data=request.data)
        if not input_serializer.is_valid():
            return Response(input_serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = self.get_service().add_product(
            request.user,
            str(input_serializer.validated_data["product_id"]),
            input_serializer.validated_data["quantity"],
        )

        if not result.ok:
            if result.error == ErrorCodes.PRODUCT_NOT_FOUND:
                return Response({"error": result.error, "detail": result.error_detail}, status=status.HTTP_404_NOT_FOUND)
            return Response({"error": result.error, "detail": result.error_detail}, status=status.HTTP_400_BAD_REQUEST)

        return Response(self.get_output_serializer(result.value).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="cart_update_item",
        summary="Update item quantity in cart",
        description="""
        **What it receives:**
        - `product_id` (UUID): Product to update
        - `quantity` (integer): New quantity (0 or less removes the item)

        **What it returns:**
        - Updated cart with modified quantities
        - Updated totals
        """,
        request=UpdateCartRequestSerializer,
        responses={
            200: OpenApiResponse(response=CartServiceOutputSerializer, description="Item updated successfully"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid data"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Item not in cart"),
        },
        tags=["Marketplace - Cart"],
    )
    @action(detail=False, methods=["patch"])
    def update_item(self, request):
        input_serializer = UpdateCartRequestSerializer(data=request.data)
        if not input_serializer.is_valid():
            return Response(input_serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = self.get_service().update_quantity(
            request.user,
            str(input_serializer.validated_data["product_id"]),
            input_serializer.validated_data["quantity"],
        )

        if not result.ok:
            return Response({"error": result.error, "detail": result.error_detail}, status=status.HTTP_404_NOT_FOUND)

        return Response(self.get_output_serializer(result.value).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="cart_remove_item",
        summary="Remove item from cart",
        description="""
        **What it receives:**
        - `product_id` (UUID): Product to remove

        **What it returns:**
        - Updated cart without the removed item
        - Updated totals
        """,
        request=RemoveFromCartRequestSerializer,
        responses={
            200: OpenApiResponse(response=CartServiceOutputSerializer, description="Item removed successfully"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid product_id"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Item not in cart"),
        },
        tags=["Marketplace - Cart"],
    )
    @action(detail=False, methods=["delete"])
    def remove_item(self, request):
        input_serializer = RemoveFromCartRequestSerializer(data=request.data)
        if not input_serializer.is_valid():
            return Response(input_serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = self.get_service().remove_product(request.user, str(input_serializer.validated_data["product_id"]))

        if not result.ok:
            return Response({"error": result.error, "detail": result.error_detail}, status=status.HTTP_404_NOT_FOUND)

        return Response(self.get_output_serializer(result.value).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="cart_clear",
        summary="Clear all items from cart",
        description="""
        **What it receives:**
        - Authentication (session or basic)

        **What it returns:**
        - No content (204)
        """,
        responses={204: OpenApiResponse(description="Cart cleared successfully")},
        tags=["Marketplace - Cart"],
    )
    @action(detail=False, methods=["delete"])
    def clear(self, request):
        self.get_service().clear(request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        operation_id="cart_by_shop",
        summary="Get cart lines grouped by shop",
        description="""
        **What it receives:**
        - Authentication (session or basic)

        **What it returns:**
        - One group per shop: shop id and name, lines, subtotal
        """,
        responses={200: OpenApiResponse(response=ShopGroupSerializer(many=True), description="Grouped cart")},
        tags=["Marketplace - Cart"],
    )
    @action(detail=False, methods=["get"])
    def by_shop(self, request):
        cart = self.get_service().load(request.user)
        return Response(ShopGroupSerializer(cart.items_grouped_by_shop(), many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="cart_fees",
        summary="Preview checkout fees",
        description="""
        **What it receives:**
        - `delivery_location` (query): local, uptown, outoftown or countrywide
        - `is_deposit_payment` (query): pay half of on-order items now

        **What it returns:**
        - Standard and on-order totals, deposit balance
        - Delivery, runner and transport fee totals
        - Shipping fee and the total due now
        """,
        parameters=[
            OpenApiParameter(name="delivery_location", type=str, description="Delivery zone (default: local)"),
            OpenApiParameter(name="is_deposit_payment", type=bool, description="Deposit mode (default: false)"),
        ],
        responses={
            200: OpenApiResponse(response=FeeBreakdownSerializer, description="Fee breakdown"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid delivery zone"),
        },
        tags=["Marketplace - Cart"],
    )
    @action(detail=False, methods=["get"])
    def fees(self, request):
        params = CartFeesRequestSerializer(data=request.query_params)
        if not params.is_valid():
            return Response(params.errors, status=status.HTTP_400_BAD_REQUEST)

        cart = self.get_service().load(request.user)
        breakdown = container.pricing_service().calculate_checkout_totals(
            cart.lines,
            params.validated_data["delivery_location"],
            deposit=params.validated_data["is_deposit_payment"],
        )
        return Response(FeeBreakdownSerializer(breakdown.rounded()).data, status=status.HTTP_200_OK)
