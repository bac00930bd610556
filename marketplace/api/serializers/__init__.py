# Marketplace API Serializers

# Import response serializers for API documentation
from .response_serializers import (
    AddToCartRequestSerializer,
    CartFeesRequestSerializer,
    ErrorResponseSerializer,
    OrderDetailResponseSerializer,
    OrderItemResponseSerializer,
    OrderResponseSerializer,
    RemoveFromCartRequestSerializer,
    SuccessResponseSerializer,
    UpdateCartRequestSerializer,
)


__all__ = [
    # Response serializers for documentation
    "ErrorResponseSerializer",
    "SuccessResponseSerializer",
    "AddToCartRequestSerializer",
    "UpdateCartRequestSerializer",
    "RemoveFromCartRequestSerializer",
    "CartFeesRequestSerializer",
    "OrderItemResponseSerializer",
    "OrderResponseSerializer",
    "OrderDetailResponseSerializer",
]
