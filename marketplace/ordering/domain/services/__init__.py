from .order_service import (
    PAYMENT_METHODS,
    FailedShop,
    OrderCreationResult,
    OrderDetails,
    OrderService,
    normalize_payment_method,
)

__all__ = [
    "PAYMENT_METHODS",
    "FailedShop",
    "OrderCreationResult",
    "OrderDetails",
    "OrderService",
    "normalize_payment_method",
]
