from .order import Order, OrderComment, OrderItem, OrderShipping


__all__ = [
    "Order",
    "OrderItem",
    "OrderShipping",
    "OrderComment",
]
