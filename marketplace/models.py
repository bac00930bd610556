from marketplace.cart.domain.models import SavedCart
from marketplace.catalog.domain.models import Product, SellerStats, Shop
from marketplace.notifications.domain.models import Notification
from marketplace.ordering.domain.models import Order, OrderComment, OrderItem, OrderShipping


__all__ = [
    "Shop",
    "Product",
    "SellerStats",
    "SavedCart",
    "Order",
    "OrderItem",
    "OrderShipping",
    "OrderComment",
    "Notification",
]
