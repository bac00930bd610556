from .catalog import Product, SellerStats, Shop


__all__ = [
    "Shop",
    "Product",
    "SellerStats",
]
