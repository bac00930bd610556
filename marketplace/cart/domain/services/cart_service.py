"""
CartService - Persisted Shopping Carts

Loads a buyer's cart aggregate from storage, applies one mutation and saves
it back. The aggregate itself owns the totals; this service only resolves
products into cart lines and persists the result.
"""

from typing import Optional

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError

from marketplace.cart.domain.aggregate import Cart, CartLine
from marketplace.cart.domain.models import SavedCart
from marketplace.catalog.domain.models.catalog import Product
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok

User = get_user_model()


class CartService(BaseService):
    """
    Service for managing a buyer's persisted cart.

    Responsibilities:
    - Load and save the cart aggregate per buyer
    - Add, update, remove and clear lines
    """

    def load(self, user: User) -> Cart:
        saved = SavedCart.objects.filter(buyer=user).first()
        if saved is None:
            return Cart()
        return saved.to_cart()

    def save(self, user: User, cart: Cart) -> Cart:
        saved, _ = SavedCart.objects.get_or_create(buyer=user)
        saved.store(cart)
        self.logger.debug(f"Saved cart for user {user.id}: {cart.total_items} items, total {cart.total_amount}")
        return cart

    @BaseService.log_performance
    def add_product(self, user: User, product_id: str, quantity: Optional[int] = None) -> ServiceResult[Cart]:
        """
        Add a catalog product to the buyer's cart.

        Example:
            >>> result = cart_service.add_product(user, product_id, quantity=2)
            >>> if result.ok:
            ...     print(result.value.total_items)
        """
        if quantity is not None and quantity < 1:
            return service_err(ErrorCodes.INVALID_QUANTITY, "Quantity must be at least 1")

        try:
            product = Product.objects.select_related("shop").get(id=product_id)
        except (Product.DoesNotExist, ValidationError, ValueError):
            return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")

        cart = self.load(user)
        cart.add_item(CartLine.from_product(product), quantity)
        self.logger.info(f"User {user.id} added {quantity or 1}x product {product_id} to cart")
        return service_ok(self.save(user, cart))

    @BaseService.log_performance
    def update_quantity(self, user: User, product_id: str, quantity: int) -> ServiceResult[Cart]:
        """Set a line's quantity; zero or less removes the line."""
        cart = self.load(user)
        if product_id not in cart:
            return service_err(ErrorCodes.ITEM_NOT_IN_CART, f"Product {product_id} is not in the cart")

        cart.set_quantity(product_id, quantity)
        return service_ok(self.save(user, cart))

    @BaseService.log_performance
    def remove_product(self, user: User, product_id: str) -> ServiceResult[Cart]:
        cart = self.load(user)
        if not cart.remove_item(product_id):
            return service_err(ErrorCodes.ITEM_NOT_IN_CART, f"Product {product_id} is not in the cart")
        return service_ok(self.save(user, cart))

    def clear(self, user: User) -> Cart:
        cart = self.load(user)
        cart.clear()
        return self.save(user, cart)
