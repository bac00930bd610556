"""
Dependency Injection Container
================================

Simple service locator for infrastructure providers and the domain services
built on top of them. Services receive their collaborators through their
constructors; the container is only the place where the default wiring lives.

Usage:
    from infrastructure.container import container

    gateway = container.persistence()
    checkout = container.checkout_service()
"""

import logging
from typing import Optional

from .payments import PaymentFactory, PaymentProviderInterface, SimulatedPaymentProvider
from .persistence import InMemoryPersistenceGateway, PersistenceFactory, PersistenceGatewayInterface

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Service container for infrastructure dependencies.

    Implements lazy initialization and caching of service instances.
    Singleton pattern.
    """

    _instance: Optional["ServiceContainer"] = None
    _initialized: bool = False

    def __new__(cls):
        """Ensure only one instance exists (singleton pattern)."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize container (only once)."""
        if not self._initialized:
            self._clear()
            self._initialized = True
            logger.info("Service container initialized")

    def _clear(self):
        self._persistence: Optional[PersistenceGatewayInterface] = None
        self._payment: Optional[PaymentProviderInterface] = None

        # Domain Services
        self._pricing_service = None
        self._inventory_service = None
        self._cart_service = None
        self._notification_service = None
        self._order_service = None
        self._payment_service = None
        self._checkout_service = None
        self._payout_service = None

    def persistence(self, backend: Optional[str] = None) -> PersistenceGatewayInterface:
        """
        Get the persistence gateway.

        Args:
            backend: 'django' or 'memory'. If None, uses settings.PERSISTENCE_BACKEND

        Returns:
            PersistenceGatewayInterface implementation (cached)
        """
        if self._persistence is None or backend is not None:
            self._persistence = PersistenceFactory.create(backend)
            logger.debug(f"Created persistence gateway: {type(self._persistence).__name__}")

        return self._persistence

    def payment(self, backend: Optional[str] = None) -> PaymentProviderInterface:
        """
        Get payment provider instance.

        Args:
            backend: Payment backend type. If None, uses settings.PAYMENT_PROVIDER

        Returns:
            PaymentProviderInterface implementation (cached)
        """
        if self._payment is None or backend is not None:
            self._payment = PaymentFactory.create(backend)
            logger.debug(f"Created payment service: {type(self._payment).__name__}")

        return self._payment

    def pricing_service(self):
        """Get PricingService instance."""
        if self._pricing_service is None:
            from marketplace.cart.domain.services import PricingService

            self._pricing_service = PricingService()
            logger.debug("Created PricingService")
        return self._pricing_service

    def inventory_service(self):
        """Get InventoryService instance."""
        if self._inventory_service is None:
            from marketplace.cart.domain.services import InventoryService

            self._inventory_service = InventoryService(gateway=self.persistence())
            logger.debug("Created InventoryService")
        return self._inventory_service

    def cart_service(self):
        """Get CartService instance."""
        if self._cart_service is None:
            from marketplace.cart.domain.services import CartService

            self._cart_service = CartService()
            logger.debug("Created CartService")
        return self._cart_service

    def notification_service(self):
        """Get NotificationService instance."""
        if self._notification_service is None:
            from marketplace.notifications.domain.services import NotificationService

            self._notification_service = NotificationService(gateway=self.persistence())
            logger.debug("Created NotificationService")
        return self._notification_service

    def order_service(self):
        """Get OrderService instance."""
        if self._order_service is None:
            from marketplace.ordering.domain.services import OrderService

            self._order_service = OrderService(
                gateway=self.persistence(),
                pricing_service=self.pricing_service(),
                inventory_service=self.inventory_service(),
            )
            logger.debug("Created OrderService")
        return self._order_service

    def payment_service(self):
        """Get PaymentService instance."""
        if self._payment_service is None:
            from payment_system.domain.services import PaymentService

            self._payment_service = PaymentService(
                gateway=self.persistence(),
                payment_provider=self.payment(),
                notification_service=self.notification_service(),
            )
            logger.debug("Created PaymentService")
        return self._payment_service

    def checkout_service(self):
        """Get CheckoutService instance."""
        if self._checkout_service is None:
            from payment_system.domain.services import CheckoutService

            self._checkout_service = CheckoutService(
                order_service=self.order_service(),
                payment_service=self.payment_service(),
                notification_service=self.notification_service(),
            )
            logger.debug("Created CheckoutService")
        return self._checkout_service

    def payout_service(self):
        """Get PayoutService instance."""
        if self._payout_service is None:
            from payment_system.domain.services import PayoutService

            self._payout_service = PayoutService(
                gateway=self.persistence(),
                payment_provider=self.payment(),
                notification_service=self.notification_service(),
            )
            logger.debug("Created PayoutService")
        return self._payout_service

    def reset(self):
        """
        Reset all cached service instances.

        Useful for testing or when switching between environments.
        """
        self._clear()
        logger.info("Service container reset")

    def configure_for_testing(self):
        """
        Configure container with in-process providers for testing.

        Sets up:
            - In-memory persistence gateway
            - Simulated payment provider that always approves
        """
        self._clear()
        self._persistence = InMemoryPersistenceGateway()
        self._payment = SimulatedPaymentProvider(success_rate=1.0, latency_seconds=0)
        logger.info("Service container configured for testing")


# Global singleton instance
container = ServiceContainer()


# Convenience functions for quick access
def get_persistence() -> PersistenceGatewayInterface:
    """Get persistence gateway from global container."""
    return container.persistence()


def get_payment_provider() -> PaymentProviderInterface:
    """Get payment provider from global container."""
    return container.payment()

