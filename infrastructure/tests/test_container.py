"""
Service Container Tests
========================

Unit tests for dependency injection container.
"""

from django.test import TestCase

from infrastructure.container import ServiceContainer, container, get_payment_provider, get_persistence
from infrastructure.payments import PaymentProviderInterface, SimulatedPaymentProvider
from infrastructure.persistence import DjangoPersistenceGateway, InMemoryPersistenceGateway


class ServiceContainerTest(TestCase):
    """Test ServiceContainer implementation."""

    def setUp(self):
        """Set up test fixtures."""
        # Reset container before each test
        container.reset()

    def test_container_is_singleton(self):
        """Test that ServiceContainer is a singleton."""
        container1 = ServiceContainer()
        container2 = ServiceContainer()

        self.assertIs(container1, container2)
        self.assertIs(container1, container)

    def test_get_persistence_uses_settings_backend(self):
        """Test settings.PERSISTENCE_BACKEND selects the Django gateway."""
        gateway = container.persistence()

        self.assertIsInstance(gateway, DjangoPersistenceGateway)

        # Second call should return cached instance
        self.assertIs(gateway, container.persistence())

    def test_persistence_with_explicit_backend(self):
        """Test getting persistence with explicit backend."""
        gateway = container.persistence("memory")
        self.assertIsInstance(gateway, InMemoryPersistenceGateway)

    def test_get_payment_service(self):
        """Test getting payment service from container."""
        payment = container.payment()

        self.assertIsInstance(payment, PaymentProviderInterface)
        self.assertIsInstance(payment, SimulatedPaymentProvider)
        self.assertIs(payment, container.payment())

    def test_invalid_payment_backend(self):
        with self.assertRaises(ValueError):
            container.payment("stripe")

    def test_reset_container(self):
        """Test resetting container clears cached instances."""
        gateway1 = container.persistence()
        checkout1 = container.checkout_service()

        container.reset()

        self.assertIsNot(gateway1, container.persistence())
        self.assertIsNot(checkout1, container.checkout_service())

    def test_configure_for_testing(self):
        """Test configuring container for testing."""
        container.configure_for_testing()

        self.assertIsInstance(container.persistence(), InMemoryPersistenceGateway)
        self.assertIsInstance(container.payment(), SimulatedPaymentProvider)
        self.assertEqual(container.payment().success_rate, 1.0)

    def test_domain_services_share_collaborators(self):
        """Services built by the container are wired to the same providers."""
        container.configure_for_testing()
        gateway = container.persistence()

        checkout = container.checkout_service()
        payout = container.payout_service()

        self.assertIs(checkout.order_service, container.order_service())
        self.assertIs(checkout.payment_service, container.payment_service())
        self.assertIs(checkout.order_service.gateway, gateway)
        self.assertIs(checkout.order_service.inventory_service.gateway, gateway)
        self.assertIs(checkout.payment_service.gateway, gateway)
        self.assertIs(payout.gateway, gateway)
        self.assertIs(payout.payment_provider, container.payment())
        self.assertIs(payout.notification_service, container.notification_service())


class ConvenienceFunctionsTest(TestCase):
    """Test convenience functions for service access."""

    def setUp(self):
        """Set up test fixtures."""
        container.reset()

    def test_get_persistence_function(self):
        self.assertIs(get_persistence(), container.persistence())

    def test_get_payment_provider_function(self):
        """Test get_payment_provider convenience function."""
        payment = get_payment_provider()

        self.assertIsInstance(payment, PaymentProviderInterface)
        self.assertIs(payment, container.payment())
