"""
Payment Provider Factory
========================

Factory pattern for creating payment provider instances based on configuration.
"""

import logging
from typing import Literal

from django.conf import settings

from .interface import PaymentProviderInterface
from .simulated_provider import SimulatedPaymentProvider

logger = logging.getLogger(__name__)

PaymentBackend = Literal["simulated"]


class PaymentFactory:
    """
    Factory for creating payment provider instances.

    Usage:
        # In settings.py
        PAYMENT_PROVIDER = 'simulated'

        # In your code
        payment_provider = PaymentFactory.create()
    """

    @staticmethod
    def create(backend: PaymentBackend | None = None) -> PaymentProviderInterface:
        """
        Create a payment provider instance.

        Args:
            backend: Payment backend type. If None, reads settings.PAYMENT_PROVIDER

        Raises:
            ValueError: If backend type is invalid
        """
        backend_type = backend or getattr(settings, "PAYMENT_PROVIDER", "simulated")

        logger.info(f"Creating payment provider: {backend_type}")

        if backend_type == "simulated":
            return SimulatedPaymentProvider()
        else:
            raise ValueError(f"Invalid payment provider: {backend_type}. Currently only 'simulated' is supported")
