"""
Payment Service Abstraction Layer
=================================

Provides a unified interface for charging buyers and paying out sellers.
"""

from .factory import PaymentFactory
from .interface import PaymentException, PaymentIntent, PaymentProviderInterface, PaymentStatus
from .simulated_provider import SimulatedPaymentProvider

__all__ = [
    "PaymentProviderInterface",
    "PaymentIntent",
    "PaymentStatus",
    "PaymentException",
    "SimulatedPaymentProvider",
    "PaymentFactory",
]
