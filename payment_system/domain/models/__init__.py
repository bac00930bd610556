from .payment import Payment, PaymentDistribution, PlatformTransaction


__all__ = [
    "Payment",
    "PlatformTransaction",
    "PaymentDistribution",
]
