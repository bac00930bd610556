"""
Marketplace Service Layer

Shared building blocks for the domain services of the marketplace and
payment apps: the ServiceResult pattern and the BaseService logger/timer.
The services themselves live next to their domain (cart, ordering,
notifications, payment_system).

Usage:
    from marketplace.services import BaseService, ErrorCodes, service_ok, service_err

    class PayoutService(BaseService):
        def distribute(self, order_id):
            ...
            return service_err(ErrorCodes.ORDER_NOT_FOUND, f"Order {order_id} not found")
"""

from .base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok

__all__ = [
    # Base classes
    "BaseService",
    "ServiceResult",
    # Helper functions
    "service_ok",
    "service_err",
    # Error codes
    "ErrorCodes",
]
