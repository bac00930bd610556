from .checkout_service import CheckoutResult, CheckoutService
from .commission import CommissionSplit, split_commission
from .payment_service import PaymentResult, PaymentService
from .payout_service import DistributionResult, PayoutService

__all__ = [
    "CheckoutResult",
    "CheckoutService",
    "CommissionSplit",
    "split_commission",
    "PaymentResult",
    "PaymentService",
    "DistributionResult",
    "PayoutService",
]
