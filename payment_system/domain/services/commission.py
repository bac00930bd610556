"""
Platform commission split shared by payment capture and payout distribution.

Both paths must derive the platform fee from the order total the same way,
otherwise the commission recorded at payment time and the amount settled to
the seller drift apart.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from django.conf import settings

CENT = Decimal("0.01")


@dataclass(frozen=True)
class CommissionSplit:
    total_amount: Decimal
    platform_fee: Decimal
    seller_amount: Decimal
    commission_rate: Decimal


def commission_rate() -> Decimal:
    return Decimal(str(getattr(settings, "PLATFORM_COMMISSION_RATE", "0.05")))


def split_commission(total_amount: Any, rate: Optional[Decimal] = None) -> CommissionSplit:
    """
    Split an order total into platform fee and seller amount.

    The fee is rounded half-up to the cent and the seller gets the remainder,
    so ``platform_fee + seller_amount == total_amount`` always holds.

    Example:
        >>> split_commission(Decimal("200.00")).platform_fee
        Decimal('10.00')
    """
    rate = commission_rate() if rate is None else Decimal(str(rate))
    total = Decimal(str(total_amount)).quantize(CENT, rounding=ROUND_HALF_UP)
    platform_fee = (total * rate).quantize(CENT, rounding=ROUND_HALF_UP)
    return CommissionSplit(
        total_amount=total,
        platform_fee=platform_fee,
        seller_amount=total - platform_fee,
        commission_rate=rate,
    )
