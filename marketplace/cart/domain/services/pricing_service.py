"""
PricingService - Checkout Fee Calculations

Derives delivery, runner and transport fees and the deposit split for a list
of cart lines. All calculations use Decimal and are pure: the same lines,
zone and deposit flag always produce the same breakdown.

Fee rules:
- Delivery fees apply to on-order lines only, using the per-unit fee of the
  chosen zone times the quantity. A line whose extended price reaches its
  free-delivery threshold ships free.
- Runner and transport fees are per unit and apply wherever they are set.
- Transport fees are collected on delivery, so they never enter the total due.
"""

from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Iterable, Optional

from django.conf import settings

from marketplace.cart.domain.aggregate import CartLine
from marketplace.services.base import BaseService


ZERO = Decimal("0")
CENT = Decimal("0.01")


class DeliveryZone(str, Enum):
    LOCAL = "local"
    UPTOWN = "uptown"
    OUTOFTOWN = "outoftown"
    COUNTRYWIDE = "countrywide"

    @classmethod
    def parse(cls, value: Any) -> "DeliveryZone":
        """Coerce user input to a zone; blank means local."""
        if isinstance(value, cls):
            return value
        if value is None or str(value).strip() == "":
            return cls.LOCAL
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(zone.value for zone in cls)
            raise ValueError(f"Invalid delivery location '{value}'. Must be one of: {allowed}") from None


def to_decimal(value: Any) -> Decimal:
    """
    Read a fee field as a Decimal, treating anything unusable as zero.

    None, booleans, non-numeric strings, NaN and infinities all become 0 so a
    single bad product row cannot poison a checkout total.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        number = Decimal(str(value))
    elif isinstance(value, str):
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            return ZERO
    else:
        return ZERO
    return number if number.is_finite() else ZERO


def quantize_money(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class FeeBreakdown:
    """Checkout review totals (unrounded; use ``rounded()`` for display)."""

    standard_total: Decimal = ZERO
    full_on_order_total: Decimal = ZERO
    on_order_total: Decimal = ZERO
    deposit_balance_due: Decimal = ZERO
    delivery_fees_total: Decimal = ZERO
    runner_fees_total: Decimal = ZERO
    transport_fees_total: Decimal = ZERO
    shipping_fee: Decimal = ZERO
    total: Decimal = ZERO

    def rounded(self) -> Dict[str, Decimal]:
        return {name: quantize_money(value) for name, value in asdict(self).items()}


@dataclass(frozen=True)
class OrderTotals:
    """Amounts persisted on a single shop's order."""

    subtotal: Decimal
    delivery_fee: Decimal
    runner_fees_total: Decimal
    transport_fees_total: Decimal
    total_amount: Decimal
    has_on_order_items: bool


class PricingService(BaseService):
    """
    Service for calculating checkout fees and totals.

    Responsibilities:
    - Checkout review totals with shipping and deposit split
    - Per-shop order totals used when orders are created
    - Per-line delivery, runner and transport fees

    All methods are stateless (pure functions) for easy testing.
    """

    def __init__(self):
        """Initialize PricingService."""
        super().__init__()
        self.default_shipping_fee = Decimal(str(getattr(settings, "CHECKOUT_SHIPPING_FEE", "50.00")))
        self.deposit_rate = Decimal(str(getattr(settings, "DEPOSIT_RATE", "0.5")))

    def line_delivery_fee(self, line: CartLine, zone: DeliveryZone) -> Decimal:
        """
        Delivery fee for one line; in-stock lines never pay it.

        Example:
            >>> line = CartLine("p1", "Sofa", Decimal("300"), "s1", in_stock=False,
            ...                 delivery_fee_local=Decimal("20"))
            >>> pricing_service.line_delivery_fee(line, DeliveryZone.LOCAL)
            Decimal('20')
        """
        if line.in_stock:
            return ZERO

        threshold = to_decimal(line.free_delivery_threshold)
        if threshold > 0 and line.extended_price >= threshold:
            return ZERO

        per_unit = to_decimal(getattr(line, f"delivery_fee_{zone.value}", None))
        return per_unit * line.quantity

    def line_runner_fee(self, line: CartLine) -> Decimal:
        return to_decimal(line.runner_fee) * line.quantity

    def line_transport_fee(self, line: CartLine) -> Decimal:
        return to_decimal(line.transport_fee) * line.quantity

    def calculate_checkout_totals(
        self,
        lines: Iterable[CartLine],
        zone: Any = DeliveryZone.LOCAL,
        deposit: bool = False,
        shipping_fee: Optional[Decimal] = None,
    ) -> FeeBreakdown:
        """
        Calculate the amounts shown on the checkout review screen.

        Args:
            lines: Cart lines (any shops)
            zone: Delivery zone or its string value
            deposit: Pay only part of the on-order value up front
            shipping_fee: Flat shipping; defaults to CHECKOUT_SHIPPING_FEE

        Returns:
            FeeBreakdown where total = standard + on-order due now + shipping
            + delivery + runner fees

        Example:
            >>> breakdown = pricing_service.calculate_checkout_totals(cart.lines, "local", deposit=True)
            >>> breakdown.on_order_total == breakdown.full_on_order_total * Decimal("0.5")
            True
        """
        zone = DeliveryZone.parse(zone)
        lines = list(lines)
        if not lines:
            # Nothing to ship
            return FeeBreakdown()

        shipping = self.default_shipping_fee if shipping_fee is None else to_decimal(shipping_fee)

        standard_total = ZERO
        full_on_order_total = ZERO
        delivery_fees_total = ZERO
        runner_fees_total = ZERO
        transport_fees_total = ZERO

        for line in lines:
            if line.in_stock:
                standard_total += line.extended_price
            else:
                full_on_order_total += line.extended_price
            delivery_fees_total += self.line_delivery_fee(line, zone)
            runner_fees_total += self.line_runner_fee(line)
            transport_fees_total += self.line_transport_fee(line)

        on_order_total = full_on_order_total * self.deposit_rate if deposit else full_on_order_total
        total = standard_total + on_order_total + shipping + delivery_fees_total + runner_fees_total

        return FeeBreakdown(
            standard_total=standard_total,
            full_on_order_total=full_on_order_total,
            on_order_total=on_order_total,
            deposit_balance_due=full_on_order_total - on_order_total,
            delivery_fees_total=delivery_fees_total,
            runner_fees_total=runner_fees_total,
            transport_fees_total=transport_fees_total,
            shipping_fee=shipping,
            total=total,
        )

    def calculate_order_totals(self, lines: Iterable[CartLine], zone: Any = DeliveryZone.LOCAL) -> OrderTotals:
        """
        Calculate the amounts stored on one shop's order.

        The order records the full value of its lines plus delivery and runner
        fees. Shipping is a checkout-screen figure and the deposit split only
        changes what is collected now, so neither alters ``total_amount``.
        """
        zone = DeliveryZone.parse(zone)
        lines = list(lines)

        subtotal = sum((line.extended_price for line in lines), ZERO)
        delivery_fee = sum((self.line_delivery_fee(line, zone) for line in lines), ZERO)
        runner_fees_total = sum((self.line_runner_fee(line) for line in lines), ZERO)
        transport_fees_total = sum((self.line_transport_fee(line) for line in lines), ZERO)

        return OrderTotals(
            subtotal=quantize_money(subtotal),
            delivery_fee=quantize_money(delivery_fee),
            runner_fees_total=quantize_money(runner_fees_total),
            transport_fees_total=quantize_money(transport_fees_total),
            total_amount=quantize_money(subtotal + delivery_fee + runner_fees_total),
            has_on_order_items=any(not line.in_stock for line in lines),
        )
