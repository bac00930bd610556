from decimal import Decimal

import pytest
from django.test import override_settings

from marketplace.cart.domain.services.pricing_service import (
    DeliveryZone,
    FeeBreakdown,
    PricingService,
    to_decimal,
)
from marketplace.tests.factories import CartLineFactory, OnOrderCartLineFactory


@pytest.mark.unit
class TestPricingServiceUnit:
    def setup_method(self):
        self.service = PricingService()

        # 2 x 100 in stock, with a runner fee that applies even to stock items
        self.chair = CartLineFactory(product_id="p-chair", price=Decimal("100.00"), quantity=2, runner_fee="5.00")
        # 2 x 80 on order: delivery 20/unit local, runner 10/unit, transport 15/unit
        self.rug = OnOrderCartLineFactory(product_id="p-rug", price=Decimal("80.00"), quantity=2)

    def test_defaults_from_settings(self):
        assert self.service.default_shipping_fee == Decimal("50.00")
        assert self.service.deposit_rate == Decimal("0.5")

    def test_empty_cart_is_all_zero(self):
        breakdown = self.service.calculate_checkout_totals([], "local")

        assert breakdown == FeeBreakdown()
        assert breakdown.total == Decimal("0")
        assert breakdown.shipping_fee == Decimal("0")

    def test_in_stock_only(self):
        breakdown = self.service.calculate_checkout_totals([self.chair], "local")

        assert breakdown.standard_total == Decimal("200.00")
        assert breakdown.full_on_order_total == Decimal("0")
        assert breakdown.delivery_fees_total == Decimal("0")
        assert breakdown.runner_fees_total == Decimal("10.00")
        assert breakdown.shipping_fee == Decimal("50.00")
        assert breakdown.total == Decimal("260.00")

    def test_in_stock_lines_never_pay_delivery(self):
        line = CartLineFactory(price=Decimal("10.00"), delivery_fee_local=Decimal("99.00"))
        assert self.service.line_delivery_fee(line, DeliveryZone.LOCAL) == Decimal("0")

    def test_mixed_cart_local(self):
        breakdown = self.service.calculate_checkout_totals([self.chair, self.rug], "local")

        assert breakdown.standard_total == Decimal("200.00")
        assert breakdown.full_on_order_total == Decimal("160.00")
        assert breakdown.on_order_total == Decimal("160.00")
        assert breakdown.deposit_balance_due == Decimal("0")
        assert breakdown.delivery_fees_total == Decimal("40.00")
        assert breakdown.runner_fees_total == Decimal("30.00")
        assert breakdown.transport_fees_total == Decimal("30.00")
        # 200 + 160 + 50 shipping + 40 delivery + 30 runner; transport is paid on delivery
        assert breakdown.total == Decimal("480.00")

    def test_deposit_halves_on_order_value(self):
        breakdown = self.service.calculate_checkout_totals([self.chair, self.rug], "local", deposit=True)

        assert breakdown.on_order_total == Decimal("80.00")
        assert breakdown.deposit_balance_due == Decimal("80.00")
        assert breakdown.on_order_total + breakdown.deposit_balance_due == breakdown.full_on_order_total
        assert breakdown.total == Decimal("400.00")

    @pytest.mark.parametrize(
        "zone,expected_delivery",
        [
            ("local", Decimal("40.00")),
            ("uptown", Decimal("70.00")),
            ("outoftown", Decimal("120.00")),
            ("countrywide", Decimal("240.00")),
            (DeliveryZone.UPTOWN, Decimal("70.00")),
            ("", Decimal("40.00")),
            (None, Decimal("40.00")),
        ],
    )
    def test_delivery_fee_by_zone(self, zone, expected_delivery):
        breakdown = self.service.calculate_checkout_totals([self.rug], zone)
        assert breakdown.delivery_fees_total == expected_delivery

    def test_invalid_zone(self):
        with pytest.raises(ValueError):
            self.service.calculate_checkout_totals([self.rug], "moon")

    def test_free_delivery_threshold_reached(self):
        rug = OnOrderCartLineFactory(price=Decimal("80.00"), quantity=2, free_delivery_threshold=Decimal("150.00"))
        assert self.service.line_delivery_fee(rug, DeliveryZone.LOCAL) == Decimal("0")

    def test_free_delivery_threshold_not_reached(self):
        rug = OnOrderCartLineFactory(price=Decimal("80.00"), quantity=1, free_delivery_threshold=Decimal("150.00"))
        assert self.service.line_delivery_fee(rug, DeliveryZone.LOCAL) == Decimal("20.00")

    def test_unusable_fee_values_count_as_zero(self):
        junk = OnOrderCartLineFactory(
            price=Decimal("10.00"),
            quantity=3,
            delivery_fee_local="not-a-number",
            runner_fee=Decimal("NaN"),
            transport_fee=True,
        )

        breakdown = self.service.calculate_checkout_totals([junk], "local")

        assert breakdown.delivery_fees_total == Decimal("0")
        assert breakdown.runner_fees_total == Decimal("0")
        assert breakdown.transport_fees_total == Decimal("0")
        assert breakdown.total == Decimal("80.00")

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, Decimal("0")),
            ("", Decimal("0")),
            (" 12.5 ", Decimal("12.5")),
            (7, Decimal("7")),
            (2.5, Decimal("2.5")),
            (float("inf"), Decimal("0")),
            (False, Decimal("0")),
            ([1], Decimal("0")),
        ],
    )
    def test_to_decimal(self, value, expected):
        assert to_decimal(value) == expected

    def test_calculation_is_deterministic(self):
        lines = [self.chair, self.rug]
        first = self.service.calculate_checkout_totals(lines, "uptown", deposit=True)
        second = self.service.calculate_checkout_totals(list(reversed(lines)), "uptown", deposit=True)

        assert first == second
        assert self.chair.quantity == 2 and self.rug.quantity == 2

    def test_explicit_shipping_fee(self):
        breakdown = self.service.calculate_checkout_totals([self.chair], "local", shipping_fee=Decimal("0"))
        assert breakdown.total == Decimal("210.00")

    def test_rounded_breakdown(self):
        line = CartLineFactory(price=Decimal("10.005"), quantity=1)

        rounded = self.service.calculate_checkout_totals([line], "local").rounded()

        assert rounded["standard_total"] == Decimal("10.01")
        assert rounded["total"] == Decimal("60.01")

    @override_settings(CHECKOUT_SHIPPING_FEE="75.00", DEPOSIT_RATE="0.3")
    def test_settings_override(self):
        service = PricingService()

        breakdown = service.calculate_checkout_totals([self.rug], "local", deposit=True)

        assert breakdown.shipping_fee == Decimal("75.00")
        assert breakdown.on_order_total == Decimal("48.00")

    def test_order_totals_exclude_shipping_and_transport(self):
        totals = self.service.calculate_order_totals([self.chair, self.rug], "local")

        assert totals.subtotal == Decimal("360.00")
        assert totals.delivery_fee == Decimal("40.00")
        assert totals.runner_fees_total == Decimal("30.00")
        assert totals.transport_fees_total == Decimal("30.00")
        assert totals.total_amount == Decimal("430.00")
        assert totals.has_on_order_items is True

    def test_order_totals_in_stock_only(self):
        totals = self.service.calculate_order_totals([self.chair], "countrywide")

        assert totals.total_amount == Decimal("210.00")
        assert totals.has_on_order_items is False
