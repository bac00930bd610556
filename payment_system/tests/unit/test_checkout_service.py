from decimal import Decimal

import pytest

from infrastructure.payments import SimulatedPaymentProvider
from infrastructure.persistence import InMemoryPersistenceGateway, Tables
from marketplace.notifications.domain.services import NotificationService
from marketplace.ordering.domain.services import OrderService
from marketplace.tests.factories import CartLineFactory, OnOrderCartLineFactory
from payment_system.domain.exceptions import CheckoutValidationError
from payment_system.domain.services import CheckoutService, PaymentService


class FlakyProvider(SimulatedPaymentProvider):
    """Declines authorizations for the listed shops."""

    def __init__(self, declined_shops):
        super().__init__(success_rate=1.0, latency_seconds=0)
        self.declined_shops = set(declined_shops)

    def authorize_payment(self, amount, currency, payment_method, metadata=None):
        if (metadata or {}).get("shop_id") in self.declined_shops:
            self.success_rate = 0.0
        try:
            return super().authorize_payment(amount, currency, payment_method, metadata)
        finally:
            self.success_rate = 1.0


@pytest.mark.unit
class TestCheckoutServiceUnit:
    def setup_method(self):
        self.gateway = InMemoryPersistenceGateway()
        self.gateway.seed(
            Tables.SHOPS,
            [
                {"id": "shop-a", "name": "Shop A", "owner_id": 10},
                {"id": "shop-b", "name": "Shop B", "owner_id": 20},
            ],
        )
        self.gateway.seed(
            Tables.PRODUCTS,
            [
                {"id": "p-chair", "stock_quantity": 5, "in_stock": True},
                {"id": "p-lamp", "stock_quantity": 3, "in_stock": True},
            ],
        )
        self.lines = [
            CartLineFactory(product_id="p-chair", price=Decimal("100.00"), quantity=2),
            OnOrderCartLineFactory(product_id="p-rug", price=Decimal("80.00"), quantity=1),
            CartLineFactory(product_id="p-lamp", price=Decimal("40.00"), shop_id="shop-b", shop_name="Shop B"),
        ]
        self.details = {"delivery_address": "12 Independence Ave", "phone_number": "+264 81 123 4567"}
        self.service = self._service(SimulatedPaymentProvider(success_rate=1.0, latency_seconds=0))

    def _service(self, provider):
        notifications = NotificationService(gateway=self.gateway)
        return CheckoutService(
            order_service=OrderService(gateway=self.gateway),
            payment_service=PaymentService(
                gateway=self.gateway, payment_provider=provider, notification_service=notifications
            ),
            notification_service=notifications,
        )

    def _notifications(self, notification_type):
        return [row for row in self.gateway.rows(Tables.NOTIFICATIONS) if row["type"] == notification_type]

    def test_cash_checkout_across_shops(self):
        result = self.service.process_checkout(1, self.lines, self.details, "cash")

        assert result.success is True
        assert result.failed_orders == []
        assert [order["shop_id"] for order in result.orders] == ["shop-a", "shop-b"]
        assert all(order["payment_status"] == "paid" for order in result.orders)
        assert all(order["payment"]["status"] == "completed" for order in result.orders)
        # 310 for shop A (items, delivery and runner fees) and 40 for shop B
        assert result.total_amount == Decimal("350.00")
        assert result.requires_payment_proof is False

        assert len(self.gateway.rows(Tables.PAYMENTS)) == 2
        assert len(self.gateway.rows(Tables.PLATFORM_TRANSACTIONS)) == 2
        assert {row["user_id"] for row in self._notifications("new_order")} == {10, 20}
        assert len(self._notifications("order_confirmed")) == 2

    def test_single_cash_order_platform_fee(self):
        line = CartLineFactory(product_id="p-chair", price=Decimal("125.00"), quantity=2)

        result = self.service.process_checkout(1, [line], self.details, "cash")

        assert result.success is True
        assert result.total_amount == Decimal("250.00")
        payment = self.gateway.rows(Tables.PAYMENTS)[0]
        assert payment["status"] == "completed"
        assert payment["total_amount"] == Decimal("250.00")
        assert payment["platform_fee"] == Decimal("12.50")
        assert payment["seller_amount"] == Decimal("237.50")
        commission = self.gateway.rows(Tables.PLATFORM_TRANSACTIONS)
        assert len(commission) == 1
        assert commission[0]["amount"] == Decimal("12.50")
        assert commission[0]["payment_id"] == payment["id"]
        assert result.orders[0]["payment_status"] == "paid"
        assert result.orders[0]["status"] == "processing"

    def test_result_dict(self):
        data = self.service.process_checkout(1, self.lines[:1], self.details, "cash").to_dict()

        assert data["success"] is True
        assert data["total_amount"] == "200.00"
        assert data["payment_method"] == "cash"
        assert data["orders"][0]["shop_name"] == "Shop A"
        assert len(data["orders"][0]["items"]) == 1

    def test_proof_checkout(self):
        result = self.service.process_checkout(1, self.lines, self.details, "ewallet", proof_image=b"proof")

        assert result.requires_payment_proof is True
        assert all(order["payment_status"] == "proof_submitted" for order in result.orders)
        assert all(order["status"] == "pending_payment_verification" for order in result.orders)
        assert len(self.gateway.blobs) == 2
        assert self.gateway.rows(Tables.PLATFORM_TRANSACTIONS) == []
        assert all("Payment proof required" in row["message"] for row in self._notifications("new_order"))

    def test_invalid_input_raises_before_writes(self):
        with pytest.raises(CheckoutValidationError):
            self.service.process_checkout(1, self.lines, self.details, "crypto")
        with pytest.raises(CheckoutValidationError):
            self.service.process_checkout(1, self.lines, {"delivery_address": "x"}, "cash")
        with pytest.raises(CheckoutValidationError):
            self.service.process_checkout(1, [], self.details, "cash")

        assert self.gateway.write_calls == []

    def test_declined_shop_is_reported(self):
        service = self._service(FlakyProvider(declined_shops={"shop-b"}))

        result = service.process_checkout(1, self.lines, self.details, "cash")

        assert result.success is True
        assert [order["shop_id"] for order in result.orders] == ["shop-a"]
        assert len(result.failed_orders) == 1
        failed = result.failed_orders[0]
        assert failed["shop_id"] == "shop-b"
        assert "You have not been charged." in failed["error"]
        assert result.total_amount == Decimal("310.00")

        shop_b_order = next(row for row in self.gateway.rows(Tables.ORDERS) if row["shop_id"] == "shop-b")
        assert failed["order_id"] == shop_b_order["id"]
        assert shop_b_order["payment_status"] == "unpaid"
        assert len(self.gateway.rows(Tables.PAYMENTS)) == 1
        assert {row["user_id"] for row in self._notifications("new_order")} == {10}

    def test_every_shop_declined(self):
        service = self._service(FlakyProvider(declined_shops={"shop-a", "shop-b"}))

        result = service.process_checkout(1, self.lines, self.details, "cash")

        assert result.success is False
        assert result.orders == []
        assert len(result.failed_orders) == 2
        assert result.total_amount == Decimal("0.00")

    def test_order_failure_and_payment_failure_are_both_listed(self):
        self.gateway.fail_on(Tables.ORDERS, "insert", lambda row: row["shop_id"] == "shop-a")
        service = self._service(FlakyProvider(declined_shops={"shop-b"}))

        result = service.process_checkout(1, self.lines, self.details, "cash")

        assert result.success is False
        assert {failed["shop_id"] for failed in result.failed_orders} == {"shop-a", "shop-b"}

    def test_notification_failure_does_not_fail_checkout(self):
        self.gateway.fail_on(Tables.NOTIFICATIONS, "insert")

        result = self.service.process_checkout(1, self.lines, self.details, "cash")

        assert result.success is True
        assert len(result.orders) == 2
