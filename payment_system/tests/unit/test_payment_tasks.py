from decimal import Decimal
from unittest.mock import patch

import pytest
from celery.exceptions import Retry
from django.utils import timezone

from infrastructure.container import container
from infrastructure.persistence import Tables
from marketplace.services.base import ErrorCodes, service_err
from payment_system.Tasks.payment_tasks import distribute_delivered_orders_task, distribute_order_payment_task


@pytest.mark.unit
class TestPaymentTasksUnit:
    def setup_method(self):
        container.configure_for_testing()
        self.gateway = container.persistence()
        self.gateway.seed(Tables.SHOPS, [{"id": "shop-a", "name": "Shop A", "owner_id": 10, "payout_account": "acct"}])

    def _seed_order(self, order_id, **overrides):
        row = {
            "id": order_id,
            "buyer_id": 1,
            "shop_id": "shop-a",
            "total_amount": Decimal("100.00"),
            "status": "delivered",
            "payment_status": "paid",
            "delivered_at": timezone.now(),
        }
        row.update(overrides)
        self.gateway.seed(Tables.ORDERS, [row])

    def test_distributes_order(self):
        self._seed_order("order-1")

        result = distribute_order_payment_task("order-1")

        assert result["success"] is True
        assert result["distribution"]["seller_amount"] == "95.00"
        assert len(self.gateway.rows(Tables.PAYMENT_DISTRIBUTIONS)) == 1

    def test_final_errors_are_not_retried(self):
        self._seed_order("order-1", status="shipped")

        with patch.object(distribute_order_payment_task, "retry") as mock_retry:
            result = distribute_order_payment_task("order-1")

        assert result["success"] is False
        assert result["error"] == ErrorCodes.INVALID_ORDER_STATE
        mock_retry.assert_not_called()

    def test_already_distributed_is_final(self):
        self._seed_order("order-1")
        distribute_order_payment_task("order-1")

        result = distribute_order_payment_task("order-1")

        assert result["error"] == ErrorCodes.ALREADY_DISTRIBUTED
        assert len(self.gateway.rows(Tables.PAYMENT_DISTRIBUTIONS)) == 1

    def test_payout_failure_is_retried(self):
        failure = service_err(ErrorCodes.PAYOUT_FAILED, "rail down")

        with patch.object(container.payout_service(), "distribute", return_value=failure), patch.object(
            distribute_order_payment_task, "retry", side_effect=Retry()
        ) as mock_retry:
            with pytest.raises(Retry):
                distribute_order_payment_task("order-1")

        assert mock_retry.call_args.kwargs["countdown"] == 60

    def test_unexpected_error_is_retried(self):
        with patch.object(
            container.payout_service(), "distribute", side_effect=RuntimeError("store unavailable")
        ), patch.object(distribute_order_payment_task, "retry", side_effect=Retry()) as mock_retry:
            with pytest.raises(Retry):
                distribute_order_payment_task("order-1")

        assert isinstance(mock_retry.call_args.kwargs["exc"], RuntimeError)

    def test_sweep_distributes_pending_orders(self):
        self._seed_order("order-1")
        self._seed_order("order-2")
        self._seed_order("order-3", status="processing")

        result = distribute_delivered_orders_task()

        assert result["success"] is True
        assert sorted(result["distributed"]) == ["order-1", "order-2"]
        assert result["failed"] == {}
        assert result["checked"] == 2

    def test_sweep_reports_failures(self):
        self._seed_order("order-1")
        self._seed_order("order-2", shop_id="shop-gone")

        result = distribute_delivered_orders_task()

        assert result["distributed"] == ["order-1"]
        assert result["failed"] == {"order-2": ErrorCodes.PAYOUT_FAILED}
