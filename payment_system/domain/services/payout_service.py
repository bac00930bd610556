"""
PayoutService - Seller Payment Distribution

Settles delivered orders with their sellers: recomputes the commission split
from the stored order total, pays the seller through the payment provider,
records the distribution and credits the shop's running revenue.

A ``payment_distributions`` row is the settlement marker. It is written right
after the transfer with status ``transferred`` so an order can never be paid
out twice, and moves to ``completed`` once the seller's revenue is credited.
A distribution left at ``transferred`` by a failed credit is finished by the
next attempt without a second transfer.
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from django.conf import settings
from django.utils import timezone

from infrastructure.container import get_payment_provider, get_persistence
from infrastructure.observability.tracing import add_span_attributes, tracer
from infrastructure.payments.interface import PaymentProviderInterface
from infrastructure.persistence import (
    PaymentDistributionRecord,
    PersistenceGatewayInterface,
    SellerStatsRecord,
    Tables,
)
from marketplace.notifications.domain.services import NotificationService
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok
from payment_system.domain.services.commission import split_commission
from payment_system.infra.observability.metrics import payout_volume_total

TRANSFERRED = "transferred"
COMPLETED = "completed"


@dataclass
class DistributionResult:
    order_id: str
    shop_id: str
    total_amount: Decimal
    platform_fee: Decimal
    seller_amount: Decimal
    transfer_reference: str
    distribution_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {key: str(value) for key, value in asdict(self).items()}


class PayoutService(BaseService):
    """
    Service for distributing order payments to sellers.

    Dependencies:
    - PersistenceGatewayInterface: orders, shops, distributions, seller stats
    - PaymentProviderInterface: seller transfers
    - NotificationService: payment-received notification to the seller
    """

    def __init__(
        self,
        gateway: Optional[PersistenceGatewayInterface] = None,
        payment_provider: Optional[PaymentProviderInterface] = None,
        notification_service: Optional[NotificationService] = None,
    ):
        super().__init__()
        self.gateway = gateway or get_persistence()
        self.payment_provider = payment_provider or get_payment_provider()
        self.notification_service = notification_service or NotificationService(gateway=self.gateway)
        self.currency = getattr(settings, "MARKETPLACE_CURRENCY", "NAD")

    @BaseService.log_performance
    def distribute(self, order_id: str) -> ServiceResult[DistributionResult]:
        """
        Pay the seller their share of a delivered order.

        Returns:
            ServiceResult with DistributionResult; ``already_distributed`` when
            the order was settled before, ``invalid_order_state`` when it is not
            delivered and paid
        """
        with tracer.start_as_current_span("payout.distribute") as span:
            add_span_attributes(span, order_id=order_id)

            order = self.gateway.select_one(Tables.ORDERS, {"id": order_id})
            if order is None:
                return service_err(ErrorCodes.ORDER_NOT_FOUND, f"Order {order_id} not found")

            if order["status"] != "delivered":
                return service_err(
                    ErrorCodes.INVALID_ORDER_STATE,
                    f"Order {order_id} is '{order['status']}'; only delivered orders are distributed",
                )

            if order["payment_status"] != "paid":
                return service_err(
                    ErrorCodes.INVALID_PAYMENT_STATE,
                    f"Order {order_id} payment is '{order['payment_status']}'; only paid orders are distributed",
                )

            existing = self.gateway.select_one(Tables.PAYMENT_DISTRIBUTIONS, {"order_id": order_id})
            if existing is not None:
                if existing["status"] == TRANSFERRED:
                    self.logger.warning(f"Order {order_id} was paid out but not credited, finishing settlement")
                    return service_ok(self._settle(order, existing))
                self.logger.info(f"Order {order_id} already distributed, skipping")
                return service_err(ErrorCodes.ALREADY_DISTRIBUTED, f"Order {order_id} was already distributed")

            shop = self.gateway.select_one(Tables.SHOPS, {"id": order["shop_id"]})
            if shop is None:
                return service_err(ErrorCodes.PAYOUT_FAILED, f"Shop {order['shop_id']} for order {order_id} not found")

            split = split_commission(order["total_amount"])
            add_span_attributes(span, shop_id=shop["id"], seller_amount=split.seller_amount)

            try:
                transfer = self.payment_provider.create_transfer(
                    amount=split.seller_amount,
                    currency=self.currency,
                    destination_account=shop.get("payout_account") or f"shop:{shop['id']}",
                    metadata={"order_id": str(order_id), "shop_id": str(shop["id"])},
                )
            except Exception as e:
                payout_volume_total.labels(currency=self.currency, status="failed").inc(float(split.seller_amount))
                span.record_exception(e)
                self.logger.error(f"Payout transfer failed for order {order_id}: {e}", exc_info=True)
                return service_err(ErrorCodes.PAYOUT_FAILED, f"Payout for order {order_id} failed: {e}")

            distribution = self.gateway.insert(
                Tables.PAYMENT_DISTRIBUTIONS,
                [
                    PaymentDistributionRecord(
                        order_id=order_id,
                        shop_id=shop["id"],
                        total_amount=split.total_amount,
                        platform_fee=split.platform_fee,
                        seller_amount=split.seller_amount,
                        transfer_reference=transfer["id"],
                        status=TRANSFERRED,
                        distributed_at=timezone.now(),
                    ).as_row()
                ],
            )[0]
            payout_volume_total.labels(currency=self.currency, status="paid").inc(float(split.seller_amount))

            self.logger.info(
                f"Paid out order {order_id}: seller {split.seller_amount}, platform {split.platform_fee}, "
                f"transfer {transfer['id']}"
            )
            return service_ok(self._settle(order, distribution))

    def _settle(self, order: Dict[str, Any], distribution: Dict[str, Any]) -> DistributionResult:
        """Credit the seller for a transferred distribution, mark it completed and notify them."""
        seller_amount = Decimal(str(distribution["seller_amount"]))
        self._credit_seller(distribution["shop_id"], seller_amount)
        self.gateway.update(Tables.PAYMENT_DISTRIBUTIONS, {"status": COMPLETED}, {"id": distribution["id"]})
        self.notification_service.notify_payment_received(order, seller_amount)

        return DistributionResult(
            order_id=str(order["id"]),
            shop_id=str(distribution["shop_id"]),
            total_amount=Decimal(str(distribution["total_amount"])),
            platform_fee=Decimal(str(distribution["platform_fee"])),
            seller_amount=seller_amount,
            transfer_reference=distribution["transfer_reference"],
            distribution_id=str(distribution["id"]),
        )

    def _credit_seller(self, shop_id: str, amount: Decimal) -> None:
        """Add a settled amount to the shop's revenue, creating its stats row on first payout."""
        updated = self.gateway.increment(Tables.SELLER_STATS, "total_revenue", amount, {"shop_id": shop_id})
        if updated:
            self.gateway.increment(Tables.SELLER_STATS, "total_orders_settled", 1, {"shop_id": shop_id})
            return

        self.gateway.insert(
            Tables.SELLER_STATS,
            [SellerStatsRecord(shop_id=shop_id, total_revenue=amount, total_orders_settled=1).as_row()],
        )

    def distribute_many(self, order_ids: Iterable[str]) -> Dict[str, ServiceResult]:
        """Distribute several orders; one order's failure does not stop the rest."""
        results = {}
        for order_id in order_ids:
            try:
                results[str(order_id)] = self.distribute(order_id)
            except Exception as e:
                self.logger.error(f"Distribution of order {order_id} failed: {e}", exc_info=True)
                results[str(order_id)] = service_err(ErrorCodes.INTERNAL_ERROR, str(e))
        return results

    def pending_distributions(self, limit: Optional[int] = None) -> List[str]:
        """Ids of delivered, paid orders that have not been paid out, or were paid out but never credited."""
        delivered = self.gateway.select(
            Tables.ORDERS, {"status": "delivered", "payment_status": "paid"}, order_by=["delivered_at"]
        )
        if not delivered:
            return []

        order_ids = [order["id"] for order in delivered]
        settled = {
            row["order_id"]
            for row in self.gateway.select(
                Tables.PAYMENT_DISTRIBUTIONS, {"order_id__in": order_ids, "status": COMPLETED}
            )
        }
        pending = [order_id for order_id in order_ids if order_id not in settled]
        return pending[:limit] if limit else pending

    @BaseService.log_performance
    def get_seller_earnings(
        self, shop_id: str, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> ServiceResult[Dict]:
        """
        Summarize a shop's paid orders in a date range.

        Platform fees are recomputed per order with the same split used at
        payment time, so gross = platform fees + net for every order.
        """
        filters: Dict[str, Any] = {"shop_id": shop_id, "payment_status": "paid"}
        if start:
            filters["payment_date__gte"] = start
        if end:
            filters["payment_date__lte"] = end

        orders = self.gateway.select(Tables.ORDERS, filters)
        gross = Decimal("0.00")
        platform_fees = Decimal("0.00")
        for order in orders:
            split = split_commission(order["total_amount"])
            gross += split.total_amount
            platform_fees += split.platform_fee

        distributed = self.gateway.select(Tables.PAYMENT_DISTRIBUTIONS, {"shop_id": shop_id})
        paid_out = sum((Decimal(str(row["seller_amount"])) for row in distributed), Decimal("0.00"))

        return service_ok(
            {
                "shop_id": str(shop_id),
                "order_count": len(orders),
                "total_revenue": gross,
                "platform_fees": platform_fees,
                "net_earnings": gross - platform_fees,
                "distributed_total": paid_out,
                "currency": self.currency,
            }
        )
