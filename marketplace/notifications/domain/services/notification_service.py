"""
NotificationService - Buyer and Seller Notifications

Writes in-app notification rows for order and payment events. Every public
method is fire-and-forget: a failure is logged and counted, and the caller
never sees it.
"""

from decimal import Decimal
from functools import wraps
from typing import Any, Dict, Optional

from django.conf import settings

from infrastructure.container import get_persistence
from infrastructure.persistence import NotificationRecord, PersistenceGatewayInterface, Tables
from marketplace.infra.observability.metrics import notifications_failed_total
from marketplace.services.base import BaseService


class NotificationTypes:
    NEW_ORDER = "new_order"
    ORDER_CONFIRMED = "order_confirmed"
    PAYMENT_RECEIVED = "payment_received"
    PAYMENT_APPROVED = "payment_approved"
    PAYMENT_REJECTED = "payment_rejected"


def _best_effort(notification_type: str):
    """Run the wrapped notifier, logging and swallowing any failure."""

    def decorator(func):
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            try:
                return func(self, *args, **kwargs)
            except Exception as e:
                notifications_failed_total.labels(type=notification_type).inc()
                self.logger.warning(f"Failed to send {notification_type} notification: {e}", exc_info=True)
                return None

        return wrapper

    return decorator


def short_id(order_id: Any) -> str:
    return str(order_id)[:8]


class NotificationService(BaseService):
    """
    Service for order lifecycle notifications.

    Methods return the stored notification row, or None when nothing was
    written (unknown shop, storage failure).
    """

    def __init__(self, gateway: Optional[PersistenceGatewayInterface] = None):
        super().__init__()
        self.gateway = gateway or get_persistence()
        self.currency_symbol = getattr(settings, "MARKETPLACE_CURRENCY_SYMBOL", "N$")

    def _money(self, amount: Any) -> str:
        return f"{self.currency_symbol}{Decimal(str(amount)):.2f}"

    def _send(self, record: NotificationRecord) -> Dict[str, Any]:
        row = self.gateway.insert(Tables.NOTIFICATIONS, [record.as_row()])[0]
        self.logger.info(f"Notification {record.type} stored for user {record.user_id}")
        return row

    def _shop(self, shop_id: Any) -> Optional[Dict[str, Any]]:
        shop = self.gateway.select_one(Tables.SHOPS, {"id": shop_id})
        if shop is None:
            self.logger.warning(f"Shop {shop_id} not found, notification skipped")
        return shop

    @_best_effort(NotificationTypes.NEW_ORDER)
    def notify_new_order(self, order: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Tell the shop owner an order arrived."""
        shop = self._shop(order["shop_id"])
        if shop is None:
            return None

        amount = self._money(order["total_amount"])
        if order["payment_method"] == "cash":
            message = f"New cash order received for {shop['name']} - {amount}"
        else:
            message = f"New order received for {shop['name']} - {amount} (Payment proof required)"

        return self._send(
            NotificationRecord(
                user_id=shop["owner_id"],
                type=NotificationTypes.NEW_ORDER,
                title="New Order",
                message=message,
                order_id=order["id"],
                shop_id=shop["id"],
            )
        )

    @_best_effort(NotificationTypes.ORDER_CONFIRMED)
    def notify_order_confirmed(self, order: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Tell the buyer their order was placed and how it will be paid."""
        if order["payment_method"] == "cash":
            detail = "Cash payment on delivery"
        else:
            detail = "Please upload payment proof in order chat"

        return self._send(
            NotificationRecord(
                user_id=order["buyer_id"],
                type=NotificationTypes.ORDER_CONFIRMED,
                title="Order Confirmed",
                message=f"Your order #{short_id(order['id'])} has been confirmed - {detail}",
                order_id=order["id"],
                shop_id=order["shop_id"],
            )
        )

    @_best_effort(NotificationTypes.PAYMENT_RECEIVED)
    def notify_payment_received(self, order: Dict[str, Any], seller_amount: Decimal) -> Optional[Dict[str, Any]]:
        """Tell the shop owner a settled amount was paid out for an order."""
        shop = self._shop(order["shop_id"])
        if shop is None:
            return None

        return self._send(
            NotificationRecord(
                user_id=shop["owner_id"],
                type=NotificationTypes.PAYMENT_RECEIVED,
                title="Payment Received",
                message=f"Payment of {self._money(seller_amount)} received for order #{short_id(order['id'])}",
                order_id=order["id"],
                shop_id=shop["id"],
            )
        )

    @_best_effort(NotificationTypes.PAYMENT_APPROVED)
    def notify_payment_approved(self, order: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self._send(
            NotificationRecord(
                user_id=order["buyer_id"],
                type=NotificationTypes.PAYMENT_APPROVED,
                title="Payment Approved",
                message=f"Your payment for order #{short_id(order['id'])} has been approved",
                order_id=order["id"],
                shop_id=order["shop_id"],
            )
        )

    @_best_effort(NotificationTypes.PAYMENT_REJECTED)
    def notify_payment_rejected(self, order: Dict[str, Any], reason: str = "") -> Optional[Dict[str, Any]]:
        message = f"Your payment proof for order #{short_id(order['id'])} was rejected"
        if reason:
            message = f"{message}: {reason}"

        return self._send(
            NotificationRecord(
                user_id=order["buyer_id"],
                type=NotificationTypes.PAYMENT_REJECTED,
                title="Payment Rejected",
                message=f"{message}. Please upload a new payment proof.",
                order_id=order["id"],
                shop_id=order["shop_id"],
            )
        )
