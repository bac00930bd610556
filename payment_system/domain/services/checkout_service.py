"""
CheckoutService - Multi-shop Checkout

Entry point for placing a cart. Creates one order per shop, captures each
order's payment and notifies buyer and seller. Shops succeed or fail on their
own: the result lists the placed orders and the shops that failed, and the
checkout only fails as a whole on invalid input or when no shop went through.
"""

import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from infrastructure.observability.tracing import add_span_attributes, tracer
from marketplace.infra.observability.metrics import checkout_duration, checkout_shop_failures_total
from marketplace.notifications.domain.services import NotificationService
from marketplace.ordering.domain.services import OrderService, normalize_payment_method
from marketplace.services.base import BaseService
from payment_system.domain.services.payment_service import PaymentService


@dataclass
class CheckoutResult:
    success: bool
    payment_method: str
    orders: List[Dict[str, Any]] = field(default_factory=list)
    failed_orders: List[Dict[str, Any]] = field(default_factory=list)
    total_amount: Decimal = Decimal("0.00")

    @property
    def requires_payment_proof(self) -> bool:
        return self.payment_method != "cash"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "orders": self.orders,
            "failed_orders": self.failed_orders,
            "total_amount": str(self.total_amount),
            "payment_method": self.payment_method,
            "requires_payment_proof": self.requires_payment_proof,
        }


class CheckoutService(BaseService):
    """
    Service for placing a buyer's cart.

    Dependencies:
    - OrderService: per-shop order creation
    - PaymentService: per-order payment capture
    - NotificationService: new-order and order-confirmed notifications
    """

    def __init__(
        self,
        order_service: Optional[OrderService] = None,
        payment_service: Optional[PaymentService] = None,
        notification_service: Optional[NotificationService] = None,
    ):
        super().__init__()
        self.order_service = order_service or OrderService()
        self.payment_service = payment_service or PaymentService()
        self.notification_service = notification_service or NotificationService()

    @BaseService.log_performance
    def process_checkout(
        self,
        buyer_id: Any,
        lines: Any,
        order_details: Any,
        payment_method: Any,
        proof_image: Any = None,
    ) -> CheckoutResult:
        """
        Place a cart, one order per shop.

        Args:
            buyer_id: Buyer user id
            lines: Cart, CartLines or their dict form
            order_details: Delivery details (address, phone, zone, instructions, deposit flag)
            payment_method: cash, ewallet, pay_to_cell, bank_transfer or easy_wallet
            proof_image: Optional payment proof shared by every order

        Returns:
            CheckoutResult; ``success`` is True when at least one order was
            placed and paid (or awaiting proof verification)

        Raises:
            CheckoutValidationError: Invalid input, raised before any write

        Example:
            >>> result = checkout_service.process_checkout(user.id, cart, details, "cash")
            >>> result.success, len(result.orders), result.failed_orders
            (True, 2, [])
        """
        started = time.monotonic()
        method = normalize_payment_method(payment_method)

        with tracer.start_as_current_span("checkout.process") as span:
            add_span_attributes(span, buyer_id=buyer_id, payment_method=method, has_proof=proof_image is not None)

            creation = self.order_service.create_orders(buyer_id, lines, order_details, method)
            result = CheckoutResult(
                success=False,
                payment_method=method,
                failed_orders=[failure.to_dict() for failure in creation.failed_shops],
            )

            for order in creation.created_orders:
                placed = self._pay_order(order, method, proof_image, result)
                if placed is None:
                    continue

                self.notification_service.notify_new_order(placed)
                self.notification_service.notify_order_confirmed(placed)

                result.orders.append(placed)
                result.total_amount += placed["total_amount"]

            result.success = bool(result.orders)
            add_span_attributes(
                span,
                success=result.success,
                orders=len(result.orders),
                failed=len(result.failed_orders),
                total=result.total_amount,
            )

        checkout_duration.observe(time.monotonic() - started)
        log = self.logger.info if result.success else self.logger.warning
        log(
            f"Checkout for buyer {buyer_id} via {method}: {len(result.orders)} orders placed, "
            f"{len(result.failed_orders)} failed, total {result.total_amount}"
        )
        return result

    def _pay_order(
        self, order: Dict[str, Any], method: str, proof_image: Any, result: CheckoutResult
    ) -> Optional[Dict[str, Any]]:
        """Capture one order's payment; a failure moves its shop to ``failed_orders``."""
        try:
            payment = self.payment_service.process_payment(order, method, proof_image)
        except Exception as e:
            checkout_shop_failures_total.labels(stage="payment").inc()
            self.logger.error(f"Payment failed for order {order['id']} (shop {order['shop_id']}): {e}", exc_info=True)
            result.failed_orders.append(
                {
                    "shop_id": order["shop_id"],
                    "shop_name": order.get("shop_name", ""),
                    "order_id": order["id"],
                    "error": str(e),
                }
            )
            return None

        placed = dict(payment.order)
        placed["items"] = order.get("items", [])
        placed["shop_name"] = order.get("shop_name", "")
        placed["payment"] = payment.to_dict()
        return placed
