"""
OrderService - Order Creation and Lifecycle

Turns a multi-shop cart into one order per shop. Each shop is an isolated
unit: a failed insert for one shop is recorded and the remaining shops are
still processed. Nothing is rolled back because the persistence gateway
commits every call on its own.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from django.utils import timezone

from infrastructure.container import get_persistence
from infrastructure.observability.tracing import add_span_attributes, tracer
from infrastructure.persistence import (
    OrderItemRecord,
    OrderRecord,
    OrderShippingRecord,
    PersistenceGatewayInterface,
    Tables,
)
from marketplace.cart.domain.aggregate import Cart, CartLine, ShopGroup
from marketplace.cart.domain.services.inventory_service import InventoryService
from marketplace.cart.domain.services.pricing_service import DeliveryZone, PricingService
from marketplace.infra.observability.metrics import checkout_shop_failures_total, order_value, orders_placed_total
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok
from payment_system.domain.exceptions import CheckoutValidationError
from utils.logging_utils import sanitize_payload

PAYMENT_METHODS = ("cash", "ewallet", "pay_to_cell", "bank_transfer", "easy_wallet")

# Orders in these states can be marked delivered
DELIVERABLE_STATUSES = ("processing", "shipped")

TRUE_VALUES = ("1", "true", "yes", "on")


def normalize_payment_method(payment_method: Any) -> str:
    """
    Lower-case and check a payment method against the allow-list.

    Raises:
        CheckoutValidationError: If the method is not accepted
    """
    method = str(payment_method or "").strip().lower()
    if method not in PAYMENT_METHODS:
        raise CheckoutValidationError(
            f"Invalid payment method '{payment_method}'. Must be one of: {', '.join(PAYMENT_METHODS)}",
            field="payment_method",
        )
    return method


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in TRUE_VALUES
    return bool(value)


@dataclass
class OrderDetails:
    """Delivery details entered at checkout, shared by every shop's order."""

    delivery_address: str
    phone_number: str
    delivery_location: DeliveryZone = DeliveryZone.LOCAL
    special_instructions: str = ""
    is_deposit_payment: bool = False

    @classmethod
    def parse(cls, data: Any) -> "OrderDetails":
        """
        Build validated details from a mapping (request data) or pass through.

        Raises:
            CheckoutValidationError: Missing address or phone, unknown zone
        """
        if isinstance(data, cls):
            return data
        data = data or {}

        address = str(data.get("delivery_address") or "").strip()
        if not address:
            raise CheckoutValidationError("Delivery address is required", field="delivery_address")

        phone = str(data.get("phone_number") or "").strip()
        if not phone:
            raise CheckoutValidationError("Phone number is required", field="phone_number")

        try:
            zone = DeliveryZone.parse(data.get("delivery_location"))
        except ValueError as e:
            raise CheckoutValidationError(str(e), field="delivery_location") from e

        return cls(
            delivery_address=address,
            phone_number=phone,
            delivery_location=zone,
            special_instructions=str(data.get("special_instructions") or "").strip(),
            is_deposit_payment=_as_bool(data.get("is_deposit_payment", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "delivery_address": self.delivery_address,
            "phone_number": self.phone_number,
            "delivery_location": self.delivery_location.value,
            "special_instructions": self.special_instructions,
            "is_deposit_payment": self.is_deposit_payment,
        }


@dataclass
class FailedShop:
    shop_id: str
    error: str
    shop_name: str = ""
    # Set when the order row was written but its items were not
    orphaned_order_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"shop_id": self.shop_id, "shop_name": self.shop_name, "error": self.error}
        if self.orphaned_order_id:
            data["orphaned_order_id"] = self.orphaned_order_id
        return data


@dataclass
class OrderCreationResult:
    created_orders: List[Dict[str, Any]] = field(default_factory=list)
    failed_shops: List[FailedShop] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return bool(self.created_orders)


class _ShopOrderError(Exception):
    def __init__(self, cause: Exception, stage: str, order_id: Optional[str] = None):
        super().__init__(str(cause))
        self.cause = cause
        self.stage = stage
        self.order_id = order_id


class OrderService(BaseService):
    """
    Service for creating orders and moving them through delivery.

    Dependencies:
    - PersistenceGatewayInterface: order, item and shipping rows
    - PricingService: per-shop totals
    - InventoryService: best-effort stock deduction
    """

    def __init__(
        self,
        gateway: Optional[PersistenceGatewayInterface] = None,
        pricing_service: Optional[PricingService] = None,
        inventory_service: Optional[InventoryService] = None,
    ):
        super().__init__()
        self.gateway = gateway or get_persistence()
        self.pricing_service = pricing_service or PricingService()
        self.inventory_service = inventory_service or InventoryService(gateway=self.gateway)

    def validate(self, lines: Any, order_details: Any, payment_method: Any):
        """
        Check checkout input without writing anything.

        Returns:
            (cart, details, method) ready for ``create_orders``

        Raises:
            CheckoutValidationError: On any invalid input
        """
        method = normalize_payment_method(payment_method)
        details = OrderDetails.parse(order_details)
        cart = self._build_cart(lines)
        if cart.is_empty:
            raise CheckoutValidationError("Cart is empty", field="lines")
        return cart, details, method

    @BaseService.log_performance
    def create_orders(
        self,
        buyer_id: Any,
        lines: Any,
        order_details: Any,
        payment_method: Any,
    ) -> OrderCreationResult:
        """
        Create one order per shop in the cart.

        Args:
            buyer_id: Buyer user id
            lines: Cart, CartLines or their dict form
            order_details: OrderDetails or a mapping of its fields
            payment_method: One of PAYMENT_METHODS (any case)

        Returns:
            OrderCreationResult with the created order rows (each carrying its
            ``items``) and the shops that failed

        Raises:
            CheckoutValidationError: Before any write, when input is invalid

        Example:
            >>> result = order_service.create_orders(user.id, cart, details, "cash")
            >>> [order["shop_id"] for order in result.created_orders]
            ['shop-a', 'shop-b']
        """
        cart, details, method = self.validate(lines, order_details, payment_method)
        result = OrderCreationResult()

        groups = cart.items_grouped_by_shop()

        with tracer.start_as_current_span("order.create_orders") as span:
            add_span_attributes(span, buyer_id=buyer_id, payment_method=method, shop_count=len(groups))
            self.logger.info(
                f"Creating orders for buyer {buyer_id}: "
                f"{sanitize_payload(details.to_dict(), ('delivery_location', 'phone_number', 'is_deposit_payment'))}"
            )

            for group in groups:
                try:
                    order = self._create_shop_order(buyer_id, group, details, method)
                except _ShopOrderError as e:
                    checkout_shop_failures_total.labels(stage=e.stage).inc()
                    orders_placed_total.labels(status="failure").inc()
                    span.record_exception(e.cause)
                    if e.order_id:
                        self.logger.error(
                            f"Orphaned order {e.order_id} for shop {group.shop_id}: items were not saved: {e}",
                            exc_info=e.cause,
                        )
                    else:
                        self.logger.error(f"Failed to create order for shop {group.shop_id}: {e}", exc_info=e.cause)
                    result.failed_shops.append(
                        FailedShop(
                            shop_id=group.shop_id,
                            shop_name=group.shop_name,
                            error=str(e),
                            orphaned_order_id=e.order_id,
                        )
                    )
                    continue

                result.created_orders.append(order)
                orders_placed_total.labels(status="success").inc()
                order_value.observe(float(order["total_amount"]))

            created_shops = {order["shop_id"] for order in result.created_orders}
            ordered_lines = [line for line in cart.lines if line.shop_id in created_shops]
            if ordered_lines:
                self.inventory_service.deduct_stock(ordered_lines)

            add_span_attributes(span, created=len(result.created_orders), failed=len(result.failed_shops))

        self.logger.info(
            f"Order creation for buyer {buyer_id}: {len(result.created_orders)} created, "
            f"{len(result.failed_shops)} failed"
        )
        return result

    def _build_cart(self, lines: Any) -> Cart:
        if isinstance(lines, Cart):
            return lines
        try:
            return Cart([line if isinstance(line, CartLine) else CartLine.from_dict(line) for line in lines or []])
        except (TypeError, ValueError, KeyError, ArithmeticError) as e:
            raise CheckoutValidationError(f"Invalid cart line: {e}", field="lines") from e

    def _create_shop_order(
        self, buyer_id: Any, group: ShopGroup, details: OrderDetails, method: str
    ) -> Dict[str, Any]:
        with tracer.start_as_current_span("order.create_shop_order") as span:
            add_span_attributes(span, shop_id=group.shop_id, line_count=len(group.items))

            try:
                totals = self.pricing_service.calculate_order_totals(group.items, details.delivery_location)
                record = OrderRecord(
                    buyer_id=buyer_id,
                    shop_id=group.shop_id,
                    total_amount=totals.total_amount,
                    payment_method=method,
                    delivery_address=details.delivery_address,
                    phone_number=details.phone_number,
                    delivery_location=details.delivery_location.value,
                    special_instructions=details.special_instructions,
                    delivery_fee=totals.delivery_fee,
                    runner_fees_total=totals.runner_fees_total,
                    transport_fees_total=totals.transport_fees_total,
                    has_on_order_items=totals.has_on_order_items,
                    is_deposit_payment=totals.has_on_order_items and details.is_deposit_payment,
                )
                order = self.gateway.insert(Tables.ORDERS, [record.as_row()])[0]
            except Exception as e:
                raise _ShopOrderError(e, stage="order") from e

            try:
                items = self.gateway.insert(
                    Tables.ORDER_ITEMS,
                    [
                        OrderItemRecord(
                            order_id=order["id"],
                            product_id=line.product_id,
                            quantity=line.quantity,
                            price=line.price,
                            runner_fee=self.pricing_service.line_runner_fee(line),
                            transport_fee=self.pricing_service.line_transport_fee(line),
                        ).as_row()
                        for line in group.items
                    ],
                )
            except Exception as e:
                raise _ShopOrderError(e, stage="order_items", order_id=order["id"]) from e

            self._save_shipping(order, details)

            add_span_attributes(span, order_id=order["id"], total=order["total_amount"])
            self.logger.info(
                f"Created order {order['id']} for shop {group.shop_id}: "
                f"{len(items)} items, total {order['total_amount']}"
            )

            order["items"] = items
            order["shop_name"] = group.shop_name
            return order

    def _save_shipping(self, order: Dict[str, Any], details: OrderDetails) -> None:
        """Shipping snapshot; the order row already carries the same details."""
        try:
            self.gateway.insert(
                Tables.ORDER_SHIPPING,
                [
                    OrderShippingRecord(
                        order_id=order["id"],
                        delivery_address=details.delivery_address,
                        phone_number=details.phone_number,
                        delivery_location=details.delivery_location.value,
                        special_instructions=details.special_instructions,
                    ).as_row()
                ],
            )
        except Exception as e:
            self.logger.warning(f"Failed to save shipping details for order {order['id']}: {e}", exc_info=True)

    @BaseService.log_performance
    def confirm_delivery(self, order_id: str, user_id: Any = None) -> ServiceResult[Dict]:
        """
        Mark an order delivered and queue its payment distribution.

        Args:
            order_id: Order UUID
            user_id: Buyer or shop owner confirming; None skips the ownership check

        Returns:
            ServiceResult with the updated order row
        """
        order = self.gateway.select_one(Tables.ORDERS, {"id": order_id})
        if order is None:
            return service_err(ErrorCodes.ORDER_NOT_FOUND, f"Order {order_id} not found")

        if user_id is not None and not self._is_party(order, user_id):
            return service_err(ErrorCodes.PERMISSION_DENIED, "You cannot confirm delivery for this order")

        if order["status"] not in DELIVERABLE_STATUSES:
            return service_err(
                ErrorCodes.INVALID_ORDER_STATE,
                f"Order {order_id} is '{order['status']}'; only {', '.join(DELIVERABLE_STATUSES)} orders can be delivered",
            )

        order = self.gateway.update(
            Tables.ORDERS, {"status": "delivered", "delivered_at": timezone.now()}, {"id": order_id}
        )[0]
        self.logger.info(f"Order {order_id} marked delivered")

        try:
            from payment_system.Tasks.payment_tasks import distribute_order_payment_task

            distribute_order_payment_task.delay(str(order_id))
        except Exception as e:
            # The periodic sweep picks up delivered orders that were not queued
            self.logger.warning(f"Could not queue distribution for order {order_id}: {e}", exc_info=True)

        return service_ok(order)

    @BaseService.log_performance
    def get_order_details(self, order_id: str, user_id: Any = None) -> ServiceResult[Dict]:
        """
        Get an order with its items, shipping snapshot and payments.

        Only the buyer and the shop owner may read it when ``user_id`` is given.
        """
        order = self.gateway.select_one(Tables.ORDERS, {"id": order_id})
        if order is None:
            return service_err(ErrorCodes.ORDER_NOT_FOUND, f"Order {order_id} not found")

        if user_id is not None and not self._is_party(order, user_id):
            return service_err(ErrorCodes.PERMISSION_DENIED, "You do not have access to this order")

        return service_ok(
            {
                "order": order,
                "items": self.gateway.select(Tables.ORDER_ITEMS, {"order_id": order_id}),
                "shipping": self.gateway.select_one(Tables.ORDER_SHIPPING, {"order_id": order_id}),
                "payments": self.gateway.select(Tables.PAYMENTS, {"order_id": order_id}, order_by=["created_at"]),
            }
        )

    def _is_party(self, order: Dict[str, Any], user_id: Any) -> bool:
        if str(order["buyer_id"]) == str(user_id):
            return True
        shop = self.gateway.select_one(Tables.SHOPS, {"id": order["shop_id"]})
        return shop is not None and str(shop["owner_id"]) == str(user_id)
