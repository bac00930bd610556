"""
InventoryService - Stock Deduction

Decrements product stock once orders have been written. Deduction is best
effort: a failure is logged and counted but never fails the order, because
the order is already committed by the time stock is touched.

The read-then-write sequence is not locked, so two concurrent checkouts for
the same product can lose an update. Stock can drift low but never negative.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from infrastructure.container import get_persistence
from infrastructure.persistence import PersistenceGatewayInterface, Tables
from marketplace.cart.domain.aggregate import CartLine
from marketplace.infra.observability.metrics import stock_deduction_failures
from marketplace.services.base import BaseService


@dataclass
class StockDeductionResult:
    updated: List[dict] = field(default_factory=list)
    failed: List[dict] = field(default_factory=list)


class InventoryService(BaseService):
    """
    Service for keeping product stock in line with placed orders.

    Dependencies:
    - PersistenceGatewayInterface: product reads and writes
    """

    def __init__(self, gateway: Optional[PersistenceGatewayInterface] = None):
        super().__init__()
        self.gateway = gateway or get_persistence()

    @BaseService.log_performance
    def deduct_stock(self, lines: Iterable[CartLine]) -> StockDeductionResult:
        """
        Decrement stock for every in-stock line.

        A product reaching zero is flagged out of stock so later buyers see it
        as an on-order item. On-order lines are skipped.

        Returns:
            StockDeductionResult listing updated products and failures
        """
        result = StockDeductionResult()

        for line in lines:
            if not line.in_stock:
                continue
            try:
                update = self._deduct_line(line)
                result.updated.append(update)
            except Exception as e:
                stock_deduction_failures.inc()
                self.logger.warning(
                    f"Stock deduction failed for product {line.product_id} (qty {line.quantity}): {e}",
                    exc_info=True,
                )
                result.failed.append({"product_id": line.product_id, "error": str(e)})

        return result

    def _deduct_line(self, line: CartLine) -> dict:
        product = self.gateway.select_one(Tables.PRODUCTS, {"id": line.product_id})
        if product is None:
            raise LookupError(f"Product {line.product_id} not found")

        old_stock = int(product.get("stock_quantity") or 0)
        new_stock = max(old_stock - line.quantity, 0)

        patch = {"stock_quantity": new_stock}
        if new_stock == 0:
            patch["in_stock"] = False

        self.gateway.update(Tables.PRODUCTS, patch, {"id": line.product_id})
        self.logger.info(f"Stock for product {line.product_id}: {old_stock} -> {new_stock}")

        return {"product_id": line.product_id, "old_stock": old_stock, "new_stock": new_stock}
