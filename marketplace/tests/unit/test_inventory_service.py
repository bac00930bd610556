import pytest

from infrastructure.persistence import InMemoryPersistenceGateway, Tables
from marketplace.cart.domain.services import InventoryService
from marketplace.tests.factories import CartLineFactory, OnOrderCartLineFactory


@pytest.mark.unit
class TestInventoryServiceUnit:
    def setup_method(self):
        self.gateway = InMemoryPersistenceGateway()
        self.gateway.seed(
            Tables.PRODUCTS,
            [
                {"id": "p-chair", "name": "Chair", "stock_quantity": 5, "in_stock": True},
                {"id": "p-lamp", "name": "Lamp", "stock_quantity": 2, "in_stock": True},
                {"id": "p-rug", "name": "Rug", "stock_quantity": 0, "in_stock": False},
            ],
        )
        self.service = InventoryService(gateway=self.gateway)

    def _product(self, product_id):
        return next(row for row in self.gateway.rows(Tables.PRODUCTS) if row["id"] == product_id)

    def test_deducts_stock(self):
        result = self.service.deduct_stock([CartLineFactory(product_id="p-chair", quantity=3)])

        assert result.failed == []
        assert result.updated == [{"product_id": "p-chair", "old_stock": 5, "new_stock": 2}]
        assert self._product("p-chair")["stock_quantity"] == 2
        assert self._product("p-chair")["in_stock"] is True

    def test_reaching_zero_marks_out_of_stock(self):
        self.service.deduct_stock([CartLineFactory(product_id="p-lamp", quantity=2)])

        lamp = self._product("p-lamp")
        assert lamp["stock_quantity"] == 0
        assert lamp["in_stock"] is False

    def test_overselling_clamps_at_zero(self):
        result = self.service.deduct_stock([CartLineFactory(product_id="p-lamp", quantity=7)])

        assert result.updated[0]["new_stock"] == 0
        assert self._product("p-lamp")["stock_quantity"] == 0
        assert self._product("p-lamp")["in_stock"] is False

    def test_on_order_lines_are_skipped(self):
        result = self.service.deduct_stock([OnOrderCartLineFactory(product_id="p-rug", quantity=1)])

        assert result.updated == []
        assert result.failed == []
        assert self.gateway.write_calls == []

    def test_missing_product_is_reported_not_raised(self):
        result = self.service.deduct_stock(
            [
                CartLineFactory(product_id="p-gone", quantity=1),
                CartLineFactory(product_id="p-chair", quantity=1),
            ]
        )

        assert [failure["product_id"] for failure in result.failed] == ["p-gone"]
        assert [update["product_id"] for update in result.updated] == ["p-chair"]
        assert self._product("p-chair")["stock_quantity"] == 4

    def test_store_failure_is_best_effort(self):
        self.gateway.fail_on(Tables.PRODUCTS, "update", lambda filters: filters["id"] == "p-chair")

        result = self.service.deduct_stock(
            [
                CartLineFactory(product_id="p-chair", quantity=1),
                CartLineFactory(product_id="p-lamp", quantity=1),
            ]
        )

        assert result.failed == [{"product_id": "p-chair", "error": "simulated store failure"}]
        assert self._product("p-chair")["stock_quantity"] == 5
        assert self._product("p-lamp")["stock_quantity"] == 1

    def test_missing_stock_value_counts_as_zero(self):
        self.gateway.seed(Tables.PRODUCTS, [{"id": "p-vase", "stock_quantity": None, "in_stock": True}])

        result = self.service.deduct_stock([CartLineFactory(product_id="p-vase", quantity=1)])

        assert result.updated == [{"product_id": "p-vase", "old_stock": 0, "new_stock": 0}]
        assert self._product("p-vase")["in_stock"] is False
