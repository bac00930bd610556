"""
Persistence Gateway Tests
=========================

The same contract runs against the Django ORM gateway and the in-memory
gateway, so services behave identically on either backend.
"""

from decimal import Decimal

import pytest
from django.test import TestCase, override_settings

from infrastructure.persistence import (
    DjangoPersistenceGateway,
    InMemoryPersistenceGateway,
    OrderRecord,
    PersistenceException,
    PersistenceFactory,
    PersistenceGatewayInterface,
    SellerStatsRecord,
    Tables,
)
from infrastructure.storage import MockStorageAdapter
from marketplace.tests.factories import ShopFactory, UserFactory


class GatewayContract:
    """Checks shared by every gateway backend; subclasses provide the fixtures."""

    gateway: PersistenceGatewayInterface

    def order_row(self, total="100.00", **overrides):
        record = OrderRecord(
            buyer_id=self.buyer_id,
            shop_id=self.shop_id,
            total_amount=Decimal(total),
            payment_method="cash",
            delivery_address="12 Independence Ave",
            phone_number="0811234567",
        )
        row = record.as_row()
        row.update(overrides)
        return row

    def test_insert_generates_id_and_timestamps(self):
        row = self.gateway.insert(Tables.ORDERS, [self.order_row()])[0]

        self.assertIsInstance(row["id"], str)
        self.assertIsNotNone(row["created_at"])
        self.assertIsNotNone(row["updated_at"])
        self.assertEqual(row["status"], "pending")
        self.assertEqual(row["payment_status"], "unpaid")
        self.assertEqual(Decimal(str(row["total_amount"])), Decimal("100.00"))

    def test_insert_many_in_one_call(self):
        rows = self.gateway.insert(Tables.ORDERS, [self.order_row("10.00"), self.order_row("20.00")])

        self.assertEqual(len(rows), 2)
        self.assertNotEqual(rows[0]["id"], rows[1]["id"])

    def test_select_filters_orders_and_limits(self):
        self.gateway.insert(
            Tables.ORDERS,
            [self.order_row("30.00"), self.order_row("10.00"), self.order_row("20.00", status="delivered")],
        )

        pending = self.gateway.select(Tables.ORDERS, {"status": "pending"}, order_by=["total_amount"])
        self.assertEqual([Decimal(str(row["total_amount"])) for row in pending], [Decimal("10.00"), Decimal("30.00")])

        top = self.gateway.select(Tables.ORDERS, {"shop_id": self.shop_id}, order_by=["-total_amount"], limit=1)
        self.assertEqual(len(top), 1)
        self.assertEqual(Decimal(str(top[0]["total_amount"])), Decimal("30.00"))

    def test_select_in_lookup(self):
        first, second, _ = self.gateway.insert(
            Tables.ORDERS, [self.order_row(), self.order_row(), self.order_row()]
        )

        rows = self.gateway.select(Tables.ORDERS, {"id__in": [first["id"], second["id"]]})

        self.assertEqual({row["id"] for row in rows}, {first["id"], second["id"]})

    def test_select_one_missing_returns_none(self):
        self.assertIsNone(self.gateway.select_one(Tables.ORDERS, {"status": "cancelled"}))

    def test_update_returns_patched_rows(self):
        order = self.gateway.insert(Tables.ORDERS, [self.order_row()])[0]

        updated = self.gateway.update(Tables.ORDERS, {"status": "processing"}, {"id": order["id"]})

        self.assertEqual(len(updated), 1)
        self.assertEqual(updated[0]["status"], "processing")
        self.assertGreaterEqual(updated[0]["updated_at"], order["updated_at"])
        self.assertEqual(self.gateway.select_one(Tables.ORDERS, {"id": order["id"]})["status"], "processing")

    def test_update_without_match_returns_empty(self):
        self.gateway.insert(Tables.ORDERS, [self.order_row()])

        self.assertEqual(self.gateway.update(Tables.ORDERS, {"status": "processing"}, {"status": "shipped"}), [])

    def test_increment_adds_in_place(self):
        self.gateway.insert(
            Tables.SELLER_STATS, [SellerStatsRecord(shop_id=self.shop_id, total_revenue=Decimal("10.00")).as_row()]
        )

        affected = self.gateway.increment(
            Tables.SELLER_STATS, "total_revenue", Decimal("5.50"), {"shop_id": self.shop_id}
        )

        self.assertEqual(affected, 1)
        stats = self.gateway.select_one(Tables.SELLER_STATS, {"shop_id": self.shop_id})
        self.assertEqual(Decimal(str(stats["total_revenue"])), Decimal("15.50"))

    def test_increment_without_match_returns_zero(self):
        self.assertEqual(
            self.gateway.increment(Tables.SELLER_STATS, "total_revenue", Decimal("1"), {"shop_id": self.shop_id}), 0
        )


class DjangoPersistenceGatewayTest(GatewayContract, TestCase):
    def setUp(self):
        MockStorageAdapter.clear()
        self.gateway = DjangoPersistenceGateway()
        self.buyer_id = UserFactory().id
        self.shop_id = str(ShopFactory().id)

    def test_unknown_table(self):
        with self.assertRaises(PersistenceException):
            self.gateway.select("wishlists")

    def test_rejected_insert_raises_persistence_exception(self):
        row = self.order_row()
        del row["delivery_address"]
        row["not_a_column"] = "x"

        with self.assertRaises(PersistenceException) as ctx:
            self.gateway.insert(Tables.ORDERS, [row])

        self.assertEqual(ctx.exception.table, Tables.ORDERS)
        self.assertEqual(ctx.exception.operation, "insert")

    def test_upload_blob_goes_to_bucket_storage(self):
        url = self.gateway.upload_blob("payment-proofs", "payment-proof-1.jpg", b"\xff\xd8proof", "image/jpeg")

        self.assertIn("payment-proofs/payment-proof-1.jpg", url)
        self.assertEqual(MockStorageAdapter.objects[("payment-proofs", "payment-proof-1.jpg")][0], b"\xff\xd8proof")

    def test_upload_failure_raises_persistence_exception(self):
        def broken_storage(bucket):
            raise RuntimeError("bucket unavailable")

        gateway = DjangoPersistenceGateway(storage_factory=broken_storage)

        with self.assertRaises(PersistenceException) as ctx:
            gateway.upload_blob("payment-proofs", "payment-proof-1.jpg", b"x", "image/jpeg")

        self.assertEqual(ctx.exception.operation, "upload_blob")


@pytest.mark.unit
class InMemoryPersistenceGatewayTest(GatewayContract, TestCase):
    def setUp(self):
        self.gateway = InMemoryPersistenceGateway()
        self.buyer_id = 1
        self.shop_id = self.gateway.seed(Tables.SHOPS, [{"name": "Shop A", "owner_id": 2}])[0]["id"]

    def test_calls_are_recorded(self):
        self.gateway.insert(Tables.ORDERS, [self.order_row()])
        self.gateway.select(Tables.ORDERS)

        self.assertEqual(self.gateway.calls, [("insert", Tables.ORDERS), ("select", Tables.ORDERS)])
        self.assertEqual(self.gateway.write_calls, [("insert", Tables.ORDERS)])

    def test_seed_is_not_recorded(self):
        self.assertEqual(self.gateway.calls, [])
        self.assertEqual(len(self.gateway.rows(Tables.SHOPS)), 1)

    def test_fail_on_with_predicate(self):
        self.gateway.fail_on(Tables.ORDERS, "insert", lambda row: row["total_amount"] > Decimal("50"))

        self.gateway.insert(Tables.ORDERS, [self.order_row("10.00")])
        with self.assertRaises(PersistenceException):
            self.gateway.insert(Tables.ORDERS, [self.order_row("60.00")])

        self.assertEqual(len(self.gateway.rows(Tables.ORDERS)), 1)

        self.gateway.clear_failures()
        self.gateway.insert(Tables.ORDERS, [self.order_row("60.00")])
        self.assertEqual(len(self.gateway.rows(Tables.ORDERS)), 2)

    def test_returned_rows_are_copies(self):
        order = self.gateway.insert(Tables.ORDERS, [self.order_row()])[0]
        order["status"] = "delivered"

        self.assertEqual(self.gateway.select_one(Tables.ORDERS, {"id": order["id"]})["status"], "pending")

    def test_upload_blob(self):
        url = self.gateway.upload_blob("payment-proofs", "proof.jpg", b"abc", "image/jpeg")

        self.assertEqual(url, "memory://payment-proofs/proof.jpg")
        self.assertEqual(self.gateway.blobs[("payment-proofs", "proof.jpg")], (b"abc", "image/jpeg"))

    def test_unsupported_lookup(self):
        with self.assertRaises(PersistenceException):
            self.gateway.select(Tables.ORDERS, {"total_amount__gt": 1})

    def test_unsupported_lookup_rejected_on_writes(self):
        with self.assertRaises(PersistenceException):
            self.gateway.update(Tables.ORDERS, {"status": "processing"}, {"total_amount__gt": 1})
        with self.assertRaises(PersistenceException):
            self.gateway.increment(Tables.SELLER_STATS, "total_revenue", Decimal("1.00"), {"shop_id__startswith": "s"})


class PersistenceFactoryTest(TestCase):
    def test_default_backend_from_settings(self):
        self.assertIsInstance(PersistenceFactory.create(), DjangoPersistenceGateway)

    @override_settings(PERSISTENCE_BACKEND="memory")
    def test_memory_backend_from_settings(self):
        self.assertIsInstance(PersistenceFactory.create(), InMemoryPersistenceGateway)

    def test_invalid_backend(self):
        with self.assertRaises(ValueError):
            PersistenceFactory.create("supabase")
