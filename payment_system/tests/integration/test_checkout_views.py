from decimal import Decimal
from unittest.mock import patch

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from infrastructure.storage import MockStorageAdapter
from marketplace.models import Notification, Order, OrderComment, Product, SavedCart
from marketplace.tests.factories import OnOrderProductFactory, ProductFactory, ShopFactory, UserFactory
from payment_system.models import Payment, PlatformTransaction


class CheckoutViewIntegrationTest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.buyer = UserFactory(username="buyer1")

        self.shop_a = ShopFactory(name="Kalahari Crafts")
        self.shop_b = ShopFactory(name="Namib Home")
        self.chair = ProductFactory(shop=self.shop_a, price=Decimal("100.00"), stock_quantity=5)
        self.rug = OnOrderProductFactory(shop=self.shop_a, price=Decimal("80.00"))
        self.lamp = ProductFactory(shop=self.shop_b, price=Decimal("40.00"), stock_quantity=1)

        self.checkout_url = reverse("payment_system:checkout")
        self.add_item_url = reverse("marketplace:cart-add-item")
        self.details = {
            "delivery_address": "12 Independence Ave, Windhoek",
            "phone_number": "+264 81 123 4567",
            "delivery_location": "local",
        }

        self.client.force_authenticate(user=self.buyer)
        for product, quantity in ((self.chair, 2), (self.rug, 1), (self.lamp, 1)):
            self.client.post(self.add_item_url, {"product_id": str(product.id), "quantity": quantity}, format="json")

    def test_cash_checkout_from_saved_cart(self):
        response = self.client.post(self.checkout_url, dict(self.details, payment_method="cash"), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data["success"])
        self.assertEqual(len(response.data["orders"]), 2)
        self.assertEqual(response.data["failed_orders"], [])
        # 200 + 80 + 20 delivery + 10 runner for shop A, 40 for shop B
        self.assertEqual(Decimal(response.data["total_amount"]), Decimal("350.00"))
        self.assertFalse(response.data["requires_payment_proof"])

        orders = Order.objects.filter(buyer=self.buyer)
        self.assertEqual(orders.count(), 2)
        self.assertTrue(all(order.payment_status == "paid" for order in orders))
        self.assertEqual(Payment.objects.filter(status="completed").count(), 2)
        self.assertEqual(
            PlatformTransaction.objects.get(shop=self.shop_b).amount,
            Decimal("2.00"),
        )

        self.chair.refresh_from_db()
        self.lamp.refresh_from_db()
        self.assertEqual(self.chair.stock_quantity, 3)
        self.assertEqual(self.lamp.stock_quantity, 0)
        self.assertFalse(self.lamp.in_stock)

        self.assertEqual(SavedCart.objects.get(buyer=self.buyer).to_cart().total_items, 0)
        self.assertEqual(Notification.objects.filter(type="new_order").count(), 2)

    def test_checkout_with_explicit_lines_keeps_cart(self):
        lines = [
            {
                "product_id": str(self.lamp.id),
                "name": self.lamp.name,
                "price": "40.00",
                "shop_id": str(self.shop_b.id),
                "shop_name": "Namib Home",
                "quantity": 1,
            }
        ]

        response = self.client.post(
            self.checkout_url, dict(self.details, payment_method="cash", lines=lines), format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data["orders"]), 1)
        self.assertEqual(SavedCart.objects.get(buyer=self.buyer).to_cart().total_items, 4)

    def test_proof_checkout_multipart(self):
        proof = SimpleUploadedFile("proof.jpg", b"\xff\xd8proof", content_type="image/jpeg")

        response = self.client.post(
            self.checkout_url,
            dict(self.details, payment_method="EWallet", payment_proof=proof),
            format="multipart",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data["requires_payment_proof"])
        for order in Order.objects.filter(buyer=self.buyer):
            self.assertEqual(order.payment_method, "ewallet")
            self.assertEqual(order.payment_status, "proof_submitted")
            self.assertEqual(order.status, "pending_payment_verification")
            self.assertTrue(order.payment_proof_url.startswith("https://mock-storage.local/payment-proofs/"))
        self.assertEqual(len(MockStorageAdapter.objects), 2)
        self.assertEqual(OrderComment.objects.count(), 2)
        self.assertFalse(PlatformTransaction.objects.exists())

    def test_invalid_payment_method(self):
        response = self.client.post(self.checkout_url, dict(self.details, payment_method="bitcoin"), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["field"], "payment_method")
        self.assertFalse(Order.objects.exists())

    def test_missing_address(self):
        response = self.client.post(
            self.checkout_url, {"payment_method": "cash", "phone_number": "081"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["field"], "delivery_address")

    def test_empty_cart(self):
        self.client.delete(reverse("marketplace:cart-clear"))

        response = self.client.post(self.checkout_url, dict(self.details, payment_method="cash"), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["field"], "lines")

    def test_all_payments_declined(self):
        with self.settings(PAYMENT_SIMULATED_SUCCESS_RATE=0.0):
            response = self.client.post(self.checkout_url, dict(self.details, payment_method="cash"), format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertFalse(response.data["success"])
        self.assertEqual(len(response.data["failed_orders"]), 2)
        self.assertIn("You have not been charged.", response.data["failed_orders"][0]["error"])
        self.assertFalse(Payment.objects.exists())
        # Cart is kept so the buyer can try again
        self.assertEqual(SavedCart.objects.get(buyer=self.buyer).to_cart().total_items, 4)

    def test_requires_authentication(self):
        self.client.force_authenticate(user=None)

        response = self.client.post(self.checkout_url, dict(self.details, payment_method="cash"), format="json")

        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    @patch("marketplace.cart.domain.services.inventory_service.InventoryService._deduct_line")
    def test_stock_failure_does_not_fail_checkout(self, mock_deduct):
        mock_deduct.side_effect = RuntimeError("lock timeout")

        response = self.client.post(self.checkout_url, dict(self.details, payment_method="cash"), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Product.objects.get(id=self.chair.id).stock_quantity, 5)
