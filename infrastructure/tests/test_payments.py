"""
Payment Infrastructure Tests
==============================

Unit tests for payment provider abstraction layer.
"""

import random
from decimal import Decimal
from unittest.mock import patch

from django.test import TestCase, override_settings

from infrastructure.payments import (
    PaymentFactory,
    PaymentIntent,
    PaymentProviderInterface,
    PaymentStatus,
    SimulatedPaymentProvider,
)


class PaymentInterfaceTest(TestCase):
    """Test PaymentProviderInterface contract."""

    def test_interface_is_abstract(self):
        """PaymentProviderInterface should not be instantiable."""
        with self.assertRaises(TypeError):
            PaymentProviderInterface()


class SimulatedPaymentProviderTest(TestCase):
    """Test SimulatedPaymentProvider implementation."""

    def test_authorize_always_succeeds_at_full_rate(self):
        provider = SimulatedPaymentProvider(success_rate=1.0, latency_seconds=0)

        intent = provider.authorize_payment(Decimal("105.00"), "NAD", "cash", metadata={"order_id": "o-1"})

        self.assertIsInstance(intent, PaymentIntent)
        self.assertTrue(intent.succeeded)
        self.assertEqual(intent.status, PaymentStatus.SUCCEEDED)
        self.assertEqual(intent.amount, Decimal("105.00"))
        self.assertEqual(intent.metadata, {"order_id": "o-1"})
        self.assertTrue(intent.intent_id.startswith("sim_pay_"))

    def test_authorize_declines_at_zero_rate(self):
        provider = SimulatedPaymentProvider(success_rate=0.0, latency_seconds=0)

        intent = provider.authorize_payment(Decimal("50.00"), "NAD", "ewallet")

        self.assertFalse(intent.succeeded)
        self.assertEqual(intent.status, PaymentStatus.FAILED)
        self.assertTrue(intent.failure_reason)

    def test_seeded_rng_is_deterministic(self):
        outcomes = []
        for _ in range(2):
            provider = SimulatedPaymentProvider(success_rate=0.5, latency_seconds=0, rng=random.Random(42))
            outcomes.append([provider.authorize_payment(Decimal("1"), "NAD", "cash").succeeded for _ in range(20)])

        self.assertEqual(outcomes[0], outcomes[1])
        self.assertIn(True, outcomes[0])
        self.assertIn(False, outcomes[0])

    @override_settings(PAYMENT_SIMULATED_SUCCESS_RATE=0.25, PAYMENT_SIMULATED_LATENCY_SECONDS=0)
    def test_reads_settings_defaults(self):
        provider = SimulatedPaymentProvider()
        self.assertEqual(provider.success_rate, 0.25)
        self.assertEqual(provider.latency_seconds, 0.0)

    @patch("infrastructure.payments.simulated_provider.time.sleep")
    def test_latency_is_applied(self, mock_sleep):
        provider = SimulatedPaymentProvider(success_rate=1.0, latency_seconds=0.2)

        provider.authorize_payment(Decimal("10"), "NAD", "cash")

        mock_sleep.assert_called_once_with(0.2)

    def test_create_transfer_returns_payout(self):
        provider = SimulatedPaymentProvider(success_rate=1.0, latency_seconds=0)

        transfer = provider.create_transfer(Decimal("95.00"), "NAD", "acct-123", metadata={"order_id": "o-1"})

        self.assertTrue(transfer["id"].startswith("sim_tr_"))
        self.assertEqual(transfer["status"], "paid")
        self.assertEqual(transfer["destination"], "acct-123")
        self.assertEqual(transfer["amount"], Decimal("95.00"))
        self.assertEqual(transfer["metadata"], {"order_id": "o-1"})

    def test_transfers_are_not_retained(self):
        provider = SimulatedPaymentProvider(success_rate=1.0, latency_seconds=0)

        for _ in range(3):
            provider.create_transfer(Decimal("10.00"), "NAD", "acct-123")

        self.assertFalse(any(isinstance(value, list) and value for value in vars(provider).values()))


class PaymentFactoryTest(TestCase):
    """Test PaymentFactory."""

    def test_create_simulated(self):
        self.assertIsInstance(PaymentFactory.create(), SimulatedPaymentProvider)

    def test_invalid_backend(self):
        with self.assertRaises(ValueError):
            PaymentFactory.create("stripe")
