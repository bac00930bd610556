"""
Simulated Payment Provider
==========================

Stand-in gateway used until a real processor is integrated. Authorizations
succeed with a configurable probability and payouts are only logged.
"""

import logging
import random
import time
import uuid
from decimal import Decimal
from typing import Any, Dict, Optional

from django.conf import settings

from .interface import PaymentIntent, PaymentProviderInterface, PaymentStatus

logger = logging.getLogger(__name__)


class SimulatedPaymentProvider(PaymentProviderInterface):
    """
    Randomized payment gateway.

    Configuration (in settings.py):
        PAYMENT_SIMULATED_SUCCESS_RATE: probability an authorization succeeds (default 0.95)
        PAYMENT_SIMULATED_LATENCY_SECONDS: artificial delay per call (default 0)

    Args:
        success_rate: Overrides the configured success probability
        latency_seconds: Overrides the configured delay
        rng: Random source, injectable for deterministic tests
    """

    def __init__(
        self,
        success_rate: Optional[float] = None,
        latency_seconds: Optional[float] = None,
        rng: Optional[random.Random] = None,
    ):
        if success_rate is None:
            success_rate = getattr(settings, "PAYMENT_SIMULATED_SUCCESS_RATE", 0.95)
        if latency_seconds is None:
            latency_seconds = getattr(settings, "PAYMENT_SIMULATED_LATENCY_SECONDS", 0)

        self.success_rate = float(success_rate)
        self.latency_seconds = float(latency_seconds)
        self.rng = rng or random.Random()

    def authorize_payment(
        self,
        amount: Decimal,
        currency: str,
        payment_method: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> PaymentIntent:
        self._wait()
        intent_id = f"sim_pay_{uuid.uuid4().hex[:16]}"
        approved = self.rng.random() < self.success_rate

        if approved:
            logger.info(f"[SIMULATED GATEWAY] Authorized {amount} {currency} via {payment_method}: {intent_id}")
            return PaymentIntent(
                intent_id=intent_id,
                amount=amount,
                currency=currency,
                status=PaymentStatus.SUCCEEDED,
                metadata=metadata or {},
            )

        logger.warning(f"[SIMULATED GATEWAY] Declined {amount} {currency} via {payment_method}: {intent_id}")
        return PaymentIntent(
            intent_id=intent_id,
            amount=amount,
            currency=currency,
            status=PaymentStatus.FAILED,
            failure_reason="Payment processing failed at the gateway",
            metadata=metadata or {},
        )

    def create_transfer(
        self,
        amount: Decimal,
        currency: str,
        destination_account: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        self._wait()
        transfer = {
            "id": f"sim_tr_{uuid.uuid4().hex[:16]}",
            "amount": amount,
            "currency": currency,
            "destination": destination_account,
            "status": "paid",
            "metadata": metadata or {},
        }
        logger.info(f"[SIMULATED GATEWAY] Paid out {amount} {currency} to {destination_account}: {transfer['id']}")
        return transfer

    def _wait(self) -> None:
        if self.latency_seconds > 0:
            time.sleep(self.latency_seconds)
