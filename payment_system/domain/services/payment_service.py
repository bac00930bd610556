"""
PaymentService - Payment Capture and Proof Verification

Charges each order created at checkout and records the platform commission.

Cash orders are captured immediately: a completed Payment, its commission
PlatformTransaction, then the order moves to paid/processing. Other methods
need a payment proof that the seller verifies; until then the Payment stays
pending and no commission is recorded.

A simulated gateway call gates every capture. When it declines nothing is
written, so the buyer is never recorded as charged for a declined payment.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from django.conf import settings
from django.utils import timezone

from infrastructure.container import get_payment_provider, get_persistence
from infrastructure.observability.tracing import add_span_attributes, tracer
from infrastructure.payments.interface import PaymentProviderInterface
from infrastructure.persistence import (
    OrderCommentRecord,
    PaymentRecord,
    PersistenceGatewayInterface,
    PlatformTransactionRecord,
    Tables,
)
from marketplace.notifications.domain.services import NotificationService
from marketplace.ordering.domain.services import normalize_payment_method
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok
from payment_system.domain.exceptions import PaymentDeclinedError, PaymentValidationError
from payment_system.domain.services.commission import CommissionSplit, split_commission
from payment_system.infra.observability.metrics import (
    payment_proof_uploads_total,
    payment_volume_total,
    platform_commission_total,
)

PROVIDER_BY_METHOD = {
    "cash": "cash",
    "ewallet": "ewallet",
    "pay_to_cell": "mobile_money",
    "bank_transfer": "bank",
    "easy_wallet": "easy_wallet",
}

# Buyer may (re)submit a proof while the order is in one of these payment states
PROOF_SUBMITTABLE = ("unpaid", "proof_rejected")


def payment_provider_for(payment_method: str) -> str:
    return PROVIDER_BY_METHOD.get(payment_method, "other")


def failed_upload_url(order_id: Any) -> str:
    """Placeholder stored when the proof image could not be uploaded."""
    return f"failed-upload-{order_id}"


@dataclass
class PaymentResult:
    order: Dict[str, Any]
    payment: Dict[str, Any]
    platform_transaction: Optional[Dict[str, Any]] = None
    proof_url: Optional[str] = None
    intent_id: Optional[str] = None

    @property
    def status(self) -> str:
        return self.payment["status"]

    @property
    def requires_payment_proof(self) -> bool:
        return self.order["payment_method"] != "cash"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "order_id": self.order["id"],
            "payment_id": self.payment["id"],
            "status": self.status,
            "total_amount": str(self.payment["total_amount"]),
            "seller_amount": str(self.payment["seller_amount"]),
            "platform_fee": str(self.payment["platform_fee"]),
            "payment_status": self.order["payment_status"],
            "order_status": self.order["status"],
            "proof_url": self.proof_url,
        }


class PaymentService(BaseService):
    """
    Service for capturing order payments.

    Responsibilities:
    - Gate every capture on the payment provider
    - Record Payment and commission PlatformTransaction rows
    - Store payment proofs for non-cash methods
    - Seller approval or rejection of a submitted proof

    Dependencies:
    - PersistenceGatewayInterface: payment, transaction and order rows, proof blobs
    - PaymentProviderInterface: authorization
    - NotificationService: buyer notifications after verification
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
        self.proof_bucket = getattr(settings, "PAYMENT_PROOF_BUCKET", "payment-proofs")

    @BaseService.log_performance
    def process_payment(
        self, order: Dict[str, Any], payment_method: Optional[str] = None, proof_image: Any = None
    ) -> PaymentResult:
        """
        Capture payment for one order.

        Args:
            order: Order row as returned by the gateway
            payment_method: Defaults to the order's method
            proof_image: Bytes or an uploaded file; ignored for cash

        Returns:
            PaymentResult with the updated order and payment rows

        Raises:
            PaymentValidationError: If the order already has a payment
            PaymentDeclinedError: If the provider declined; nothing was written
            PersistenceException: If a write failed after authorization
        """
        order_id = order["id"]
        method = normalize_payment_method(payment_method or order["payment_method"])

        with tracer.start_as_current_span("payment.process_payment") as span:
            add_span_attributes(span, order_id=order_id, payment_method=method, amount=order["total_amount"])

            if self.gateway.select(Tables.PAYMENTS, {"order_id": order_id}, limit=1):
                raise PaymentValidationError(f"Order {order_id} already has a payment")

            intent = self._authorize(order, method)
            split = split_commission(order["total_amount"])

            if method == "cash":
                result = self._capture_cash(order, method, split)
            else:
                result = self._record_pending(order, method, split, proof_image)

            result.intent_id = intent.intent_id
            add_span_attributes(span, payment_id=result.payment["id"], payment_status=result.order["payment_status"])
            return result

    def _authorize(self, order: Dict[str, Any], method: str):
        order_ref = str(order["id"])[:8]
        try:
            intent = self.payment_provider.authorize_payment(
                amount=order["total_amount"],
                currency=self.currency,
                payment_method=method,
                metadata={"order_id": str(order["id"]), "shop_id": str(order["shop_id"])},
            )
        except Exception as e:
            payment_volume_total.labels(currency=self.currency, status="failed").inc(float(order["total_amount"]))
            self.logger.error(f"Payment provider error for order {order['id']}: {e}", exc_info=True)
            raise PaymentDeclinedError(
                f"Payment for order #{order_ref} could not be processed. You have not been charged.",
                order_id=str(order["id"]),
            ) from e

        if not intent.succeeded:
            payment_volume_total.labels(currency=self.currency, status="declined").inc(float(order["total_amount"]))
            self.logger.warning(f"Payment for order {order['id']} declined: {intent.failure_reason}")
            raise PaymentDeclinedError(
                f"Payment for order #{order_ref} was declined ({intent.failure_reason}). You have not been charged.",
                order_id=str(order["id"]),
                intent_id=intent.intent_id,
            )

        return intent

    def _capture_cash(self, order: Dict[str, Any], method: str, split: CommissionSplit) -> PaymentResult:
        now = timezone.now()
        payment = self.gateway.insert(
            Tables.PAYMENTS,
            [self._payment_record(order, method, split, status="completed", processed_at=now).as_row()],
        )[0]
        transaction = self._record_commission(order, payment, split)
        order = self.gateway.update(
            Tables.ORDERS,
            {"payment_status": "paid", "status": "processing", "payment_date": now},
            {"id": order["id"]},
        )[0]

        payment_volume_total.labels(currency=self.currency, status="completed").inc(float(split.total_amount))
        self.logger.info(
            f"Cash payment {payment['id']} completed for order {order['id']}: "
            f"total {split.total_amount}, platform fee {split.platform_fee}"
        )
        return PaymentResult(order=order, payment=payment, platform_transaction=transaction)

    def _record_pending(
        self, order: Dict[str, Any], method: str, split: CommissionSplit, proof_image: Any
    ) -> PaymentResult:
        proof_url = None
        if proof_image is not None:
            proof_url = self._upload_proof(order, proof_image)

        payment = self.gateway.insert(
            Tables.PAYMENTS, [self._payment_record(order, method, split, status="pending").as_row()]
        )[0]

        if proof_url is not None:
            order = self._mark_proof_submitted(order, proof_url)

        payment_volume_total.labels(currency=self.currency, status="pending").inc(float(split.total_amount))
        self.logger.info(
            f"Pending {method} payment {payment['id']} recorded for order {order['id']} "
            f"({'proof submitted' if proof_url else 'awaiting proof'})"
        )
        return PaymentResult(order=order, payment=payment, proof_url=proof_url)

    def _payment_record(
        self, order: Dict[str, Any], method: str, split: CommissionSplit, status: str, processed_at=None
    ) -> PaymentRecord:
        return PaymentRecord(
            order_id=order["id"],
            shop_id=order["shop_id"],
            buyer_id=order["buyer_id"],
            total_amount=split.total_amount,
            seller_amount=split.seller_amount,
            platform_fee=split.platform_fee,
            payment_method=method,
            payment_provider=payment_provider_for(method),
            status=status,
            processed_at=processed_at,
            completed_at=processed_at,
        )

    def _record_commission(
        self, order: Dict[str, Any], payment: Dict[str, Any], split: CommissionSplit
    ) -> Dict[str, Any]:
        transaction = self.gateway.insert(
            Tables.PLATFORM_TRANSACTIONS,
            [
                PlatformTransactionRecord(
                    amount=split.platform_fee,
                    currency=self.currency,
                    order_id=order["id"],
                    shop_id=order["shop_id"],
                    payment_id=payment["id"],
                    description=f"Platform commission from order #{str(order['id'])[:8]}",
                    metadata={
                        "commission_rate": str(split.commission_rate),
                        "order_total": str(split.total_amount),
                    },
                ).as_row()
            ],
        )[0]
        platform_commission_total.labels(currency=self.currency).inc(float(split.platform_fee))
        return transaction

    def _upload_proof(self, order: Dict[str, Any], proof_image: Any) -> str:
        """Upload a proof image; on failure return the placeholder URL instead."""
        order_id = order["id"]
        key = f"payment-proof-{order_id}-{int(timezone.now().timestamp() * 1000)}.jpg"
        try:
            if hasattr(proof_image, "seek"):
                # One upload is shared by every order of a multi-shop checkout
                proof_image.seek(0)
            data = proof_image.read() if hasattr(proof_image, "read") else bytes(proof_image)
            content_type = getattr(proof_image, "content_type", None) or "image/jpeg"
            url = self.gateway.upload_blob(self.proof_bucket, key, data, content_type)
        except Exception as e:
            payment_proof_uploads_total.labels(outcome="failed").inc()
            self.logger.warning(f"Payment proof upload failed for order {order_id}: {e}", exc_info=True)
            return failed_upload_url(order_id)

        payment_proof_uploads_total.labels(outcome="uploaded").inc()
        self._post_proof_to_chat(order, url)
        return url

    def _post_proof_to_chat(self, order: Dict[str, Any], url: str) -> None:
        try:
            self.gateway.insert(
                Tables.ORDER_COMMENTS,
                [
                    OrderCommentRecord(
                        order_id=order["id"],
                        user_id=order["buyer_id"],
                        message=f"Payment proof uploaded. Click to view: {url}",
                    ).as_row()
                ],
            )
        except Exception as e:
            self.logger.warning(f"Failed to add payment proof to chat for order {order['id']}: {e}", exc_info=True)

    def _mark_proof_submitted(self, order: Dict[str, Any], proof_url: str) -> Dict[str, Any]:
        return self.gateway.update(
            Tables.ORDERS,
            {
                "payment_proof_url": proof_url,
                "payment_proof_uploaded_at": timezone.now(),
                "payment_status": "proof_submitted",
                "status": "pending_payment_verification",
            },
            {"id": order["id"]},
        )[0]

    def _load_order(self, order_id: str):
        order = self.gateway.select_one(Tables.ORDERS, {"id": order_id})
        if order is None:
            return None, service_err(ErrorCodes.ORDER_NOT_FOUND, f"Order {order_id} not found")
        return order, None

    def _check_shop_owner(self, order: Dict[str, Any], seller_id: Any) -> Optional[ServiceResult]:
        shop = self.gateway.select_one(Tables.SHOPS, {"id": order["shop_id"]})
        if shop is None or str(shop["owner_id"]) != str(seller_id):
            return service_err(ErrorCodes.NOT_SHOP_OWNER, "Only the shop owner can verify this payment")
        return None

    @BaseService.log_performance
    def submit_payment_proof(self, order_id: str, proof_image: Any, buyer_id: Any = None) -> ServiceResult[Dict]:
        """
        Upload a payment proof for an order placed without one, or re-submit
        after a rejection.

        Returns:
            ServiceResult with the updated order row
        """
        order, error = self._load_order(order_id)
        if error:
            return error

        if buyer_id is not None and str(order["buyer_id"]) != str(buyer_id):
            return service_err(ErrorCodes.PERMISSION_DENIED, "You do not own this order")

        if order["payment_method"] == "cash":
            return service_err(ErrorCodes.INVALID_PAYMENT_STATE, "Cash orders do not take a payment proof")

        if order["payment_status"] not in PROOF_SUBMITTABLE:
            return service_err(
                ErrorCodes.INVALID_PAYMENT_STATE,
                f"Cannot submit a proof while payment status is '{order['payment_status']}'",
            )

        proof_url = self._upload_proof(order, proof_image)
        order = self._mark_proof_submitted(order, proof_url)
        self.logger.info(f"Payment proof submitted for order {order_id}")
        return service_ok(order)

    @BaseService.log_performance
    def approve_payment_proof(self, order_id: str, seller_id: Any) -> ServiceResult[PaymentResult]:
        """
        Seller confirms a payment proof.

        Completes the order's pending Payment, records the commission and
        moves the order to paid/processing.
        """
        order, error = self._load_order(order_id)
        if error:
            return error

        error = self._check_shop_owner(order, seller_id)
        if error:
            return error

        if order["payment_status"] != "proof_submitted":
            return service_err(
                ErrorCodes.INVALID_PAYMENT_STATE,
                f"Cannot approve payment while payment status is '{order['payment_status']}'",
            )

        payment = self.gateway.select_one(Tables.PAYMENTS, {"order_id": order_id, "status": "pending"})
        if payment is None:
            return service_err(ErrorCodes.PAYMENT_NOT_FOUND, f"No pending payment for order {order_id}")

        split = split_commission(order["total_amount"])
        now = timezone.now()
        payment = self.gateway.update(
            Tables.PAYMENTS,
            {"status": "completed", "processed_at": now, "completed_at": now},
            {"id": payment["id"]},
        )[0]
        transaction = self._record_commission(order, payment, split)
        order = self.gateway.update(
            Tables.ORDERS,
            {"payment_status": "paid", "status": "processing", "payment_date": now},
            {"id": order_id},
        )[0]

        payment_volume_total.labels(currency=self.currency, status="completed").inc(float(split.total_amount))
        self.notification_service.notify_payment_approved(order)
        self.logger.info(f"Payment proof approved for order {order_id} by seller {seller_id}")

        return service_ok(
            PaymentResult(
                order=order,
                payment=payment,
                platform_transaction=transaction,
                proof_url=order.get("payment_proof_url"),
            )
        )

    @BaseService.log_performance
    def reject_payment_proof(self, order_id: str, seller_id: Any, reason: str = "") -> ServiceResult[Dict]:
        """Seller rejects a payment proof; the buyer can submit a new one."""
        order, error = self._load_order(order_id)
        if error:
            return error

        error = self._check_shop_owner(order, seller_id)
        if error:
            return error

        if order["payment_status"] != "proof_submitted":
            return service_err(
                ErrorCodes.INVALID_PAYMENT_STATE,
                f"Cannot reject payment while payment status is '{order['payment_status']}'",
            )

        order = self.gateway.update(Tables.ORDERS, {"payment_status": "proof_rejected"}, {"id": order_id})[0]
        self.notification_service.notify_payment_rejected(order, reason)
        self.logger.info(f"Payment proof rejected for order {order_id} by seller {seller_id}")
        return service_ok(order)
