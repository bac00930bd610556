"""
Typed row records for every table the checkout workflow writes.

Services build one of these instead of a loose dict so a misspelt column is an
error at construction time rather than a silently ignored key at insert time.
"""

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional


class Tables:
    """Logical table names shared by every gateway backend."""

    SHOPS = "shops"
    PRODUCTS = "products"
    SELLER_STATS = "seller_stats"
    ORDERS = "orders"
    ORDER_ITEMS = "order_items"
    ORDER_SHIPPING = "order_shipping"
    ORDER_COMMENTS = "order_comments"
    NOTIFICATIONS = "notifications"
    PAYMENTS = "payments"
    PLATFORM_TRANSACTIONS = "platform_transactions"
    PAYMENT_DISTRIBUTIONS = "payment_distributions"


# Columns refreshed on every update, mirroring auto_now model fields
AUTO_NOW_COLUMNS = {
    Tables.PRODUCTS: "updated_at",
    Tables.ORDERS: "updated_at",
    Tables.SELLER_STATS: "last_updated",
}


class Record:
    """Mixin giving dataclass records a row round-trip."""

    # Columns the store fills in when they are left as None
    GENERATED = ("id", "created_at", "updated_at", "last_updated")

    @classmethod
    def from_row(cls, row: Dict[str, Any]):
        names = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in row.items() if key in names})

    def as_row(self) -> Dict[str, Any]:
        row = asdict(self)
        for name in self.GENERATED:
            if row.get(name) is None:
                row.pop(name, None)
        return row


@dataclass
class OrderRecord(Record):
    buyer_id: Any
    shop_id: str
    total_amount: Decimal
    payment_method: str
    delivery_address: str
    phone_number: str
    delivery_location: str = "local"
    special_instructions: str = ""
    delivery_fee: Decimal = Decimal("0.00")
    runner_fees_total: Decimal = Decimal("0.00")
    transport_fees_total: Decimal = Decimal("0.00")
    transport_fees_paid: bool = False
    has_on_order_items: bool = False
    is_deposit_payment: bool = False
    status: str = "pending"
    payment_status: str = "unpaid"
    payment_proof_url: Optional[str] = None
    payment_proof_uploaded_at: Optional[datetime] = None
    payment_date: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class OrderItemRecord(Record):
    order_id: str
    product_id: str
    quantity: int
    price: Decimal
    runner_fee: Decimal = Decimal("0.00")
    transport_fee: Decimal = Decimal("0.00")
    id: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class OrderShippingRecord(Record):
    order_id: str
    delivery_address: str
    phone_number: str
    delivery_location: str
    special_instructions: str = ""
    id: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class OrderCommentRecord(Record):
    order_id: str
    user_id: Any
    message: str
    id: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class NotificationRecord(Record):
    user_id: Any
    type: str
    title: str
    message: str
    order_id: Optional[str] = None
    shop_id: Optional[str] = None
    product_id: Optional[str] = None
    is_read: bool = False
    id: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class PaymentRecord(Record):
    order_id: str
    shop_id: str
    buyer_id: Any
    total_amount: Decimal
    seller_amount: Decimal
    platform_fee: Decimal
    payment_method: str
    payment_provider: str
    status: str = "pending"
    processed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class PlatformTransactionRecord(Record):
    amount: Decimal
    currency: str
    order_id: str
    shop_id: str
    payment_id: str
    description: str
    type: str = "commission"
    metadata: Dict[str, Any] = field(default_factory=dict)
    id: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class PaymentDistributionRecord(Record):
    order_id: str
    shop_id: str
    total_amount: Decimal
    platform_fee: Decimal
    seller_amount: Decimal
    transfer_reference: str = ""
    status: str = "completed"
    distributed_at: Optional[datetime] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class SellerStatsRecord(Record):
    shop_id: str
    total_revenue: Decimal = Decimal("0.00")
    total_orders_settled: int = 0
    last_updated: Optional[datetime] = None
    id: Optional[str] = None
