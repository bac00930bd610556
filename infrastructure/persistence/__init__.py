"""
Persistence Gateway Layer
=========================

Table-oriented access to the relational store used by the checkout,
payment and distribution workflows.
"""

from .django_gateway import DjangoPersistenceGateway
from .factory import PersistenceFactory
from .interface import PersistenceException, PersistenceGatewayInterface
from .memory_gateway import InMemoryPersistenceGateway
from .records import (
    AUTO_NOW_COLUMNS,
    NotificationRecord,
    OrderCommentRecord,
    OrderItemRecord,
    OrderRecord,
    OrderShippingRecord,
    PaymentDistributionRecord,
    PaymentRecord,
    PlatformTransactionRecord,
    Record,
    SellerStatsRecord,
    Tables,
)

__all__ = [
    "PersistenceGatewayInterface",
    "PersistenceException",
    "DjangoPersistenceGateway",
    "InMemoryPersistenceGateway",
    "PersistenceFactory",
    "Tables",
    "AUTO_NOW_COLUMNS",
    "Record",
    "OrderRecord",
    "OrderItemRecord",
    "OrderShippingRecord",
    "OrderCommentRecord",
    "NotificationRecord",
    "PaymentRecord",
    "PlatformTransactionRecord",
    "PaymentDistributionRecord",
    "SellerStatsRecord",
]
