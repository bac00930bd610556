"""
Django Persistence Gateway
==========================

Concrete implementation of PersistenceGatewayInterface backed by the Django
ORM. Each call runs in Django's autocommit mode, so it commits on its own just
like a request to a hosted table API would. Rows cross the boundary as plain
dicts keyed by column name (foreign keys as ``<name>_id``), with UUIDs
rendered as strings.
"""

import logging
import uuid
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Sequence

from django.apps import apps
from django.core.files.base import ContentFile
from django.db.models import F, Model
from django.utils import timezone

from infrastructure.storage import StorageFactory, StorageInterface

from .interface import Filters, PersistenceException, PersistenceGatewayInterface, Row
from .records import AUTO_NOW_COLUMNS, Tables

logger = logging.getLogger(__name__)


TABLE_MODELS: Dict[str, str] = {
    Tables.SHOPS: "marketplace.Shop",
    Tables.PRODUCTS: "marketplace.Product",
    Tables.SELLER_STATS: "marketplace.SellerStats",
    Tables.ORDERS: "marketplace.Order",
    Tables.ORDER_ITEMS: "marketplace.OrderItem",
    Tables.ORDER_SHIPPING: "marketplace.OrderShipping",
    Tables.ORDER_COMMENTS: "marketplace.OrderComment",
    Tables.NOTIFICATIONS: "marketplace.Notification",
    Tables.PAYMENTS: "payment_system.Payment",
    Tables.PLATFORM_TRANSACTIONS: "payment_system.PlatformTransaction",
    Tables.PAYMENT_DISTRIBUTIONS: "payment_system.PaymentDistribution",
}


class DjangoPersistenceGateway(PersistenceGatewayInterface):
    """
    ORM-backed gateway.

    Args:
        storage_factory: Callable returning a StorageInterface for a bucket,
                         used by ``upload_blob`` (defaults to StorageFactory.create)
    """

    def __init__(self, storage_factory: Optional[Callable[[str], StorageInterface]] = None):
        self._storage_factory = storage_factory or StorageFactory.create

    def insert(self, table: str, rows: Sequence[Row]) -> List[Row]:
        model = self._model(table)
        try:
            instances = [model(**row) for row in rows]
            model.objects.bulk_create(instances)
        except Exception as e:
            logger.error(f"Insert into {table} failed: {str(e)}")
            raise PersistenceException(f"Insert into {table} failed: {str(e)}", table, "insert") from e

        logger.debug(f"Inserted {len(instances)} row(s) into {table}")
        return [self._to_row(instance) for instance in instances]

    def select(
        self,
        table: str,
        filters: Optional[Filters] = None,
        order_by: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
    ) -> List[Row]:
        model = self._model(table)
        try:
            queryset = model.objects.filter(**(filters or {}))
            if order_by:
                queryset = queryset.order_by(*order_by)
            if limit is not None:
                queryset = queryset[:limit]
            return [self._to_row(instance) for instance in queryset]
        except Exception as e:
            logger.error(f"Select from {table} failed: {str(e)}")
            raise PersistenceException(f"Select from {table} failed: {str(e)}", table, "select") from e

    def update(self, table: str, patch: Row, filters: Filters) -> List[Row]:
        model = self._model(table)
        values = dict(patch)
        auto_now = AUTO_NOW_COLUMNS.get(table)
        if auto_now and auto_now not in values:
            values[auto_now] = self._now()

        try:
            ids = list(model.objects.filter(**filters).values_list("pk", flat=True))
            if ids:
                model.objects.filter(pk__in=ids).update(**values)
            return [self._to_row(instance) for instance in model.objects.filter(pk__in=ids)]
        except Exception as e:
            logger.error(f"Update of {table} failed: {str(e)}")
            raise PersistenceException(f"Update of {table} failed: {str(e)}", table, "update") from e

    def increment(self, table: str, field: str, amount: Decimal, filters: Filters) -> int:
        model = self._model(table)
        values = {field: F(field) + amount}
        auto_now = AUTO_NOW_COLUMNS.get(table)
        if auto_now:
            values[auto_now] = self._now()

        try:
            return model.objects.filter(**filters).update(**values)
        except Exception as e:
            logger.error(f"Increment of {table}.{field} failed: {str(e)}")
            raise PersistenceException(f"Increment of {table}.{field} failed: {str(e)}", table, "increment") from e

    def upload_blob(self, bucket: str, key: str, data: bytes, content_type: str) -> str:
        try:
            storage = self._storage_factory(bucket)
            content = ContentFile(data, name=key)
            # django-storages reads the MIME type from the file object
            content.content_type = content_type
            stored = storage.upload(content, key, content_type)
        except Exception as e:
            logger.error(f"Upload of {bucket}/{key} failed: {str(e)}")
            raise PersistenceException(f"Upload of {bucket}/{key} failed: {str(e)}", bucket, "upload_blob") from e

        logger.info(f"Uploaded {bucket}/{key}")
        return stored.url

    @staticmethod
    def _model(table: str) -> type[Model]:
        try:
            return apps.get_model(TABLE_MODELS[table])
        except KeyError as e:
            raise PersistenceException(f"Unknown table: {table}", table) from e

    @staticmethod
    def _to_row(instance: Model) -> Row:
        row = {}
        for field in instance._meta.concrete_fields:
            value = getattr(instance, field.attname)
            row[field.attname] = str(value) if isinstance(value, uuid.UUID) else value
        return row

    @staticmethod
    def _now():
        return timezone.now()
