"""
In-Memory Persistence Gateway
=============================

In-process implementation of PersistenceGatewayInterface for unit tests and
local development. Tables are plain lists of dicts; every call is recorded so
tests can assert which writes happened, and failures can be injected per
table and operation to exercise partial-failure paths.
"""

import copy
import logging
import uuid
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from django.utils import timezone

from .interface import Filters, PersistenceException, PersistenceGatewayInterface, Row
from .records import AUTO_NOW_COLUMNS, Tables

logger = logging.getLogger(__name__)

WRITE_OPERATIONS = ("insert", "update", "increment", "upload_blob")

# Tables without a created_at column
_UNTIMESTAMPED = {Tables.SHOPS, Tables.PRODUCTS, Tables.SELLER_STATS}


def _normalize(value: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return str(value)
    return value


SUPPORTED_LOOKUPS = ("", "in", "gte", "lte", "isnull")


def _check_lookups(filters: Optional[Filters], operation: str) -> None:
    for key in filters or {}:
        if key.partition("__")[2] not in SUPPORTED_LOOKUPS:
            raise PersistenceException(f"Unsupported lookup '{key}'", operation=operation)


def _matches(row: Row, filters: Optional[Filters]) -> bool:
    for key, expected in (filters or {}).items():
        column, _, lookup = key.partition("__")
        value = _normalize(row.get(column))

        if lookup == "":
            if value != _normalize(expected):
                return False
        elif lookup == "in":
            if value not in {_normalize(item) for item in expected}:
                return False
        elif lookup == "gte":
            if value is None or value < expected:
                return False
        elif lookup == "lte":
            if value is None or value > expected:
                return False
        elif lookup == "isnull":
            if (value is None) != bool(expected):
                return False
    return True


class InMemoryPersistenceGateway(PersistenceGatewayInterface):
    """
    In-memory gateway for testing and development.

    Instead of talking to a database, this gateway:
        - Keeps one list of rows per table
        - Generates UUID string ids and created_at timestamps
        - Logs every call in ``calls`` for verification
        - Raises PersistenceException for calls registered with ``fail_on``
    """

    def __init__(self):
        self.tables: Dict[str, List[Row]] = {}
        self.blobs: Dict[Tuple[str, str], Tuple[bytes, str]] = {}
        self.calls: List[Tuple[str, str]] = []
        self._failures: List[Tuple[str, str, Optional[Callable[[Dict[str, Any]], bool]], str]] = []

    # ------------------------------------------------------------------
    # Test helpers
    # ------------------------------------------------------------------

    def fail_on(
        self,
        table: str,
        operation: str,
        predicate: Optional[Callable[[Dict[str, Any]], bool]] = None,
        message: str = "simulated store failure",
    ) -> None:
        """
        Make matching calls raise PersistenceException.

        Args:
            table: Table name (the bucket name for ``upload_blob``)
            operation: 'insert', 'select', 'update', 'increment' or 'upload_blob'
            predicate: Optional test; receives each row for inserts and the
                       filters for every other operation
            message: Error message carried by the exception
        """
        self._failures.append((table, operation, predicate, message))

    def clear_failures(self) -> None:
        self._failures = []

    def seed(self, table: str, rows: Sequence[Row]) -> List[Row]:
        """Insert fixture rows without recording a call."""
        stored = [self._prepare(table, row) for row in rows]
        self.tables.setdefault(table, []).extend(stored)
        return copy.deepcopy(stored)

    def rows(self, table: str) -> List[Row]:
        """Every row of ``table`` without recording a call."""
        return copy.deepcopy(self.tables.get(table, []))

    @property
    def write_calls(self) -> List[Tuple[str, str]]:
        return [call for call in self.calls if call[0] in WRITE_OPERATIONS]

    # ------------------------------------------------------------------
    # Gateway operations
    # ------------------------------------------------------------------

    def insert(self, table: str, rows: Sequence[Row]) -> List[Row]:
        self.calls.append(("insert", table))
        for row in rows:
            self._check_failure(table, "insert", row)

        stored = [self._prepare(table, row) for row in rows]
        self.tables.setdefault(table, []).extend(stored)
        logger.debug(f"[MEMORY GATEWAY] Inserted {len(stored)} row(s) into {table}")
        return copy.deepcopy(stored)

    def select(
        self,
        table: str,
        filters: Optional[Filters] = None,
        order_by: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
    ) -> List[Row]:
        self.calls.append(("select", table))
        self._check_failure(table, "select", filters or {})
        _check_lookups(filters, "select")

        matched = [row for row in self.tables.get(table, []) if _matches(row, filters)]
        for column in reversed(list(order_by or [])):
            descending = column.startswith("-")
            name = column.lstrip("-")
            matched.sort(key=lambda row: (row.get(name) is None, row.get(name)), reverse=descending)
        if limit is not None:
            matched = matched[:limit]
        return copy.deepcopy(matched)

    def update(self, table: str, patch: Row, filters: Filters) -> List[Row]:
        self.calls.append(("update", table))
        self._check_failure(table, "update", filters)
        _check_lookups(filters, "update")

        updated = []
        for row in self.tables.get(table, []):
            if _matches(row, filters):
                row.update(copy.deepcopy(patch))
                if table in AUTO_NOW_COLUMNS and AUTO_NOW_COLUMNS[table] not in patch:
                    row[AUTO_NOW_COLUMNS[table]] = timezone.now()
                updated.append(row)
        logger.debug(f"[MEMORY GATEWAY] Updated {len(updated)} row(s) in {table}")
        return copy.deepcopy(updated)

    def increment(self, table: str, field: str, amount: Decimal, filters: Filters) -> int:
        self.calls.append(("increment", table))
        self._check_failure(table, "increment", filters)
        _check_lookups(filters, "increment")

        affected = 0
        for row in self.tables.get(table, []):
            if _matches(row, filters):
                row[field] = (row.get(field) or 0) + amount
                if table in AUTO_NOW_COLUMNS:
                    row[AUTO_NOW_COLUMNS[table]] = timezone.now()
                affected += 1
        return affected

    def upload_blob(self, bucket: str, key: str, data: bytes, content_type: str) -> str:
        self.calls.append(("upload_blob", bucket))
        self._check_failure(bucket, "upload_blob", {"key": key})

        self.blobs[(bucket, key)] = (bytes(data), content_type)
        logger.info(f"[MEMORY GATEWAY] Stored blob {bucket}/{key} ({len(data)} bytes)")
        return f"memory://{bucket}/{key}"

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _prepare(self, table: str, row: Row) -> Row:
        stored = {key: _normalize(value) for key, value in copy.deepcopy(dict(row)).items()}
        stored.setdefault("id", str(uuid.uuid4()))
        now = timezone.now()
        if table not in _UNTIMESTAMPED:
            stored.setdefault("created_at", now)
        if table in AUTO_NOW_COLUMNS:
            stored.setdefault(AUTO_NOW_COLUMNS[table], now)
        return stored

    def _check_failure(self, table: str, operation: str, subject: Dict[str, Any]) -> None:
        for failing_table, failing_operation, predicate, message in self._failures:
            if failing_table != table or failing_operation != operation:
                continue
            if predicate is None or predicate(subject):
                logger.debug(f"[MEMORY GATEWAY] Injected failure on {operation} {table}")
                raise PersistenceException(message, table=table, operation=operation)
