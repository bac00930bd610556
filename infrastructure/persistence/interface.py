"""
Persistence Gateway Interface
=============================

Abstract base class defining the contract every order/payment workflow writes
through. The gateway mirrors a hosted relational store reached over an API:
each call commits on its own and no multi-statement transaction is offered,
so callers must order their writes and tolerate partial progress.

Filters are dictionaries of column lookups. Plain keys test equality and the
``__in``, ``__gte``, ``__lte`` and ``__isnull`` suffixes are supported by
every backend.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

Row = Dict[str, Any]
Filters = Dict[str, Any]


class PersistenceGatewayInterface(ABC):
    """
    Abstract interface for table-oriented persistence.

    Concrete implementations:
        - DjangoPersistenceGateway: Django ORM (autocommit per call)
        - InMemoryPersistenceGateway: in-process tables for tests and local runs
    """

    @abstractmethod
    def insert(self, table: str, rows: Sequence[Row]) -> List[Row]:
        """
        Insert one or more rows in a single call.

        Args:
            table: Logical table name (e.g. 'orders')
            rows: Column/value mappings; ``id`` and timestamps are generated
                  when omitted

        Returns:
            The inserted rows as stored, including generated columns

        Raises:
            PersistenceException: If the insert is rejected
        """
        pass

    @abstractmethod
    def select(
        self,
        table: str,
        filters: Optional[Filters] = None,
        order_by: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
    ) -> List[Row]:
        """
        Read rows matching the filters.

        Args:
            table: Logical table name
            filters: Column lookups, all of which must match
            order_by: Column names, prefixed with '-' for descending
            limit: Maximum number of rows to return

        Returns:
            Matching rows (possibly empty)

        Raises:
            PersistenceException: If the read fails
        """
        pass

    @abstractmethod
    def update(self, table: str, patch: Row, filters: Filters) -> List[Row]:
        """
        Apply ``patch`` to every row matching ``filters``.

        Returns:
            The updated rows after the patch was applied

        Raises:
            PersistenceException: If the update fails
        """
        pass

    @abstractmethod
    def increment(self, table: str, field: str, amount: Decimal, filters: Filters) -> int:
        """
        Add ``amount`` to a numeric column in place.

        Returns:
            Number of rows affected (0 when nothing matched)

        Raises:
            PersistenceException: If the update fails
        """
        pass

    @abstractmethod
    def upload_blob(self, bucket: str, key: str, data: bytes, content_type: str) -> str:
        """
        Store binary content and return its public URL.

        Raises:
            PersistenceException: If the upload fails
        """
        pass

    def select_one(self, table: str, filters: Filters) -> Optional[Row]:
        """Return the first matching row or None."""
        rows = self.select(table, filters, limit=1)
        return rows[0] if rows else None


class PersistenceException(Exception):
    """Raised when a gateway call is rejected by the underlying store."""

    def __init__(self, message: str, table: Optional[str] = None, operation: Optional[str] = None):
        super().__init__(message)
        self.table = table
        self.operation = operation
