"""
Storage Factory
===============

Factory pattern for creating bucket-scoped storage adapters.
"""

import logging
from typing import Literal, Optional

from django.conf import settings

from .interface import StorageInterface
from .mock_adapter import MockStorageAdapter
from .s3_adapter import S3StorageAdapter

logger = logging.getLogger(__name__)

StorageBackend = Literal["s3", "memory"]


class StorageFactory:
    """
    Factory for creating storage adapters.

    Usage:
        # In settings.py
        STORAGE_BACKEND = 's3'  # or 'memory' for tests

        # In your code
        storage = StorageFactory.create("payment-proofs")
    """

    @staticmethod
    def create(bucket_name: Optional[str] = None, backend: StorageBackend | None = None) -> StorageInterface:
        """
        Create a storage adapter for ``bucket_name``.

        Args:
            bucket_name: Target bucket; the backend default when None
            backend: 's3' or 'memory'. If None, reads settings.STORAGE_BACKEND

        Raises:
            ValueError: If backend type is invalid
        """
        backend_type = backend or getattr(settings, "STORAGE_BACKEND", "s3")

        logger.debug(f"Creating storage backend '{backend_type}' for bucket {bucket_name or '<default>'}")

        if backend_type == "s3":
            return S3StorageAdapter(bucket_name)
        elif backend_type == "memory":
            return MockStorageAdapter(bucket_name or "mock-bucket")
        else:
            raise ValueError(f"Invalid storage backend: {backend_type}. Must be 's3' or 'memory'")
