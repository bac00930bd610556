"""
Storage Abstraction Layer
=========================

Provides a unified interface for blob storage (S3/MinIO, in-memory).
"""

from .factory import StorageFactory
from .interface import StorageException, StorageFile, StorageInterface
from .mock_adapter import MockStorageAdapter
from .s3_adapter import S3StorageAdapter

__all__ = [
    "StorageInterface",
    "StorageFile",
    "StorageException",
    "S3StorageAdapter",
    "MockStorageAdapter",
    "StorageFactory",
]
