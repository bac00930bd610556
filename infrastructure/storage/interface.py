"""
Storage Interface
=================

Abstract base class defining the contract for blob storage operations.
The checkout flow only needs to put payment-proof images somewhere durable
and hand back a URL, so the contract stays small.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import BinaryIO, Optional


@dataclass
class StorageFile:
    """
    Represents a stored file with its metadata.

    Attributes:
        key: Unique identifier/path for the file
        url: Public or signed URL to access the file
        size: File size in bytes
        content_type: MIME type of the file
        bucket: Storage bucket name (optional)
    """

    key: str
    url: str
    size: int
    content_type: str
    bucket: Optional[str] = None


class StorageInterface(ABC):
    """
    Abstract interface for blob storage.

    Concrete implementations:
        - S3StorageAdapter: AWS S3 / MinIO via django-storages
        - MockStorageAdapter: In-memory storage for testing
    """

    @abstractmethod
    def upload(
        self,
        file: BinaryIO,
        path: str,
        content_type: str,
    ) -> StorageFile:
        """
        Upload a file to storage.

        Args:
            file: Binary file object to upload
            path: Destination key in the bucket
            content_type: MIME type of the file

        Returns:
            StorageFile object with metadata

        Raises:
            StorageException: If upload fails
        """
        pass

    @property
    @abstractmethod
    def bucket_name(self) -> str:
        """Name of the bucket this adapter writes to."""
        pass


class StorageException(Exception):
    """Base exception for storage operations."""

    pass
