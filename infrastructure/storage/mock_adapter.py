"""
Mock Storage Adapter
====================

In-memory implementation of StorageInterface for tests and local runs.
"""

import logging
from typing import BinaryIO, Dict, Tuple

from .interface import StorageException, StorageFile, StorageInterface

logger = logging.getLogger(__name__)


class MockStorageAdapter(StorageInterface):
    """
    Keeps uploaded files in a dict instead of a bucket.

    ``objects`` is shared by every adapter instance so a test can inspect
    uploads made through adapters the code under test created itself.
    """

    objects: Dict[Tuple[str, str], Tuple[bytes, str]] = {}

    def __init__(self, bucket_name: str = "mock-bucket"):
        self._bucket_name = bucket_name

    def upload(
        self,
        file: BinaryIO,
        path: str,
        content_type: str,
    ) -> StorageFile:
        try:
            data = file.read()
        except Exception as e:
            raise StorageException(f"Mock upload failed: {str(e)}") from e

        self.objects[(self._bucket_name, path)] = (data, content_type)
        logger.info(f"[MOCK STORAGE] Stored {self._bucket_name}/{path} ({len(data)} bytes)")

        return StorageFile(
            key=path,
            url=f"https://mock-storage.local/{self._bucket_name}/{path}",
            size=len(data),
            content_type=content_type,
            bucket=self._bucket_name,
        )

    @property
    def bucket_name(self) -> str:
        return self._bucket_name

    @classmethod
    def clear(cls) -> None:
        """Forget every stored object."""
        cls.objects.clear()
