"""
S3 Storage Adapter
==================

Concrete implementation of StorageInterface using AWS S3 via django-storages.
One adapter instance targets one bucket, so payment proofs can live in their
own bucket next to the default one.
"""

import logging
from typing import BinaryIO, Optional

from botocore.exceptions import ConnectionClosedError, EndpointConnectionError
from django.conf import settings
from storages.backends.s3boto3 import S3Boto3Storage
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from .interface import StorageException, StorageFile, StorageInterface

logger = logging.getLogger(__name__)


class S3StorageAdapter(StorageInterface):
    """
    AWS S3 storage implementation using django-storages.

    Configuration (in settings.py):
        AWS_ACCESS_KEY_ID: AWS access key
        AWS_SECRET_ACCESS_KEY: AWS secret key
        AWS_STORAGE_BUCKET_NAME: Default bucket name
        AWS_S3_REGION_NAME: AWS region
        AWS_S3_ENDPOINT_URL: Endpoint override for MinIO (optional)
        AWS_S3_CUSTOM_DOMAIN: Custom CDN domain (optional)

    Args:
        bucket_name: Bucket to write to; defaults to AWS_STORAGE_BUCKET_NAME
    """

    def __init__(self, bucket_name: Optional[str] = None):
        self._bucket_name = bucket_name or getattr(settings, "AWS_STORAGE_BUCKET_NAME", "default-bucket")
        self.storage = S3Boto3Storage(bucket_name=self._bucket_name)

    def upload(
        self,
        file: BinaryIO,
        path: str,
        content_type: str,
    ) -> StorageFile:
        try:
            saved_path = self._save(path, file)
            size = self.storage.size(saved_path)
            url = self.storage.url(saved_path)

            logger.info(f"Successfully uploaded file to S3: {self._bucket_name}/{saved_path}")

            return StorageFile(
                key=saved_path,
                url=url,
                size=size,
                content_type=content_type,
                bucket=self._bucket_name,
            )

        except Exception as e:
            logger.error(f"Failed to upload file to S3: {self._bucket_name}/{path}. Error: {str(e)}")
            raise StorageException(f"S3 upload failed: {str(e)}") from e

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        retry=retry_if_exception_type((EndpointConnectionError, ConnectionClosedError)),
        reraise=True,
    )
    def _save(self, path: str, file: BinaryIO) -> str:
        """Save with retries on transient connection errors."""
        file.seek(0)
        return self.storage.save(path, file)

    @property
    def bucket_name(self) -> str:
        return self._bucket_name
