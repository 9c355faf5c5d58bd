"""
S3Client - S3/MinIO operations for storing exported assets.
"""

import logging
from typing import Optional
from urllib.parse import quote, unquote

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import StorageDeleteError, StorageReadError, StorageUploadError
from .s3_config import S3Config


class S3Client:
    """
    Wrapper for S3/MinIO operations on exported asset binaries.

    Keys passed in are relative to the configured prefix.
    """

    def __init__(self, config: S3Config, logger: Optional[logging.Logger] = None):
        """
        Initialize S3 client.

        Args:
            config: S3 configuration
            logger: Optional logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

        self._client = boto3.client(
            's3',
            endpoint_url=config.endpoint,
            aws_access_key_id=config.access_key,
            aws_secret_access_key=config.secret_key,
            region_name=config.region,
            config=Config(
                signature_version='s3v4',
                s3={'addressing_style': 'path'}
            ),
            verify=config.verify_ssl
        )

    @property
    def client(self):
        """Return the underlying boto3 client."""
        return self._client

    def full_key(self, key: str) -> str:
        """Prepend the configured prefix to a relative key."""
        prefix = (self.config.prefix or '').strip('/')
        key = key.lstrip('/')
        return f"{prefix}/{key}" if prefix else key

    def object_exists(self, key: str) -> bool:
        """Check if an object exists in S3."""
        try:
            self._client.head_object(Bucket=self.config.bucket, Key=self.full_key(key))
            return True
        except ClientError as e:
            if e.response['Error']['Code'] in ('404', 'NoSuchKey', 'NotFound'):
                return False
            raise

    def download_object(self, key: str) -> bytes:
        """Download an object from S3."""
        try:
            response = self._client.get_object(Bucket=self.config.bucket, Key=self.full_key(key))
            return response['Body'].read()
        except (ClientError, BotoCoreError) as e:
            raise StorageReadError(f"Failed to download {key}: {e}") from e

    def upload_object(
        self,
        key: str,
        data: bytes,
        content_type: str = 'application/octet-stream'
    ) -> None:
        """Upload an object to S3."""
        self.logger.debug(f"Uploading {len(data)} bytes to {key}")
        try:
            self._client.put_object(
                Bucket=self.config.bucket,
                Key=self.full_key(key),
                Body=data,
                ContentType=content_type,
                CacheControl='max-age=3600'
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageUploadError(f"Failed to upload {key}: {e}") from e

    def delete_object(self, key: str) -> None:
        """Delete an object from S3. Deleting a missing key is not an error."""
        self.logger.debug(f"Deleting {key}")
        try:
            self._client.delete_object(Bucket=self.config.bucket, Key=self.full_key(key))
        except (ClientError, BotoCoreError) as e:
            raise StorageDeleteError(f"Failed to delete {key}: {e}") from e

    def get_public_url(self, key: str) -> str:
        """Public URL an object is served from."""
        return f"{self.config.public_base_url}/{quote(self.full_key(key))}"

    def key_from_url(self, url: str) -> Optional[str]:
        """
        Invert get_public_url.

        Returns:
            The relative key, or None if the URL does not point into this bucket
        """
        base = f"{self.config.public_base_url}/"
        if not url.startswith(base):
            return None
        full_key = unquote(url[len(base):])
        prefix = (self.config.prefix or '').strip('/')
        if prefix:
            if not full_key.startswith(f"{prefix}/"):
                return None
            full_key = full_key[len(prefix) + 1:]
        return full_key or None
