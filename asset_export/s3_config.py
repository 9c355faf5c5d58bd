"""
S3Config - S3/MinIO connection settings for asset storage.
"""

import os
from dataclasses import dataclass
from typing import List, Optional


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'y', 't')


@dataclass
class S3Config:
    """
    S3 storage configuration.

    Attributes:
        endpoint: S3/MinIO endpoint URL
        bucket: Bucket holding exported assets
        prefix: Optional key prefix inside the bucket
        access_key: Access key id
        secret_key: Secret access key
        region: Region name
        verify_ssl: Verify TLS certificates
        public_url: Base URL assets are served from; defaults to endpoint/bucket
    """
    endpoint: Optional[str] = None
    bucket: Optional[str] = None
    prefix: str = ''
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    region: Optional[str] = None
    verify_ssl: bool = True
    public_url: Optional[str] = None

    @classmethod
    def from_env(cls) -> 'S3Config':
        """Load configuration from S3_* environment variables."""
        return cls(
            endpoint=os.getenv('S3_ENDPOINT'),
            bucket=os.getenv('S3_BUCKET'),
            prefix=os.getenv('S3_PREFIX', ''),
            access_key=os.getenv('S3_ACCESS_KEY'),
            secret_key=os.getenv('S3_SECRET_KEY'),
            region=os.getenv('S3_REGION'),
            verify_ssl=_env_bool('S3_VERIFY_SSL', True),
            public_url=os.getenv('S3_PUBLIC_URL'),
        )

    def validate(self) -> List[str]:
        """Return a list of configuration errors (empty if valid)."""
        errors = []
        if not self.endpoint:
            errors.append("S3_ENDPOINT is not set")
        if not self.bucket:
            errors.append("S3_BUCKET is not set")
        if not self.access_key:
            errors.append("S3_ACCESS_KEY is not set")
        if not self.secret_key:
            errors.append("S3_SECRET_KEY is not set")
        return errors

    @property
    def public_base_url(self) -> str:
        """Base URL that object keys are appended to."""
        if self.public_url:
            return self.public_url.rstrip('/')
        return f"{(self.endpoint or '').rstrip('/')}/{self.bucket}"
