"""
Storage client selection.
"""

import logging
import os
from typing import Optional, Union

from .local_client import LocalClient, LocalConfig
from .s3_client import S3Client
from .s3_config import S3Config

StorageClient = Union[S3Client, LocalClient]


def create_storage_client(
    local_root: Optional[str] = None,
    local_prefix: str = '',
    local_public_url: Optional[str] = None,
    s3_config: Optional[S3Config] = None,
    logger: Optional[logging.Logger] = None
) -> StorageClient:
    """
    Get the local filesystem client if local_root is given, else S3.

    Raises:
        ValueError: if the chosen configuration is invalid
    """
    logger = logger or logging.getLogger(__name__)

    if local_root:
        config = LocalConfig(root_path=local_root, prefix=local_prefix, public_base_url=local_public_url)
        client_cls = LocalClient
    else:
        config = s3_config or S3Config.from_env()
        client_cls = S3Client

    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(error)
        raise ValueError(f"{client_cls.__name__} configuration invalid")

    return client_cls(config, logger)


def storage_client_from_env(logger: Optional[logging.Logger] = None) -> StorageClient:
    """Choose storage from LOCAL_STORAGE_* or S3_* environment variables."""
    return create_storage_client(
        local_root=os.getenv('LOCAL_STORAGE_ROOT'),
        local_prefix=os.getenv('LOCAL_STORAGE_PREFIX', ''),
        local_public_url=os.getenv('LOCAL_STORAGE_PUBLIC_URL'),
        logger=logger,
    )
