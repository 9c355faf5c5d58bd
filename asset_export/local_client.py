"""
LocalClient - Filesystem storage for exported assets.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote, unquote

from .exceptions import StorageDeleteError, StorageReadError, StorageUploadError


@dataclass
class LocalConfig:
    """
    Local filesystem storage configuration.

    Attributes:
        root_path: Directory assets are stored under
        prefix: Sub-directory inside root_path
        public_base_url: Optional base URL the directory is served from;
            file:// URLs are used when unset
    """
    root_path: str
    prefix: str = ''
    public_base_url: Optional[str] = None

    def validate(self) -> List[str]:
        """Return a list of configuration errors (empty if valid)."""
        errors = []
        if not self.root_path:
            errors.append("Local root path is not set")
        elif not os.path.isdir(self.root_path):
            errors.append(f"Local root path does not exist: {self.root_path}")
        return errors

    @property
    def base_dir(self) -> Path:
        return Path(self.root_path, self.prefix.strip('/')) if self.prefix else Path(self.root_path)


class LocalClient:
    """
    Stores exported assets as files; same interface as S3Client.
    """

    def __init__(self, config: LocalConfig, logger: Optional[logging.Logger] = None):
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

    def path_for(self, key: str) -> Path:
        """Filesystem path for a relative key."""
        base = self.config.base_dir.resolve()
        path = (base / key.lstrip('/')).resolve()
        if base != path and base not in path.parents:
            raise ValueError(f"Key escapes storage root: {key}")
        return path

    def object_exists(self, key: str) -> bool:
        return self.path_for(key).is_file()

    def download_object(self, key: str) -> bytes:
        try:
            return self.path_for(key).read_bytes()
        except (OSError, ValueError) as e:
            raise StorageReadError(f"Failed to read {key}: {e}") from e

    def upload_object(
        self,
        key: str,
        data: bytes,
        content_type: str = 'application/octet-stream'
    ) -> None:
        """Write an object; content_type is not stored on the filesystem."""
        self.logger.debug(f"Writing {len(data)} bytes to {key}")
        try:
            path = self.path_for(key)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except (OSError, ValueError) as e:
            raise StorageUploadError(f"Failed to write {key}: {e}") from e

    def delete_object(self, key: str) -> None:
        """Delete an object. Deleting a missing key is not an error."""
        self.logger.debug(f"Deleting {key}")
        try:
            self.path_for(key).unlink()
        except FileNotFoundError:
            self.logger.info(f"Object already absent: {key}")
        except (OSError, ValueError) as e:
            raise StorageDeleteError(f"Failed to delete {key}: {e}") from e

    def get_public_url(self, key: str) -> str:
        if self.config.public_base_url:
            base = self.config.public_base_url.rstrip('/')
            prefix = self.config.prefix.strip('/')
            rel = f"{prefix}/{key.lstrip('/')}" if prefix else key.lstrip('/')
            return f"{base}/{quote(rel)}"
        return self.path_for(key).as_uri()

    def key_from_url(self, url: str) -> Optional[str]:
        """Invert get_public_url; None if the URL is not under this store."""
        if self.config.public_base_url:
            base = self.config.public_base_url.rstrip('/') + '/'
            if not url.startswith(base):
                return None
            rel = unquote(url[len(base):])
            prefix = self.config.prefix.strip('/')
            if prefix:
                if not rel.startswith(f"{prefix}/"):
                    return None
                rel = rel[len(prefix) + 1:]
            return rel or None

        base_uri = self.config.base_dir.resolve().as_uri() + '/'
        if not url.startswith(base_uri):
            return None
        return unquote(url[len(base_uri):]) or None
