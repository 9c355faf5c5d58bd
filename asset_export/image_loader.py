"""
ImageLoader - Fetches and decodes source images.
"""

import io
import logging
from typing import Optional
from urllib.parse import urlparse
from urllib.request import url2pathname

import urllib3
from PIL import Image, UnidentifiedImageError

from .exceptions import ImageLoadError


class ImageLoader:
    """
    Loads source images from http(s) URLs, file:// URLs or local paths.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: str = 'DesignHandoff/1.0',
        http: Optional[urllib3.PoolManager] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize image loader.

        Args:
            timeout: Total seconds allowed for one fetch
            user_agent: User-Agent header sent with requests
            http: Optional pool manager (a new one is created by default)
            logger: Optional logger instance
        """
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self.http = http or urllib3.PoolManager(
            timeout=urllib3.Timeout(total=timeout),
            headers={'User-Agent': user_agent},
            retries=False,
        )

    def load(self, url: str) -> Image.Image:
        """
        Fetch and decode an image.

        Returns:
            A fully loaded PIL image; the caller closes it

        Raises:
            ImageLoadError: if the image cannot be fetched or decoded
        """
        data = self.fetch(url)
        return self.decode(data, url)

    def fetch(self, url: str) -> bytes:
        """Fetch the raw bytes behind a URL or path."""
        parsed = urlparse(url)

        if parsed.scheme in ('http', 'https'):
            self.logger.debug(f"Fetching source image: {url}")
            try:
                response = self.http.request('GET', url, preload_content=True)
            except urllib3.exceptions.HTTPError as e:
                raise ImageLoadError(f"Failed to load image {url}: {e}") from e
            if not 200 <= response.status < 300:
                raise ImageLoadError(
                    f"Failed to load image {url}: HTTP {response.status}"
                )
            return response.data

        if parsed.scheme == 'file':
            path = url2pathname(parsed.path)
        elif parsed.scheme == '':
            path = url
        else:
            raise ImageLoadError(f"Unsupported image URL scheme: {parsed.scheme!r}")

        try:
            with open(path, 'rb') as f:
                return f.read()
        except OSError as e:
            raise ImageLoadError(f"Failed to load image {url}: {e}") from e

    def decode(self, data: bytes, url: str = '<bytes>') -> Image.Image:
        """Decode image bytes into a loaded PIL image."""
        if not data:
            raise ImageLoadError(f"Failed to load image {url}: empty response")
        try:
            img = Image.open(io.BytesIO(data))
            img.load()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError) as e:
            raise ImageLoadError(f"Failed to decode image {url}: {e}") from e
        return img
