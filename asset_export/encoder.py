"""
FormatEncoder - Serializes a pixel surface into an export format.
"""

import base64
import io
import logging
from typing import Optional, Tuple

from PIL import Image

from .exceptions import EncodingError, InvalidFormatError
from .formats import DEFAULT_QUALITY, JPG, PNG, SVG, WEBP

SVG_TEMPLATE = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<svg xmlns="http://www.w3.org/2000/svg" '
    'xmlns:xlink="http://www.w3.org/1999/xlink" version="1.1" '
    'width="{width}" height="{height}" viewBox="0 0 {width} {height}">'
    '<image width="{width}" height="{height}" '
    'href="data:image/png;base64,{data}" xlink:href="data:image/png;base64,{data}"/>'
    '</svg>\n'
)


class FormatEncoder:
    """
    Encodes surfaces as PNG, JPEG, WebP or an SVG wrapper.

    Quality (0.1-1.0) applies to jpg and webp only.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def encode(
        self,
        surface: Image.Image,
        export_format: str,
        quality: Optional[float] = None
    ) -> Tuple[bytes, int]:
        """
        Encode a surface.

        Args:
            surface: Rendered image
            export_format: png, jpg, webp or svg
            quality: Lossy quality, defaults to 0.9

        Returns:
            Tuple of (buffer, size_bytes)

        Raises:
            EncodingError: if the encoder produced no data
        """
        if export_format not in (PNG, JPG, WEBP, SVG):
            raise InvalidFormatError(f"Unsupported export format: {export_format!r}")
        if quality is None:
            quality = DEFAULT_QUALITY

        try:
            if export_format == PNG:
                data = self._save(surface, 'PNG', optimize=True)
            elif export_format == JPG:
                data = self._save(
                    self._flatten(surface), 'JPEG',
                    quality=self._pil_quality(quality), optimize=True
                )
            elif export_format == WEBP:
                data = self._save(surface, 'WEBP', quality=self._pil_quality(quality))
            else:
                data = self._wrap_svg(surface)
        except (OSError, KeyError, ValueError) as e:
            raise EncodingError(f"Failed to encode surface as {export_format}: {e}") from e

        if not data:
            raise EncodingError(f"Failed to encode surface as {export_format}: no data")
        return data, len(data)

    @staticmethod
    def _save(img: Image.Image, pil_format: str, **params) -> bytes:
        output = io.BytesIO()
        img.save(output, format=pil_format, **params)
        return output.getvalue()

    @staticmethod
    def _pil_quality(quality: float) -> int:
        """Map 0.1-1.0 onto Pillow's 1-100 scale."""
        return max(1, min(100, int(round(quality * 100))))

    @staticmethod
    def _flatten(img: Image.Image) -> Image.Image:
        """Composite transparency onto white; JPEG has no alpha channel."""
        if img.mode == 'RGBA':
            background = Image.new('RGB', img.size, (255, 255, 255))
            background.paste(img, mask=img.split()[-1])
            return background
        if img.mode != 'RGB':
            return img.convert('RGB')
        return img

    def _wrap_svg(self, img: Image.Image) -> bytes:
        """Embed a lossless PNG rendition in a minimal SVG document."""
        png = self._save(img, 'PNG', optimize=True)
        width, height = img.size
        document = SVG_TEMPLATE.format(
            width=width,
            height=height,
            data=base64.b64encode(png).decode('ascii'),
        )
        return document.encode('utf-8')
