"""
Export formats, MIME types and resolution scales.
"""

from typing import Dict, FrozenSet

from .exceptions import InvalidFormatError, InvalidScaleError

PNG = 'png'
JPG = 'jpg'
WEBP = 'webp'
SVG = 'svg'

EXPORT_FORMATS = (PNG, JPG, WEBP, SVG)

MIME_TYPES: Dict[str, str] = {
    PNG: 'image/png',
    JPG: 'image/jpeg',
    WEBP: 'image/webp',
    SVG: 'image/svg+xml',
}

# Formats whose encoder takes a quality parameter
LOSSY_FORMATS: FrozenSet[str] = frozenset({JPG, WEBP})

RESOLUTION_SCALES = (1, 2, 3)

DEFAULT_QUALITY = 0.9
MIN_QUALITY = 0.1
MAX_QUALITY = 1.0


def get_mime_type(export_format: str) -> str:
    """Get the encoder MIME type for an export format."""
    try:
        return MIME_TYPES[export_format]
    except KeyError:
        raise InvalidFormatError(f"Unsupported export format: {export_format!r}")


def validate_format(export_format) -> str:
    """Return the format if supported, else raise InvalidFormatError."""
    if export_format not in MIME_TYPES:
        raise InvalidFormatError(
            f"Unsupported export format: {export_format!r} "
            f"(expected one of {', '.join(EXPORT_FORMATS)})"
        )
    return export_format


def validate_scale(scale) -> int:
    """Return the scale if it is a user-selectable one, else raise InvalidScaleError."""
    if isinstance(scale, bool) or scale not in RESOLUTION_SCALES:
        raise InvalidScaleError(
            f"Unsupported resolution scale: {scale!r} (expected 1, 2 or 3)"
        )
    return int(scale)
