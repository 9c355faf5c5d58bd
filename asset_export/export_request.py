"""
ExportRequest - Parameters for a single asset export.
"""

import math
from dataclasses import dataclass, asdict
from typing import Optional, Tuple

from .exceptions import InvalidCropAreaError, InvalidQualityError, InvalidRequestError
from .formats import MAX_QUALITY, MIN_QUALITY, validate_format, validate_scale


@dataclass(frozen=True)
class CropArea:
    """
    Rectangle in source-pixel coordinates.

    Attributes:
        x: Left edge
        y: Top edge
        width: Width, must be positive
        height: Height, must be positive
    """
    x: float
    y: float
    width: float
    height: float

    def validate(self) -> None:
        """Raise InvalidCropAreaError unless x,y >= 0 and width,height > 0."""
        for name in ('x', 'y', 'width', 'height'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidCropAreaError(f"Crop {name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise InvalidCropAreaError(f"Crop {name} must be finite, got {value!r}")
        if self.x < 0 or self.y < 0:
            raise InvalidCropAreaError(
                f"Crop origin must not be negative: ({self.x}, {self.y})"
            )
        if self.width <= 0 or self.height <= 0:
            raise InvalidCropAreaError(
                f"Crop size must be positive: {self.width}x{self.height}"
            )

    @property
    def box(self) -> Tuple[float, float, float, float]:
        """(left, upper, right, lower) box."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)

    def clamp(self, source_width: int, source_height: int) -> Optional['CropArea']:
        """
        Intersect with the source bounds.

        Returns:
            The clamped rectangle, or None if nothing of it lies inside the source
        """
        left = min(max(self.x, 0), source_width)
        upper = min(max(self.y, 0), source_height)
        right = min(self.x + self.width, source_width)
        lower = min(self.y + self.height, source_height)
        if right <= left or lower <= upper:
            return None
        return CropArea(x=left, y=upper, width=right - left, height=lower - upper)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'CropArea':
        try:
            return cls(
                x=data['x'],
                y=data['y'],
                width=data['width'],
                height=data['height'],
            )
        except (KeyError, TypeError) as e:
            raise InvalidCropAreaError(f"Malformed crop area: {data!r}") from e


def validate_quality(quality: Optional[float]) -> None:
    """Raise InvalidQualityError unless quality is None or within 0.1-1.0."""
    if quality is None:
        return
    if isinstance(quality, bool) or not isinstance(quality, (int, float)):
        raise InvalidQualityError(f"Quality must be a number, got {quality!r}")
    if not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise InvalidQualityError(
            f"Quality must be between {MIN_QUALITY} and {MAX_QUALITY}, got {quality}"
        )


@dataclass(frozen=True)
class ExportRequest:
    """
    Parameters for exporting one asset from a design file preview.

    Attributes:
        design_file_id: Design file the asset is derived from
        source_image_url: URL (or local path) of the source raster
        name: Human-readable asset name, also used in the storage key
        format: One of png, jpg, webp, svg
        scale: Resolution multiplier, 1, 2 or 3
        quality: Optional 0.1-1.0 quality for lossy formats
        crop_area: Optional sub-region of the source
        max_size_bytes: Optional byte budget for the encoded asset
        created_by: Optional id of the requesting user
    """
    design_file_id: str
    source_image_url: str
    name: str
    format: str
    scale: int = 1
    quality: Optional[float] = None
    crop_area: Optional[CropArea] = None
    max_size_bytes: Optional[int] = None
    created_by: Optional[str] = None

    def __post_init__(self):
        # 2.0 from a JSON payload names the same scale as 2
        if isinstance(self.scale, float) and self.scale.is_integer():
            object.__setattr__(self, 'scale', int(self.scale))

    def validate(self) -> None:
        """Raise an InvalidRequestError subclass if any field is invalid."""
        if not self.design_file_id:
            raise InvalidRequestError("design_file_id is required")
        if not self.source_image_url:
            raise InvalidRequestError("source_image_url is required")
        if not self.name or not str(self.name).strip():
            raise InvalidRequestError("name must not be empty")
        validate_format(self.format)
        validate_scale(self.scale)
        validate_quality(self.quality)
        if self.crop_area is not None:
            self.crop_area.validate()
        if self.max_size_bytes is not None:
            if isinstance(self.max_size_bytes, bool) or not isinstance(self.max_size_bytes, (int, float)) \
                    or not math.isfinite(self.max_size_bytes) or self.max_size_bytes <= 0:
                raise InvalidRequestError(
                    f"max_size_bytes must be a positive number, got {self.max_size_bytes!r}"
                )

    @classmethod
    def from_dict(cls, data: dict) -> 'ExportRequest':
        """
        Build a request from a JSON-style payload.

        Accepts camelCase keys (designFileId, imageUrl, cropArea, maxSizeKB)
        as well as the snake_case field names.
        """
        crop = _get(data, 'crop_area', 'cropArea')
        max_size_bytes = _get(data, 'max_size_bytes', 'maxSizeBytes')
        max_size_kb = data.get('maxSizeKB')
        if max_size_bytes is None and max_size_kb is not None:
            if isinstance(max_size_kb, bool) or not isinstance(max_size_kb, (int, float)) \
                    or not math.isfinite(max_size_kb):
                raise InvalidRequestError(f"maxSizeKB must be a finite number, got {max_size_kb!r}")
            max_size_bytes = int(max_size_kb * 1024)

        scale = data.get('scale')
        return cls(
            design_file_id=_get(data, 'design_file_id', 'designFileId'),
            source_image_url=_get(data, 'source_image_url', 'sourceImageUrl', 'imageUrl'),
            name=data.get('name'),
            format=data.get('format'),
            scale=1 if scale is None else scale,
            quality=data.get('quality'),
            crop_area=CropArea.from_dict(crop) if crop is not None else None,
            max_size_bytes=max_size_bytes,
            created_by=_get(data, 'created_by', 'createdBy'),
        )


def _get(data: dict, *keys):
    """Return the first present key's value."""
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None
