"""
Rasterizer - Renders a source image (or a region of it) onto a new surface.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Tuple

from PIL import Image

from .exceptions import ImageLoadError, InvalidCropAreaError, SurfaceAllocationError
from .export_request import CropArea


class Rasterizer(ABC):
    """
    Renders source pixels onto a freshly allocated surface.

    Every call returns a new surface; the caller closes it once encoded.
    """

    def source_region(self, source: Image.Image, crop_area: Optional[CropArea]) -> Optional[CropArea]:
        """
        Clamp a crop rectangle to the source bounds.

        Returns:
            None when no crop is requested, else the clamped rectangle

        Raises:
            InvalidCropAreaError: if the rectangle lies entirely outside the source
        """
        if crop_area is None:
            return None
        width, height = source.size
        region = crop_area.clamp(width, height)
        if region is None:
            raise InvalidCropAreaError(
                f"Crop area {crop_area.box} lies outside the {width}x{height} source"
            )
        return region

    @abstractmethod
    def rasterize(
        self,
        source: Image.Image,
        crop_area: Optional[CropArea],
        target_dims: Tuple[int, int]
    ) -> Image.Image:
        """Draw the source (or crop_area of it) scaled to exactly target_dims."""


class PillowRasterizer(Rasterizer):
    """
    Rasterizer backed by Pillow's resampling resize.
    """

    RESAMPLE = Image.Resampling.LANCZOS

    def __init__(
        self,
        max_surface_pixels: int = 100_000_000,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize rasterizer.

        Args:
            max_surface_pixels: Refuse to allocate surfaces larger than this
            logger: Optional logger instance
        """
        self.max_surface_pixels = max_surface_pixels
        self.logger = logger or logging.getLogger(__name__)

    def rasterize(
        self,
        source: Image.Image,
        crop_area: Optional[CropArea],
        target_dims: Tuple[int, int]
    ) -> Image.Image:
        width, height = target_dims
        if width < 1 or height < 1:
            raise SurfaceAllocationError(f"Cannot allocate a {width}x{height} surface")
        if width * height > self.max_surface_pixels:
            raise SurfaceAllocationError(
                f"Surface {width}x{height} exceeds the {self.max_surface_pixels} pixel limit"
            )

        region = self.source_region(source, crop_area)
        image = self._convert_color_mode(source)
        box = region.box if region is not None else None

        self.logger.debug(f"Rasterizing {image.size} region={box} -> {width}x{height}")
        try:
            return image.resize((width, height), self.RESAMPLE, box=box)
        except MemoryError as e:
            raise SurfaceAllocationError(f"Out of memory allocating {width}x{height} surface") from e
        except ValueError as e:
            raise SurfaceAllocationError(f"Could not render {width}x{height} surface: {e}") from e
        finally:
            # Mode conversion allocated a copy of the source
            if image is not source:
                image.close()

    def _convert_color_mode(self, img: Image.Image) -> Image.Image:
        """Convert to RGB or RGBA so resampling is never nearest-neighbour."""
        if img.mode in ('RGB', 'RGBA'):
            return img
        try:
            if img.mode in ('LA', 'PA', 'RGBa', 'La'):
                return img.convert('RGBA')
            if img.mode == 'P':
                return img.convert('RGBA' if 'transparency' in img.info else 'RGB')
            return img.convert('RGB')
        except (ValueError, OSError) as e:
            raise ImageLoadError(f"Unsupported image mode {img.mode}: {e}") from e
