"""
ImageProcessor - Load, rasterize and encode one export variant.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional

from PIL import Image

from .dimensions import compute_dimensions
from .encoder import FormatEncoder
from .exceptions import ImageProcessingError
from .export_request import CropArea
from .formats import DEFAULT_QUALITY
from .image_loader import ImageLoader
from .image_result import ProcessedImageResult
from .rasterizer import PillowRasterizer, Rasterizer


@dataclass(frozen=True)
class ProcessingOptions:
    """
    Options for one rasterize+encode pass.

    Attributes:
        format: Export format
        quality: Lossy quality, None means the default 0.9
        scale: Resolution multiplier; fractional values are used by the optimizer
        crop_area: Optional source region
        width: Optional target width constraint
        height: Optional target height constraint
    """
    format: str
    quality: Optional[float] = None
    scale: float = 1
    crop_area: Optional[CropArea] = None
    width: Optional[int] = None
    height: Optional[int] = None

    def with_changes(self, **changes) -> 'ProcessingOptions':
        return replace(self, **changes)


def _prefixed(error: ImageProcessingError) -> ImageProcessingError:
    """Re-create a processing error with the operation prefix."""
    prefixed = type(error)(f"Image processing failed: {error}")
    prefixed.__cause__ = error
    return prefixed


class ImageProcessor:
    """
    Runs the dimension calculator, rasterizer and encoder for one variant.
    """

    def __init__(
        self,
        loader: Optional[ImageLoader] = None,
        rasterizer: Optional[Rasterizer] = None,
        encoder: Optional[FormatEncoder] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.logger = logger or logging.getLogger(__name__)
        self.loader = loader or ImageLoader(logger=self.logger)
        self.rasterizer = rasterizer or PillowRasterizer(logger=self.logger)
        self.encoder = encoder or FormatEncoder(logger=self.logger)

    def load_source(self, source_image_url: str) -> Image.Image:
        """Load the source image; the caller closes it."""
        try:
            return self.loader.load(source_image_url)
        except ImageProcessingError as e:
            raise _prefixed(e) from e

    def process(self, source_image_url: str, options: ProcessingOptions) -> ProcessedImageResult:
        """Load the source and render one variant."""
        source = self.load_source(source_image_url)
        try:
            return self.render(source, options)
        finally:
            source.close()

    def render(self, source: Image.Image, options: ProcessingOptions) -> ProcessedImageResult:
        """
        Rasterize and encode an already loaded source.

        Target dimensions derive from the (clamped) crop region when one
        is given, otherwise from the full source size.
        """
        quality = options.quality if options.quality is not None else DEFAULT_QUALITY
        try:
            region = self.rasterizer.source_region(source, options.crop_area)
            if region is not None:
                dims = compute_dimensions(region.width, region.height, scale=options.scale)
            else:
                dims = compute_dimensions(
                    source.width, source.height,
                    options.width, options.height,
                    options.scale
                )

            surface = self.rasterizer.rasterize(source, region, dims)
            try:
                buffer, size_bytes = self.encoder.encode(surface, options.format, quality)
            finally:
                surface.close()
        except ImageProcessingError as e:
            raise _prefixed(e) from e

        self.logger.debug(
            f"Rendered {options.format} {dims[0]}x{dims[1]} "
            f"scale={options.scale} quality={quality}: {size_bytes} bytes"
        )
        return ProcessedImageResult(
            buffer=buffer,
            width=dims[0],
            height=dims[1],
            format=options.format,
            size_bytes=size_bytes,
            quality=quality,
            scale=options.scale,
        )
