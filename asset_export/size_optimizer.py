"""
SizeOptimizer - Shrinks an export until it fits a byte budget.
"""

import logging
from typing import Optional

from PIL import Image

from .formats import DEFAULT_QUALITY
from .image_processor import ImageProcessor, ProcessingOptions
from .image_result import ProcessedImageResult

# Tolerance for comparing stepped floats against their floors
EPSILON = 1e-9


class SizeOptimizer:
    """
    Bounded, monotonic search over quality and then scale.

    Quality is lowered in 0.1 steps while above 0.1; if that does not
    meet the budget, scale is lowered in 0.1 steps (at quality 0.8) while
    above 0.5. If neither phase fits, a final quality 0.1 / scale 0.5
    variant is returned whether or not it fits.
    """

    QUALITY_STEP = 0.1
    MIN_QUALITY = 0.1
    SCALE_STEP = 0.1
    MIN_SCALE = 0.5
    SCALE_PHASE_QUALITY = 0.8

    def __init__(
        self,
        processor: ImageProcessor,
        logger: Optional[logging.Logger] = None
    ):
        self.processor = processor
        self.logger = logger or logging.getLogger(__name__)

    def optimize_to_size(
        self,
        source_image_url: str,
        max_size_bytes: int,
        options: ProcessingOptions
    ) -> ProcessedImageResult:
        """
        Find the first variant whose encoded size is within max_size_bytes.

        The source is fetched once and re-rendered for every attempt.

        Returns:
            The first fitting variant, else the quality 0.1 / scale 0.5 floor
        """
        source = self.processor.load_source(source_image_url)
        try:
            return self.optimize_source(source, max_size_bytes, options)
        finally:
            source.close()

    def optimize_source(
        self,
        source: Image.Image,
        max_size_bytes: int,
        options: ProcessingOptions
    ) -> ProcessedImageResult:
        """Run the search against an already loaded source."""
        quality = options.quality if options.quality is not None else DEFAULT_QUALITY
        scale = options.scale
        attempts = 0

        while quality > self.MIN_QUALITY + EPSILON:
            result = self.processor.render(source, options.with_changes(quality=quality))
            attempts += 1
            self._log_attempt(attempts, result, max_size_bytes)
            if result.fits(max_size_bytes):
                return result
            quality = round(quality - self.QUALITY_STEP, 2)

        while scale > self.MIN_SCALE + EPSILON:
            scale = round(scale - self.SCALE_STEP, 2)
            result = self.processor.render(
                source,
                options.with_changes(quality=self.SCALE_PHASE_QUALITY, scale=scale)
            )
            attempts += 1
            self._log_attempt(attempts, result, max_size_bytes)
            if result.fits(max_size_bytes):
                return result

        result = self.processor.render(
            source,
            options.with_changes(quality=self.MIN_QUALITY, scale=self.MIN_SCALE)
        )
        self.logger.warning(
            f"Size budget {max_size_bytes} bytes not met after {attempts} attempts; "
            f"returning floor variant ({result.size_bytes} bytes)"
        )
        return result

    def _log_attempt(self, attempt: int, result: ProcessedImageResult, max_size_bytes: int) -> None:
        self.logger.debug(
            f"Optimize attempt {attempt}: quality={result.quality} scale={result.scale} "
            f"-> {result.size_bytes}/{max_size_bytes} bytes"
        )
