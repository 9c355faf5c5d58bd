"""
BatchExporter - Runs a cartesian product of export configurations.
"""

import logging
import time
from typing import Callable, List, Optional, Sequence

from .batch_result import BatchExportConfig, BatchExportResult
from .exceptions import InvalidRequestError
from .export_request import CropArea, ExportRequest, validate_quality
from .exported_asset import ExportedAsset
from .formats import validate_format, validate_scale


class BatchExporter:
    """
    Exports every (format, scale) pair one at a time, in order.

    A failing configuration is recorded and the batch moves on.
    """

    def __init__(
        self,
        export_fn: Callable[[ExportRequest], ExportedAsset],
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize batch exporter.

        Args:
            export_fn: Single-export entry point called for each configuration
            logger: Optional logger instance
        """
        self.export_fn = export_fn
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def build_configs(formats: Sequence[str], scales: Sequence[int]) -> List[BatchExportConfig]:
        """Cartesian product, format-major and scale-minor."""
        return [
            BatchExportConfig(format=export_format, scale=scale)
            for export_format in formats
            for scale in scales
        ]

    @staticmethod
    def export_name(base_name: str, scale: int) -> str:
        return f"{base_name}-{scale}x"

    def validate(
        self,
        base_name: str,
        formats: Sequence[str],
        scales: Sequence[int],
        quality: Optional[float],
        crop_area: Optional[CropArea]
    ) -> None:
        """Reject request-level errors before any configuration runs."""
        if not base_name or not str(base_name).strip():
            raise InvalidRequestError("base_name must not be empty")
        if not formats:
            raise InvalidRequestError("At least one format is required")
        if not scales:
            raise InvalidRequestError("At least one scale is required")
        for export_format in formats:
            validate_format(export_format)
        for scale in scales:
            validate_scale(scale)
        validate_quality(quality)
        if crop_area is not None:
            crop_area.validate()

    def run(
        self,
        design_file_id: str,
        source_image_url: str,
        base_name: str,
        formats: Sequence[str],
        scales: Sequence[int],
        quality: Optional[float] = None,
        crop_area: Optional[CropArea] = None,
        created_by: Optional[str] = None
    ) -> BatchExportResult:
        """
        Export every configuration and aggregate the outcome.

        Raises:
            InvalidRequestError: for request-level validation errors only
        """
        self.validate(base_name, formats, scales, quality, crop_area)
        scales = [validate_scale(scale) for scale in scales]

        configs = self.build_configs(formats, scales)
        result = BatchExportResult(total_processed=len(configs))
        start_time = time.time()

        self.logger.info(
            f"Starting batch export of {base_name}: {len(configs)} configurations "
            f"({len(formats)} formats x {len(scales)} scales)"
        )

        for index, config in enumerate(configs, start=1):
            request = ExportRequest(
                design_file_id=design_file_id,
                source_image_url=source_image_url,
                name=self.export_name(base_name, config.scale),
                format=config.format,
                scale=config.scale,
                quality=quality,
                crop_area=crop_area,
                created_by=created_by,
            )
            try:
                asset = self.export_fn(request)
            except Exception as e:
                self.logger.error(
                    f"Batch item {index}/{len(configs)} ({config.format} @{config.scale}x) failed: {e}"
                )
                result.add_failure(config, str(e))
                continue

            result.add_success(asset)
            self.logger.info(
                f"Batch item {index}/{len(configs)} ({config.format} @{config.scale}x) "
                f"exported: {asset.file_size_bytes} bytes"
            )

        self.logger.info(
            f"Batch export complete: {result.total_successful} exported, "
            f"{result.total_failed} failed ({time.time() - start_time:.1f}s)"
        )
        return result
