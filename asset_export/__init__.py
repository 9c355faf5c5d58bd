"""
Design asset export package

Derives image assets from design file previews:
    1. Process: scale and/or crop the source and encode it (png, jpg, webp, svg)
    2. Optimize: shrink quality, then scale, to meet an optional byte budget
    3. Store: upload the binary and record its metadata, rolling back on failure

Batches export every format x scale combination, isolating failures.
Supports both S3 and local filesystem storage.
"""

__version__ = "1.0.0"

from .dimensions import compute_dimensions
from .exceptions import (
    AssetExportError,
    InvalidRequestError,
    ImageProcessingError,
    PersistenceError,
    NotFoundError,
    ExportFailedError,
)
from .export_request import CropArea, ExportRequest
from .image_result import ProcessedImageResult
from .exported_asset import ExportedAsset
from .batch_result import BatchExportConfig, BatchExportResult
from .image_loader import ImageLoader
from .rasterizer import Rasterizer, PillowRasterizer
from .encoder import FormatEncoder
from .image_processor import ImageProcessor, ProcessingOptions
from .size_optimizer import SizeOptimizer
from .batch_exporter import BatchExporter
from .s3_config import S3Config
from .s3_client import S3Client
from .local_client import LocalConfig, LocalClient
from .db_config import DbConfig
from .asset_db import AssetDb
from .export_settings import ExportSettings
from .export_service import AssetExportService

__all__ = [
    "compute_dimensions",
    "AssetExportError",
    "InvalidRequestError",
    "ImageProcessingError",
    "PersistenceError",
    "NotFoundError",
    "ExportFailedError",
    "CropArea",
    "ExportRequest",
    "ProcessedImageResult",
    "ExportedAsset",
    "BatchExportConfig",
    "BatchExportResult",
    "ImageLoader",
    "Rasterizer",
    "PillowRasterizer",
    "FormatEncoder",
    "ImageProcessor",
    "ProcessingOptions",
    "SizeOptimizer",
    "BatchExporter",
    "S3Config",
    "S3Client",
    "LocalConfig",
    "LocalClient",
    "DbConfig",
    "AssetDb",
    "ExportSettings",
    "AssetExportService",
]
