"""
AssetExportService - Entry point for exporting, listing and deleting assets.
"""

import io
import logging
import re
import time
import zipfile
from typing import Callable, List, Optional, Sequence

from .asset_db import AssetDb
from .batch_exporter import BatchExporter
from .batch_result import BatchExportResult
from .exceptions import (
    AssetExportError,
    AssetNotFoundError,
    DesignFileNotFoundError,
    ExportFailedError,
    MetadataPersistError,
    StorageDeleteError,
)
from .export_request import CropArea, ExportRequest
from .export_settings import ExportSettings
from .exported_asset import ExportedAsset
from .image_loader import ImageLoader
from .image_processor import ImageProcessor, ProcessingOptions
from .image_result import ProcessedImageResult
from .rasterizer import PillowRasterizer
from .size_optimizer import SizeOptimizer


def sanitize_name(name: str) -> str:
    """Make an asset name safe for use in a storage key."""
    name = re.sub(r'\s+', '-', name.strip())
    name = re.sub(r'[^A-Za-z0-9._-]', '', name)
    return name or 'asset'


class AssetExportService:
    """
    Coordinates image processing, storage upload and metadata persistence.

    Holds no per-request state; callers may share or create instances
    freely. The storage object and the metadata row of an asset are
    created and destroyed only here, and kept in lockstep: a failed
    metadata insert removes the uploaded object again.
    """

    def __init__(
        self,
        storage,
        asset_db: AssetDb,
        processor: Optional[ImageProcessor] = None,
        optimizer: Optional[SizeOptimizer] = None,
        settings: Optional[ExportSettings] = None,
        clock: Callable[[], float] = time.time,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize export service.

        Args:
            storage: S3Client or LocalClient
            asset_db: Metadata store
            processor: Image processor (a default Pillow pipeline if omitted)
            optimizer: Size optimizer (built on processor if omitted)
            settings: Export settings
            clock: Returns the current time in seconds; used for storage keys
            logger: Optional logger instance
        """
        self.storage = storage
        self.asset_db = asset_db
        self.settings = settings or ExportSettings()
        self.logger = logger or logging.getLogger(__name__)
        self.processor = processor or ImageProcessor(logger=self.logger)
        self.optimizer = optimizer or SizeOptimizer(self.processor, logger=self.logger)
        self.clock = clock

    @classmethod
    def from_settings(
        cls,
        storage,
        asset_db: AssetDb,
        settings: ExportSettings,
        logger: Optional[logging.Logger] = None
    ) -> 'AssetExportService':
        """Build a service whose Pillow pipeline is tuned by settings."""
        logger = logger or logging.getLogger(__name__)
        processor = ImageProcessor(
            loader=ImageLoader(
                timeout=settings.fetch_timeout,
                user_agent=settings.user_agent,
                logger=logger
            ),
            rasterizer=PillowRasterizer(max_surface_pixels=settings.max_surface_pixels, logger=logger),
            logger=logger
        )
        return cls(storage, asset_db, processor=processor, settings=settings, logger=logger)

    def export_asset(self, request: ExportRequest) -> ExportedAsset:
        """
        Export one asset.

        Raises:
            InvalidRequestError: if the request is invalid (nothing done)
            DesignFileNotFoundError: if the design file does not exist
            ExportFailedError: if processing, upload or persistence fails
        """
        request.validate()
        project_id = self.resolve_project(request.design_file_id)

        self.logger.info(
            f"Exporting {request.name!r} as {request.format} @{request.scale}x "
            f"for design file {request.design_file_id}"
        )
        try:
            result = self.process(request)
            key = self.build_storage_key(project_id, request.name, request.scale, request.format)
            self.storage.upload_object(key, result.buffer, result.content_type)
            file_url = self.storage.get_public_url(key)
            asset = self.persist(request, project_id, result, key, file_url)
        except AssetExportError as e:
            self.logger.error(f"Asset export failed for {request.name!r}: {e}")
            raise ExportFailedError(e) from e

        self.logger.info(
            f"Exported {asset.id}: {asset.width}x{asset.height} {asset.format} "
            f"({asset.file_size_bytes} bytes) -> {asset.file_url}"
        )
        return asset

    def batch_export(
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
        Export every format x scale combination.

        Per-item failures are recorded in the result, never raised.
        """
        exporter = BatchExporter(self.export_asset, logger=self.logger)
        return exporter.run(
            design_file_id=design_file_id,
            source_image_url=source_image_url,
            base_name=base_name,
            formats=formats,
            scales=scales,
            quality=quality,
            crop_area=crop_area,
            created_by=created_by,
        )

    def get_exported_assets(self, design_file_id: str) -> List[ExportedAsset]:
        """Assets exported from a design file, newest first."""
        return self.asset_db.list_by_design_file(design_file_id)

    def get_project_assets(self, project_id: str) -> List[ExportedAsset]:
        """Assets exported within a project, newest first."""
        return self.asset_db.list_by_project(project_id)

    def delete_exported_asset(self, asset_id: str) -> None:
        """
        Delete an asset's storage object, then its metadata row.

        If the storage delete fails the row is kept, so the asset stays
        discoverable.

        Raises:
            AssetNotFoundError: if no such asset exists
            StorageDeleteError: if the object could not be removed
            MetadataPersistError: if the row could not be removed
        """
        asset = self.asset_db.get_asset(asset_id)
        if asset is None:
            raise AssetNotFoundError(f"Asset not found: {asset_id}")

        key = self.storage.key_from_url(asset.file_url)
        if key is None:
            self.logger.warning(
                f"Asset {asset_id} URL {asset.file_url} is not in managed storage; "
                f"removing metadata only"
            )
        else:
            self.storage.delete_object(key)

        if not self.asset_db.delete_asset(asset_id):
            raise AssetNotFoundError(f"Asset not found: {asset_id}")
        self.logger.info(f"Deleted asset {asset_id}")

    def download_assets_as_zip(self, asset_ids: Sequence[str]) -> bytes:
        """
        Bundle the binaries of several assets into one zip archive.

        Raises:
            AssetNotFoundError: if any id does not exist
        """
        assets = {asset.id: asset for asset in self.asset_db.get_assets(asset_ids)}
        missing = [asset_id for asset_id in asset_ids if asset_id not in assets]
        if missing:
            raise AssetNotFoundError(f"Assets not found: {', '.join(missing)}")

        output = io.BytesIO()
        used_names = set()
        with zipfile.ZipFile(output, 'w', zipfile.ZIP_DEFLATED) as archive:
            for asset_id in asset_ids:
                asset = assets[asset_id]
                key = self.storage.key_from_url(asset.file_url)
                if key is None:
                    raise AssetNotFoundError(f"Asset {asset_id} has no stored binary")
                archive.writestr(self._unique_name(asset, used_names), self.storage.download_object(key))
        return output.getvalue()

    def resolve_project(self, design_file_id: str) -> str:
        project_id = self.asset_db.get_project_id_for_design_file(design_file_id)
        if not project_id:
            raise DesignFileNotFoundError(f"Design file not found: {design_file_id}")
        return project_id

    def process(self, request: ExportRequest) -> ProcessedImageResult:
        """Render the request, falling back to the size optimizer when over budget."""
        options = ProcessingOptions(
            format=request.format,
            quality=request.quality,
            scale=request.scale,
        )
        source = self.processor.load_source(request.source_image_url)
        try:
            if request.crop_area is not None:
                options = options.with_changes(crop_area=request.crop_area)
            result = self.processor.render(source, options)

            if request.max_size_bytes and not result.fits(request.max_size_bytes):
                self.logger.info(
                    f"{result.size_bytes} bytes exceeds budget of {request.max_size_bytes}; optimizing"
                )
                result = self.optimizer.optimize_source(source, request.max_size_bytes, options)
        finally:
            source.close()
        return result

    def build_storage_key(self, project_id: str, name: str, scale, export_format: str) -> str:
        """Key of the form <prefix>/<project>/<millis>-<name>-<scale>x.<format>."""
        timestamp = int(self.clock() * 1000)
        filename = f"{sanitize_name(name)}-{scale}x.{export_format}"
        return f"{self.settings.key_prefix}/{project_id}/{timestamp}-{filename}"

    def persist(
        self,
        request: ExportRequest,
        project_id: str,
        result: ProcessedImageResult,
        key: str,
        file_url: str
    ) -> ExportedAsset:
        """Insert the metadata row; on failure remove the uploaded object."""
        try:
            return self.asset_db.insert_asset(
                design_file_id=request.design_file_id,
                project_id=project_id,
                name=request.name,
                export_format=request.format,
                scale=request.scale,
                width=result.width,
                height=result.height,
                file_size=result.size_bytes,
                file_url=file_url,
                created_by=request.created_by,
            )
        except Exception as e:
            self.logger.warning(f"Metadata insert failed, removing uploaded object {key}")
            try:
                self.storage.delete_object(key)
            except StorageDeleteError as cleanup_error:
                self.logger.critical(f"Rollback failed, orphaned object {key}: {cleanup_error}")
                raise MetadataPersistError(
                    f"{e}; rollback of {key} failed: {cleanup_error}",
                    orphaned_key=key
                ) from e
            if isinstance(e, MetadataPersistError):
                raise
            raise MetadataPersistError(f"Failed to insert asset record: {e}") from e

    @staticmethod
    def _unique_name(asset: ExportedAsset, used_names: set) -> str:
        name = asset.filename
        counter = 2
        while name in used_names:
            name = f"{asset.name}-{counter}.{asset.format}"
            counter += 1
        used_names.add(name)
        return name
