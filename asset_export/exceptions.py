"""
Exception hierarchy for the asset export pipeline.
"""

from typing import Optional


class AssetExportError(Exception):
    """Base exception for all asset export errors."""


# Input errors: raised before any processing begins.

class InvalidRequestError(AssetExportError, ValueError):
    """Raised when an export request fails validation."""


class InvalidCropAreaError(InvalidRequestError):
    """Raised when a crop rectangle is malformed or lies outside the source."""


class InvalidFormatError(InvalidRequestError):
    """Raised when an unsupported export format is requested."""


class InvalidScaleError(InvalidRequestError):
    """Raised when a resolution scale other than 1, 2 or 3 is requested."""


class InvalidQualityError(InvalidRequestError):
    """Raised when a quality value is outside 0.1-1.0."""


# Processing errors: fatal to the attempt they occur in.

class ImageProcessingError(AssetExportError):
    """Base exception for load/rasterize/encode failures."""


class ImageLoadError(ImageProcessingError):
    """Raised when the source image cannot be fetched or decoded."""


class SurfaceAllocationError(ImageProcessingError):
    """Raised when the target pixel surface cannot be allocated."""


class EncodingError(ImageProcessingError):
    """Raised when the encoder produces no data."""


# Persistence errors.

class PersistenceError(AssetExportError):
    """Base exception for storage and metadata failures."""


class StorageUploadError(PersistenceError):
    """Raised when an encoded asset cannot be uploaded."""


class StorageDeleteError(PersistenceError):
    """Raised when a stored object cannot be removed."""


class StorageReadError(PersistenceError):
    """Raised when a stored object cannot be downloaded."""


class MetadataPersistError(PersistenceError):
    """
    Raised when a metadata row cannot be written or deleted.

    Attributes:
        orphaned_key: Storage key left behind when the compensating
            delete also failed, otherwise None
    """

    def __init__(self, message: str, orphaned_key: Optional[str] = None):
        super().__init__(message)
        self.orphaned_key = orphaned_key


class MetadataQueryError(PersistenceError):
    """Raised when a metadata read fails."""


# Not-found errors: surfaced directly to the caller.

class NotFoundError(AssetExportError, LookupError):
    """Base exception for missing records."""


class DesignFileNotFoundError(NotFoundError):
    """Raised when a design file id does not resolve to a project."""


class AssetNotFoundError(NotFoundError):
    """Raised when an exported asset id does not exist."""


class ExportFailedError(AssetExportError):
    """
    Raised by a single export when any step after validation fails.

    Attributes:
        cause: The underlying AssetExportError
    """

    def __init__(self, cause: Exception):
        super().__init__(f"Asset export failed: {cause}")
        self.cause = cause
