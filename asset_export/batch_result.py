"""
Batch export configuration and aggregated results.
"""

from dataclasses import dataclass, field
from typing import List

from .exported_asset import ExportedAsset


@dataclass(frozen=True)
class BatchExportConfig:
    """One (format, scale) pair of a cartesian batch."""
    format: str
    scale: int

    def to_dict(self) -> dict:
        return {'format': self.format, 'scale': self.scale}


@dataclass(frozen=True)
class BatchFailure:
    """A configuration that failed and why."""
    config: BatchExportConfig
    error_message: str

    def to_dict(self) -> dict:
        return {'config': self.config.to_dict(), 'error': self.error_message}


@dataclass
class BatchExportResult:
    """
    Outcome of a batch export.

    Attributes:
        successful: Assets exported, in cartesian order
        failed: Failed configurations, in cartesian order
        total_processed: Number of configurations attempted
        total_successful: Number of successes
        total_failed: Number of failures
    """
    successful: List[ExportedAsset] = field(default_factory=list)
    failed: List[BatchFailure] = field(default_factory=list)
    total_processed: int = 0
    total_successful: int = 0
    total_failed: int = 0

    def add_success(self, asset: ExportedAsset) -> None:
        self.successful.append(asset)
        self.total_successful += 1

    def add_failure(self, config: BatchExportConfig, error_message: str) -> None:
        self.failed.append(BatchFailure(config=config, error_message=error_message))
        self.total_failed += 1

    @property
    def all_succeeded(self) -> bool:
        return self.total_failed == 0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'successful': [asset.to_dict() for asset in self.successful],
            'failed': [failure.to_dict() for failure in self.failed],
            'totalProcessed': self.total_processed,
            'totalSuccessful': self.total_successful,
            'totalFailed': self.total_failed,
        }
