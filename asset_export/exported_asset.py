"""
ExportedAsset - Persisted metadata for one exported asset.
"""

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Optional

TIME_FORMAT = "%Y-%m-%dT%H:%M:%S"


@dataclass(frozen=True)
class ExportedAsset:
    """
    Metadata row for an exported asset.

    The binary lives in object storage at the key derived from file_url.

    Attributes:
        id: Generated asset id
        design_file_id: Source design file
        project_id: Owning project
        name: Asset name
        format: Export format
        scale: Resolution scale
        width: Pixel width
        height: Pixel height
        file_size_bytes: Encoded size in bytes
        file_url: Public URL of the stored binary
        created_by: User who requested the export
        created_at: Creation timestamp assigned by the database
    """
    id: str
    design_file_id: str
    project_id: str
    name: str
    format: str
    scale: float
    width: int
    height: int
    file_size_bytes: int
    file_url: str
    created_by: Optional[str]
    created_at: Optional[datetime]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        if self.created_at is not None:
            data['created_at'] = self.created_at.strftime(TIME_FORMAT)
        return data

    @classmethod
    def from_row(cls, row: dict) -> 'ExportedAsset':
        """Create from an exported_assets row."""
        return cls(
            id=row['id'],
            design_file_id=row['design_file_id'],
            project_id=row['project_id'],
            name=row['name'],
            format=row['format'],
            scale=_normalize_scale(row['scale']),
            width=row['width'],
            height=row['height'],
            file_size_bytes=row['file_size'],
            file_url=row['file_url'],
            created_by=row.get('created_by'),
            created_at=row.get('created_at'),
        )

    @property
    def filename(self) -> str:
        return f"{self.name}.{self.format}"


def _normalize_scale(value) -> float:
    """DECIMAL columns come back as Decimal; whole scales become int."""
    scale = float(value)
    return int(scale) if scale.is_integer() else scale
