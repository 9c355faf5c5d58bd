"""
ExportSettings - Tunables for the export pipeline.
"""

import os
from dataclasses import dataclass


@dataclass
class ExportSettings:
    """
    Export pipeline settings.

    Attributes:
        key_prefix: Storage key namespace for exported assets
        fetch_timeout: Seconds to wait when fetching a source image
        max_surface_pixels: Largest pixel surface the rasterizer will allocate
        user_agent: User-Agent sent when fetching source images
        log_level: Logging level name
    """
    key_prefix: str = 'exported-assets'
    fetch_timeout: float = 30.0
    max_surface_pixels: int = 100_000_000
    user_agent: str = 'DesignHandoff/1.0'
    log_level: str = 'INFO'

    @classmethod
    def from_env(cls) -> 'ExportSettings':
        """Load settings from EXPORT_* environment variables."""
        return cls(
            key_prefix=os.getenv('EXPORT_PREFIX', 'exported-assets'),
            fetch_timeout=float(os.getenv('EXPORT_FETCH_TIMEOUT', '30')),
            max_surface_pixels=int(os.getenv('EXPORT_MAX_SURFACE_PIXELS', '100000000')),
            user_agent=os.getenv('EXPORT_USER_AGENT', 'DesignHandoff/1.0'),
            log_level=os.getenv('LOG_LEVEL', 'INFO'),
        )
