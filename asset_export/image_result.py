"""
ProcessedImageResult - One encoded export variant.
"""

from dataclasses import dataclass

from .formats import get_mime_type


@dataclass(frozen=True)
class ProcessedImageResult:
    """
    Encoded image produced by one rasterize+encode pass.

    Attributes:
        buffer: Encoded bytes
        width: Output width in pixels
        height: Output height in pixels
        format: Export format the buffer is encoded in
        size_bytes: Length of buffer
        quality: Quality the encoder was called with
        scale: Resolution scale the surface was rendered at
    """
    buffer: bytes
    width: int
    height: int
    format: str
    size_bytes: int
    quality: float
    scale: float

    @property
    def content_type(self) -> str:
        return get_mime_type(self.format)

    def fits(self, max_size_bytes: int) -> bool:
        """True if the encoded size is within the byte budget."""
        return self.size_bytes <= max_size_bytes
