"""
Target dimension calculation for exported assets.
"""

from typing import Optional, Tuple


def compute_dimensions(
    source_width: float,
    source_height: float,
    target_width: Optional[float] = None,
    target_height: Optional[float] = None,
    scale: float = 1,
) -> Tuple[int, int]:
    """
    Compute output pixel dimensions, preserving aspect ratio.

    The source size is first multiplied by ``scale``. When both target
    dimensions are given the result fits within them; when only one is
    given the other axis follows proportionally. Each axis is rounded
    independently, so the ratio may drift by up to half a pixel.

    Args:
        source_width: Source (or crop) width in pixels
        source_height: Source (or crop) height in pixels
        target_width: Optional width constraint
        target_height: Optional height constraint
        scale: Resolution multiplier

    Returns:
        Tuple of (width, height)
    """
    width = source_width * scale
    height = source_height * scale

    # Zero-sized sources fall through unscaled
    if target_width and target_height:
        if width and height:
            ratio = min(target_width / width, target_height / height)
            width *= ratio
            height *= ratio
    elif target_width:
        if width:
            height *= target_width / width
            width = target_width
    elif target_height:
        if height:
            width *= target_height / height
            height = target_height

    return _round_half_up(width), _round_half_up(height)


def _round_half_up(value: float) -> int:
    # round() uses banker's rounding; pixel sizes round .5 upwards
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)
