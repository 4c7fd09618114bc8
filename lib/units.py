# =============================================================================
# lib/units.py - Physical Unit Conversion
# =============================================================================
# Converts print dimensions between millimeters, raster pixels and PDF points.
#
# Two fixed densities are involved:
# - Raster output: 300 samples per inch (production print resolution)
# - Page layout:   72 points per inch (PDF user space)
#
# Usage:
#   from lib.units import mm_to_px, mm_to_pt
#   width_px = mm_to_px(100)   # 1181
#   width_pt = mm_to_pt(100)   # 283.46...
# =============================================================================

import math

MM_PER_INCH = 25.4
PT_PER_INCH = 72
DEFAULT_DPI = 300


def round_half_away_from_zero(value: float) -> int:
    """
    Round to the nearest integer, ties away from zero.

    Python's built-in round() uses banker's rounding (round(2.5) == 2),
    which would shift pixel sizes on exact .5 boundaries.

    Example:
        round_half_away_from_zero(2.5)   # 3
        round_half_away_from_zero(-2.5)  # -3
    """
    if value < 0:
        return -int(math.floor(-value + 0.5))
    return int(math.floor(value + 0.5))


def mm_to_px(mm: float, dpi: int = DEFAULT_DPI) -> int:
    """
    Convert millimeters to whole pixels at the given density.

    Each call rounds independently, so width and height converted
    separately may drift from the exact physical aspect ratio.

    Args:
        mm: Length in millimeters
        dpi: Samples per inch (default 300)

    Returns:
        Pixel count, rounded half away from zero
    """
    return round_half_away_from_zero(mm / MM_PER_INCH * dpi)


def mm_to_pt(mm: float) -> float:
    """Convert millimeters to PDF points (1/72 inch)."""
    return mm / MM_PER_INCH * PT_PER_INCH


def format_dimension(value: float) -> str:
    """
    Format a dimension for use in storage keys and file names.

    Integral values drop the decimal point so that keys read "100x150"
    rather than "100.0x150.0". Storage consumers parse these names.

    Example:
        format_dimension(100.0)  # "100"
        format_dimension(100.5)  # "100.5"
    """
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)
