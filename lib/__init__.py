# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - units.py: Millimeter / pixel / point conversion
# - supabase_client.py: Shared Supabase client for the storage layer
# - utils.py: Shared utilities (error base class, timestamps)
#
# supabase_client is not re-exported here: importing it loads app settings.
# =============================================================================

from lib.units import (
    DEFAULT_DPI,
    MM_PER_INCH,
    PT_PER_INCH,
    format_dimension,
    mm_to_pt,
    mm_to_px,
    round_half_away_from_zero,
)
from lib.utils import ApplicationError, unix_millis

__all__ = [
    # Units
    "DEFAULT_DPI",
    "MM_PER_INCH",
    "PT_PER_INCH",
    "format_dimension",
    "mm_to_pt",
    "mm_to_px",
    "round_half_away_from_zero",
    # Utils
    "ApplicationError",
    "unix_millis",
]
