# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - render.py: Render pipeline request/result schemas
# - order.py: Upload signing, checkout and admin schemas
#
# These models define the "contract" between API, worker and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Render Models - Print render pipeline
# -----------------------------------------------------------------------------
from .render import (
    CropRegion,
    ImageInfo,
    OutputFormat,
    PhysicalSize,
    RenderErrorInfo,
    RenderOutcome,
    RenderRequest,
    RenderResult,
    RenderStatus,
)

# -----------------------------------------------------------------------------
# Order Models - Storefront and admin endpoints
# -----------------------------------------------------------------------------
from .order import (
    CheckoutItem,
    CheckoutRequest,
    CheckoutResponse,
    FileListing,
    SignedUrlResponse,
    SignUploadRequest,
    SignUploadResponse,
    StoredFile,
)

__all__ = [
    # Render
    "CropRegion",
    "ImageInfo",
    "OutputFormat",
    "PhysicalSize",
    "RenderErrorInfo",
    "RenderOutcome",
    "RenderRequest",
    "RenderResult",
    "RenderStatus",
    # Order
    "CheckoutItem",
    "CheckoutRequest",
    "CheckoutResponse",
    "FileListing",
    "SignedUrlResponse",
    "SignUploadRequest",
    "SignUploadResponse",
    "StoredFile",
]
