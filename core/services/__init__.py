# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .crop_service import normalize_crop
from .output_service import OutputKeys, OutputService
from .page_service import ComposedPage, PageLayout, PageService, page_layout, page_name
from .raster_service import RasterService, RenderedRaster
from .render_service import RenderService
from .storage_service import StorageService

__all__ = [
    "normalize_crop",
    "OutputKeys",
    "OutputService",
    "ComposedPage",
    "PageLayout",
    "PageService",
    "page_layout",
    "page_name",
    "RasterService",
    "RenderedRaster",
    "RenderService",
    "StorageService",
]
