# =============================================================================
# core/services/output_service.py - Output Naming and Fanout
# =============================================================================
# Every render writes three objects:
#
#   prod/<ms>_<w>x<h>.<ext>                        production raster
#   prod/print_<ms>_<w>x<h>_bleed<b>.pdf           production print PDF
#   hotfolder/print_<ms>_<w>x<h>_bleed<b>.pdf      copy for the press
#
# <ms> is the render's generation time in Unix milliseconds. Keys are
# unique per render in practice; two renders of the same size in the same
# millisecond produce the same keys and the later write wins.
# =============================================================================

import logging
from dataclasses import dataclass

from core.errors import FanoutError, StorageWriteError
from core.models.render import OutputFormat, PhysicalSize, RenderResult
from core.services.page_service import ComposedPage, page_name
from core.services.raster_service import RenderedRaster
from lib.units import format_dimension

logger = logging.getLogger(__name__)

PROD_PREFIX = "prod"
HOTFOLDER_PREFIX = "hotfolder"
PAGE_NAME_PREFIX = "print"


@dataclass(frozen=True)
class OutputKeys:
    """Storage keys of one render."""
    raster_key: str
    page_document_key: str
    hotfolder_key: str
    page_name: str


class OutputService:
    """Builds output keys and writes render outputs to storage."""

    @staticmethod
    def page_filename_base(timestamp_ms: int) -> str:
        """Base passed to PageService.compose() so names match the keys."""
        return f"{PAGE_NAME_PREFIX}_{timestamp_ms}"

    @staticmethod
    def build_keys(
        size: PhysicalSize,
        bleed_mm: float,
        output_format: OutputFormat,
        timestamp_ms: int,
    ) -> OutputKeys:
        """
        Compute the three storage keys of a render.

        Example:
            build_keys(PhysicalSize(width_mm=100, height_mm=150), 3, OutputFormat.JPG, 1718000000000)
            # raster_key        = "prod/1718000000000_100x150.jpg"
            # page_document_key = "prod/print_1718000000000_100x150_bleed3.pdf"
            # hotfolder_key     = "hotfolder/print_1718000000000_100x150_bleed3.pdf"
        """
        dims = f"{format_dimension(size.width_mm)}x{format_dimension(size.height_mm)}"
        name = page_name(OutputService.page_filename_base(timestamp_ms), size, bleed_mm)
        return OutputKeys(
            raster_key=f"{PROD_PREFIX}/{timestamp_ms}_{dims}.{output_format.extension}",
            page_document_key=f"{PROD_PREFIX}/{name}",
            hotfolder_key=f"{HOTFOLDER_PREFIX}/{name}",
            page_name=name,
        )

    @staticmethod
    def fan_out(
        storage,
        bucket: str,
        raster: RenderedRaster,
        page: ComposedPage,
        keys: OutputKeys,
    ) -> RenderResult:
        """
        Write raster, print PDF and hotfolder copy.

        The writes are independent: a failed write is logged and the
        remaining writes still run. Nothing is rolled back.

        Args:
            storage: Object with upload(bucket, key, data, content_type)
            bucket: Target bucket
            raster: Rendered raster
            page: Composed print PDF
            keys: Keys from build_keys()

        Returns:
            RenderResult with the three keys

        Raises:
            FanoutError: If at least one write failed
        """
        writes = [
            ("raster", keys.raster_key, raster.data, raster.content_type),
            ("page_document", keys.page_document_key, page.data, page.content_type),
            ("hotfolder", keys.hotfolder_key, page.data, page.content_type),
        ]

        written: dict[str, str] = {}
        failures: dict[str, str] = {}

        for role, key, data, content_type in writes:
            try:
                storage.upload(bucket, key, data, content_type)
                written[role] = key
            except StorageWriteError as e:
                logger.error(f"Output write failed ({role}) {bucket}/{key}: {e.message}")
                failures[role] = e.message

        if failures:
            raise FanoutError(written=written, failures=failures)

        return RenderResult(
            raster_key=keys.raster_key,
            page_document_key=keys.page_document_key,
            hotfolder_key=keys.hotfolder_key,
        )
