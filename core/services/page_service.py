# =============================================================================
# core/services/page_service.py - Print PDF Composition
# =============================================================================
# Wraps the print raster in a single-page PDF with bleed:
#
#   +------------------------------+  page = size + 2 * bleed
#   |  white bleed                 |
#   |   +----------------------+   |
#   |   |  raster (size)       |   |  inset by bleed on every side
#   |   +----------------------+   |
#   +------------------------------+
#
# The bleed area stays white; the press trims it off after printing.
# =============================================================================

import io
import logging
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen.canvas import Canvas

from core.errors import EmbedError
from core.models.render import PhysicalSize
from lib.units import format_dimension, mm_to_pt

logger = logging.getLogger(__name__)

DEFAULT_BLEED_MM = 3.0
EMBEDDABLE_FORMATS = {"JPEG", "PNG"}


@dataclass(frozen=True)
class PageLayout:
    """Page and image geometry in PDF points (origin bottom-left)."""
    page_width_pt: float
    page_height_pt: float
    image_x_pt: float
    image_y_pt: float
    image_width_pt: float
    image_height_pt: float


@dataclass
class ComposedPage:
    """Serialized print PDF plus its storage file name."""
    data: bytes
    name: str
    layout: PageLayout
    content_type: str = "application/pdf"


def page_layout(size: PhysicalSize, bleed_mm: float = DEFAULT_BLEED_MM) -> PageLayout:
    """Compute the page box and the inset image box for a print size."""
    return PageLayout(
        page_width_pt=mm_to_pt(size.width_mm + bleed_mm * 2),
        page_height_pt=mm_to_pt(size.height_mm + bleed_mm * 2),
        image_x_pt=mm_to_pt(bleed_mm),
        image_y_pt=mm_to_pt(bleed_mm),
        image_width_pt=mm_to_pt(size.width_mm),
        image_height_pt=mm_to_pt(size.height_mm),
    )


def page_name(filename_base: str, size: PhysicalSize, bleed_mm: float) -> str:
    """
    File name for the print PDF.

    Example:
        page_name("print_1718000000000", PhysicalSize(width_mm=100, height_mm=150), 3)
        # "print_1718000000000_100x150_bleed3.pdf"
    """
    return (
        f"{filename_base}_{format_dimension(size.width_mm)}x{format_dimension(size.height_mm)}"
        f"_bleed{format_dimension(bleed_mm)}.pdf"
    )


class PageService:
    """Composes print PDFs with ReportLab."""

    @staticmethod
    def compose(
        raster: bytes,
        size: PhysicalSize,
        bleed_mm: float = DEFAULT_BLEED_MM,
        filename_base: str = "print",
    ) -> ComposedPage:
        """
        Build the single-page print PDF.

        Args:
            raster: Encoded JPEG or PNG raster
            size: Physical print size (without bleed)
            bleed_mm: Bleed on each side
            filename_base: Prefix of the generated file name

        Returns:
            ComposedPage with PDF bytes and its file name

        Raises:
            EmbedError: If the raster is not an embeddable JPEG/PNG
        """
        image_reader = PageService._image_reader(raster)
        layout = page_layout(size, bleed_mm)
        name = page_name(filename_base, size, bleed_mm)

        buffer = io.BytesIO()
        canvas = Canvas(buffer, pagesize=(layout.page_width_pt, layout.page_height_pt))
        canvas.setTitle(name)

        # Bleed background
        canvas.setFillColorRGB(1, 1, 1)
        canvas.rect(0, 0, layout.page_width_pt, layout.page_height_pt, stroke=0, fill=1)

        try:
            canvas.drawImage(
                image_reader,
                layout.image_x_pt,
                layout.image_y_pt,
                width=layout.image_width_pt,
                height=layout.image_height_pt,
                mask="auto",
            )
            canvas.showPage()
            canvas.save()
        except Exception as e:
            raise EmbedError(str(e))

        data = buffer.getvalue()
        logger.info(
            f"Composed {name}: {layout.page_width_pt:.2f}x{layout.page_height_pt:.2f}pt "
            f"({len(data)} bytes)"
        )
        return ComposedPage(data=data, name=name, layout=layout)

    @staticmethod
    def _image_reader(raster: bytes) -> ImageReader:
        """Validate that the raster is JPEG or PNG and wrap it for ReportLab."""
        try:
            with Image.open(io.BytesIO(raster)) as probe:
                detected = probe.format
        except (UnidentifiedImageError, OSError) as e:
            raise EmbedError(str(e) or "unreadable raster")

        if detected not in EMBEDDABLE_FORMATS:
            raise EmbedError(f"unsupported raster format {detected}")

        try:
            return ImageReader(io.BytesIO(raster))
        except Exception as e:
            raise EmbedError(str(e))
