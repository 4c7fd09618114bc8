# =============================================================================
# core/services/raster_service.py - Production Raster Rendering
# =============================================================================
# Turns the customer's upload into the print raster:
#   decode -> extract crop -> cover-fit resize -> encode
#
# The output is always exactly mm_to_px(width) x mm_to_px(height) pixels at
# the configured density (300 dpi by default).
# =============================================================================

import io
import logging
from dataclasses import dataclass

from PIL import Image, ImageOps, UnidentifiedImageError

from app.config import settings
from core.errors import DecodeError, EncodeError, InvalidInputError, OutOfBoundsError
from core.models.render import CropRegion, OutputFormat, PhysicalSize
from lib.units import mm_to_px, round_half_away_from_zero

logger = logging.getLogger(__name__)

# Modes the encoders take without conversion
_JPEG_MODES = {"RGB", "L", "CMYK"}
_PNG_MODES = {"RGB", "RGBA", "L", "LA"}

# Grayscale modes wider than 8 bits (16-bit PNG, TIFF, float rasters)
_HIGH_DEPTH_GRAY_MODES = {"I;16", "I;16L", "I;16B", "I;16N", "I", "F"}

WHITE = (255, 255, 255)


@dataclass
class RenderedRaster:
    """Encoded print raster."""
    data: bytes
    output_format: OutputFormat
    width_px: int
    height_px: int

    @property
    def content_type(self) -> str:
        return self.output_format.content_type

    @property
    def extension(self) -> str:
        return self.output_format.extension


def _usable_icc_profile(image: Image.Image) -> bytes | None:
    """
    Return the embedded ICC profile if it looks like one.

    Profiles that are truncated or lack the 'acsp' signature are
    treated as absent so they are never copied into the output.
    """
    profile = image.info.get("icc_profile")
    if not isinstance(profile, (bytes, bytearray)) or len(profile) < 128:
        return None
    if bytes(profile[36:40]) != b"acsp":
        logger.warning("Ignoring malformed ICC profile in source image")
        return None
    return bytes(profile)


def _to_8bit_gray(image: Image.Image) -> Image.Image:
    """
    Scale 16-bit, 32-bit integer and float grayscale down to mode L.

    A plain convert() would clip every sample above 255 to white.
    """
    if image.mode.startswith("I;16"):
        scale = 1 / 256
        image = image.convert("I")
    else:
        _, high = image.getextrema()
        if image.mode == "F" and high <= 1.0:
            scale = 255.0
        elif high > 255:
            scale = 1 / 256
        else:
            scale = 1.0
    return image.point(lambda v: v * scale).convert("L")


def _flatten(image: Image.Image) -> Image.Image:
    """Composite an image with alpha onto white."""
    rgba = image.convert("RGBA")
    background = Image.new("RGB", rgba.size, WHITE)
    background.paste(rgba, mask=rgba.getchannel("A"))
    return background


class RasterService:
    """
    Renders print rasters with Pillow.

    Density and encoder settings default to the application settings and
    can be overridden per instance.
    """

    def __init__(
        self,
        dpi: int | None = None,
        jpeg_quality: int | None = None,
        png_compress_level: int | None = None,
    ):
        self.dpi = dpi or settings.RENDER_DPI
        self.jpeg_quality = jpeg_quality or settings.JPEG_QUALITY
        self.png_compress_level = (
            settings.PNG_COMPRESS_LEVEL if png_compress_level is None else png_compress_level
        )

    def target_size(self, size: PhysicalSize) -> tuple[int, int]:
        """Pixel box for a physical size; each axis rounds independently."""
        return mm_to_px(size.width_mm, self.dpi), mm_to_px(size.height_mm, self.dpi)

    def render(
        self,
        source: bytes,
        size: PhysicalSize,
        crop: CropRegion | None = None,
        output_format: OutputFormat = OutputFormat.JPG,
    ) -> RenderedRaster:
        """
        Render the print raster.

        Args:
            source: Encoded source image bytes
            size: Target physical size
            crop: Crop rectangle in natural pixel space (see normalize_crop)
            output_format: jpg or png

        Returns:
            RenderedRaster with encoded bytes and pixel dimensions

        Raises:
            DecodeError: Source is not a readable image
            OutOfBoundsError: Crop extends past the right or bottom edge
            EncodeError: Encoder failure
        """
        image = self.decode(source)
        icc_profile = _usable_icc_profile(image)

        if crop is not None and crop.has_area:
            image = self.extract(image, crop)

        target_w, target_h = self.target_size(size)
        image = self._prepare_mode(image)
        image = ImageOps.fit(
            image,
            (target_w, target_h),
            method=Image.Resampling.LANCZOS,
            centering=(0.5, 0.5),
        )

        data = self.encode(image, output_format, icc_profile)

        logger.info(
            f"Rendered {output_format.value} raster {target_w}x{target_h}px "
            f"for {size.width_mm}x{size.height_mm}mm ({len(data)} bytes)"
        )
        return RenderedRaster(
            data=data,
            output_format=output_format,
            width_px=target_w,
            height_px=target_h,
        )

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    @staticmethod
    def decode(source: bytes) -> Image.Image:
        """Decode image bytes and apply the EXIF orientation."""
        try:
            image = Image.open(io.BytesIO(source))
            image.load()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
            raise DecodeError(str(e) or type(e).__name__)

        icc_profile = image.info.get("icc_profile")
        try:
            oriented = ImageOps.exif_transpose(image)
        except Exception as e:
            logger.warning(f"Ignoring unreadable EXIF orientation: {e}")
            oriented = image
        if icc_profile is not None:
            oriented.info["icc_profile"] = icc_profile
        return oriented

    @staticmethod
    def extract(image: Image.Image, crop: CropRegion) -> Image.Image:
        """
        Cut the crop rectangle out of the image.

        The origin is clamped to zero. The far edges are not clamped: a
        rectangle reaching past the image is rejected.
        """
        left = max(0, round_half_away_from_zero(crop.x))
        top = max(0, round_half_away_from_zero(crop.y))
        width = round_half_away_from_zero(crop.width)
        height = round_half_away_from_zero(crop.height)

        if width <= 0 or height <= 0:
            raise InvalidInputError(
                "Crop rectangle rounds to zero pixels",
                details={"crop": crop.model_dump()},
                stage="raster",
            )

        if left + width > image.width or top + height > image.height:
            raise OutOfBoundsError((left, top, width, height), image.size)

        return image.crop((left, top, left + width, top + height))

    @staticmethod
    def _prepare_mode(image: Image.Image) -> Image.Image:
        """Bring palette, bilevel and high bit-depth images into 8-bit modes."""
        if image.mode in _JPEG_MODES | _PNG_MODES:
            return image
        if image.mode in ("P", "PA"):
            has_alpha = image.mode == "PA" or "transparency" in image.info
            return image.convert("RGBA" if has_alpha else "RGB")
        if image.mode == "1":
            return image.convert("L")
        if image.mode in _HIGH_DEPTH_GRAY_MODES:
            return _to_8bit_gray(image)
        return image.convert("RGB")

    def encode(
        self,
        image: Image.Image,
        output_format: OutputFormat,
        icc_profile: bytes | None = None,
    ) -> bytes:
        """Encode as JPEG (quality from settings) or PNG (max compression)."""
        options: dict = {"dpi": (self.dpi, self.dpi)}

        if output_format == OutputFormat.PNG:
            if image.mode not in _PNG_MODES:
                image = image.convert("RGB")
                icc_profile = None
            options.update(format="PNG", compress_level=self.png_compress_level)
        else:
            if image.mode in ("RGBA", "LA"):
                image = _flatten(image)
            elif image.mode not in _JPEG_MODES:
                image = image.convert("RGB")
                icc_profile = None
            options.update(format="JPEG", quality=self.jpeg_quality)

        if icc_profile:
            options["icc_profile"] = icc_profile

        buffer = io.BytesIO()
        try:
            image.save(buffer, **options)
        except (OSError, ValueError) as e:
            raise EncodeError(output_format.value, str(e))
        return buffer.getvalue()
