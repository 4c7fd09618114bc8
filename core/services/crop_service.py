# =============================================================================
# core/services/crop_service.py - Crop Normalization
# =============================================================================
# The crop editor runs on a scaled-down preview of the upload. The crop it
# reports is therefore in "displayed" pixels, while the renderer works on
# the full-resolution ("natural") file. This module maps one to the other.
# =============================================================================

import logging

from core.errors import InvalidInputError
from core.models.render import CropRegion, ImageInfo
from lib.units import round_half_away_from_zero

logger = logging.getLogger(__name__)


def normalize_crop(
    crop: CropRegion | None,
    image_info: ImageInfo | None,
) -> CropRegion | None:
    """
    Express a crop region in the source image's native pixel space.

    Rules:
    - No crop -> None (render the full image)
    - No image info, or a displayed dimension missing -> crop unchanged
    - Otherwise scale x/width by natural_width / displayed_width and
      y/height by natural_height / displayed_height, rounding each
      field to the nearest integer independently

    Args:
        crop: Crop rectangle from the order, if any
        image_info: Natural and displayed image dimensions, if known

    Returns:
        CropRegion in natural space, or None

    Raises:
        InvalidInputError: If a displayed dimension is zero
    """
    if crop is None:
        return None

    if (
        image_info is None
        or image_info.displayed_width is None
        or image_info.displayed_height is None
    ):
        return crop

    if image_info.displayed_width == 0 or image_info.displayed_height == 0:
        raise InvalidInputError(
            "Displayed image dimensions must be positive",
            details={
                "displayed_width": image_info.displayed_width,
                "displayed_height": image_info.displayed_height,
            },
            stage="crop",
        )

    scale_x = image_info.natural_width / image_info.displayed_width
    scale_y = image_info.natural_height / image_info.displayed_height

    normalized = CropRegion(
        x=round_half_away_from_zero(crop.x * scale_x),
        y=round_half_away_from_zero(crop.y * scale_y),
        width=round_half_away_from_zero(crop.width * scale_x),
        height=round_half_away_from_zero(crop.height * scale_y),
    )

    logger.debug(f"Scaled crop by ({scale_x:.4f}, {scale_y:.4f}): {crop} -> {normalized}")
    return normalized
