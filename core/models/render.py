# =============================================================================
# core/models/render.py - Render Pipeline Schemas
# =============================================================================
# These models define the contract of the print render pipeline:
# - PhysicalSize: Target print size in millimeters
# - CropRegion: User-selected crop (displayed or natural pixel space)
# - ImageInfo: The two coordinate spaces a crop may have been authored in
# - RenderRequest: One render job (built from checkout metadata)
# - RenderResult / RenderOutcome: What the orchestrator reports back
#
# Field aliases are the camelCase names used by the browser client and
# stored in Stripe checkout metadata. Python code uses the snake_case names.
# =============================================================================

import json
import math
from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel, Field, ValidationError

from core.errors import InvalidInputError


# =============================================================================
# Enums
# =============================================================================

class OutputFormat(str, Enum):
    """Raster formats the renderer can produce."""
    JPG = "jpg"
    PNG = "png"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def content_type(self) -> str:
        return "image/png" if self is OutputFormat.PNG else "image/jpeg"


class RenderStatus(str, Enum):
    """
    States of one render invocation.

    State machine:
        pending -> rendering -> completed
                            \\-> failed
    """
    PENDING = "pending"
    RENDERING = "rendering"
    COMPLETED = "completed"
    FAILED = "failed"


# =============================================================================
# Geometry
# =============================================================================

class PhysicalSize(BaseModel):
    """
    Physical print size in millimeters (excluding bleed).

    Example:
        {"widthMm": 100, "heightMm": 150}
    """

    width_mm: float = Field(..., gt=0, allow_inf_nan=False, alias="widthMm", description="Print width in mm")
    height_mm: float = Field(..., gt=0, allow_inf_nan=False, alias="heightMm", description="Print height in mm")

    model_config = {"populate_by_name": True, "frozen": True}


class CropRegion(BaseModel):
    """
    Rectangle selected by the customer in the crop editor.

    Coordinates may be in displayed (preview) space or natural (source)
    space; normalize_crop() resolves which.
    """

    x: float = Field(..., allow_inf_nan=False, description="Left edge")
    y: float = Field(..., allow_inf_nan=False, description="Top edge")
    width: float = Field(..., ge=0, allow_inf_nan=False, description="Rectangle width")
    height: float = Field(..., ge=0, allow_inf_nan=False, description="Rectangle height")

    model_config = {"populate_by_name": True, "frozen": True}

    @property
    def has_area(self) -> bool:
        """A zero width or height means "no crop"."""
        return self.width > 0 and self.height > 0


class ImageInfo(BaseModel):
    """
    Source image dimensions as seen by the browser.

    natural_* is the full-resolution file; displayed_* is the size of the
    preview the crop was drawn on. Without displayed dimensions the crop
    is taken to be in natural space already.
    """

    natural_width: int = Field(..., gt=0, alias="naturalWidth")
    natural_height: int = Field(..., gt=0, alias="naturalHeight")
    displayed_width: float | None = Field(default=None, ge=0, allow_inf_nan=False, alias="displayedWidth")
    displayed_height: float | None = Field(default=None, ge=0, allow_inf_nan=False, alias="displayedHeight")

    model_config = {"populate_by_name": True, "frozen": True}


# =============================================================================
# Request
# =============================================================================

def _parse_number(value: Any) -> float:
    """Lenient numeric parse for metadata strings; junk becomes 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def _parse_json_object(name: str, value: Any) -> dict[str, Any] | None:
    """Decode a JSON-encoded metadata field; empty objects count as absent."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise InvalidInputError(f"{name} is not valid JSON: {e}", details={"field": name})
    if value is None:
        return None
    if not isinstance(value, dict):
        raise InvalidInputError(f"{name} must be a JSON object", details={"field": name})
    return value or None


class RenderRequest(BaseModel):
    """
    Parameter bundle for one render.

    Created once per paid order and consumed exactly once by RenderService.
    Never persisted; it travels to the worker as the task payload.

    Example:
        {
            "object_key": "raw/1718000000000_photo.jpg",
            "size": {"widthMm": 100, "heightMm": 150},
            "crop": {"x": 100, "y": 100, "width": 400, "height": 300},
            "image_info": {"naturalWidth": 4000, "naturalHeight": 3000,
                           "displayedWidth": 800, "displayedHeight": 600},
            "output_format": "jpg"
        }
    """

    bucket: str | None = Field(
        default=None,
        description="Storage bucket (defaults to STORAGE_BUCKET)"
    )

    object_key: str = Field(
        ...,
        min_length=1,
        alias="objectKey",
        description="Key of the uploaded source image"
    )

    size: PhysicalSize

    crop: CropRegion | None = Field(default=None, alias="cropArea")

    image_info: ImageInfo | None = Field(default=None, alias="imageInfo")

    output_format: OutputFormat = Field(default=OutputFormat.JPG, alias="outFormat")

    bleed_mm: float = Field(
        default=3.0,
        ge=0.0,
        alias="bleedMm",
        description="Bleed added on each side of the print PDF"
    )

    model_config = {"populate_by_name": True, "frozen": True}

    @property
    def request_key(self) -> str:
        """Identifier used in log lines: bucket/object key."""
        return f"{self.bucket or '-'}/{self.object_key}"

    @classmethod
    def from_checkout_metadata(
        cls,
        metadata: Mapping[str, Any],
        bucket: str | None = None,
        **overrides: Any,
    ) -> "RenderRequest":
        """
        Build a request from Stripe checkout session metadata.

        Stripe metadata values are strings: wmm/hmm are numbers as text,
        cropArea and imageInfo are JSON documents ("{}" when the customer
        did not crop).

        Raises:
            InvalidInputError: objectKey missing, wmm/hmm missing or zero,
                or crop/image info malformed
        """
        object_key = str(metadata.get("objectKey") or "")
        width_mm = _parse_number(metadata.get("wmm"))
        height_mm = _parse_number(metadata.get("hmm"))

        if not object_key or not width_mm or not height_mm:
            raise InvalidInputError(
                "Missing metadata for render",
                details={
                    "objectKey": object_key or None,
                    "wmm": metadata.get("wmm"),
                    "hmm": metadata.get("hmm"),
                },
            )

        crop = _parse_json_object("cropArea", metadata.get("cropArea"))
        image_info = _parse_json_object("imageInfo", metadata.get("imageInfo"))

        try:
            return cls(
                bucket=bucket,
                object_key=object_key,
                size=PhysicalSize(width_mm=width_mm, height_mm=height_mm),
                crop=crop,
                image_info=image_info,
                **overrides,
            )
        except ValidationError as e:
            raise InvalidInputError(
                f"Invalid render metadata: {e.error_count()} validation error(s)",
                details={"errors": e.errors(include_url=False, include_context=False)},
            )


# =============================================================================
# Result
# =============================================================================

class RenderResult(BaseModel):
    """Storage locators of a completed render."""

    raster_key: str = Field(..., description="prod/<ms>_<w>x<h>.<ext>")
    page_document_key: str = Field(..., description="prod/print_<ms>_<w>x<h>_bleed<b>.pdf")
    hotfolder_key: str = Field(..., description="hotfolder/print_<ms>_<w>x<h>_bleed<b>.pdf")

    model_config = {"frozen": True}


class RenderErrorInfo(BaseModel):
    """Error details of a failed render."""

    code: str
    message: str
    stage: str
    details: dict[str, Any] = Field(default_factory=dict)


class RenderOutcome(BaseModel):
    """
    Final report of RenderService.run().

    Example (failed):
        {
            "status": "failed",
            "request_key": "print-orders/raw/1718000000000_photo.jpg",
            "error": {"code": "OUT_OF_BOUNDS", "stage": "raster", ...}
        }
    """

    status: RenderStatus
    request_key: str
    result: RenderResult | None = None
    error: RenderErrorInfo | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == RenderStatus.COMPLETED
