# =============================================================================
# core/models/order.py - Storefront and Admin API Schemas
# =============================================================================
# These models define the API contract around the render pipeline:
# - SignUploadRequest/Response: Presigned upload for the source image
# - CheckoutItem/Request/Response: Stripe checkout with render metadata
# - StoredFile/FileListing/SignedUrlResponse: Admin file browser
#
# JSON uses the camelCase names of the storefront client.
# =============================================================================

import json
from typing import Any

from pydantic import BaseModel, Field

from lib.units import round_half_away_from_zero


# =============================================================================
# Upload Signing
# =============================================================================

class SignUploadRequest(BaseModel):
    """
    Request a signed URL for uploading a source image.

    Example:
        {"filename": "holiday.jpg", "contentType": "image/jpeg"}
    """

    filename: str = Field(..., min_length=1, max_length=255)
    content_type: str = Field(..., min_length=1, alias="contentType")

    model_config = {"populate_by_name": True}


class SignUploadResponse(BaseModel):
    """Signed upload URL plus the object key to send back at checkout."""

    url: str
    object_key: str = Field(..., alias="objectKey")
    token: str | None = None

    model_config = {"populate_by_name": True}


# =============================================================================
# Checkout
# =============================================================================

class CheckoutItem(BaseModel):
    """
    One cart line as sent by the storefront.

    Only the first item of a cart is rendered; the rest are billed only.
    """

    object_key: str = Field(..., min_length=1, alias="objectKey")
    size: str = Field(default="", description="Size preset id shown to the customer")
    wmm: float | None = Field(default=None, description="Print width in mm")
    hmm: float | None = Field(default=None, description="Print height in mm")
    crop_area: dict[str, Any] | None = Field(default=None, alias="cropArea")
    image_info: dict[str, Any] | None = Field(default=None, alias="imageInfo")
    product: str = Field(default="Print")
    qty: int = Field(default=1, ge=1)
    price: float = Field(..., ge=0, description="Unit price in major currency units")
    currency: str = Field(default="eur")

    model_config = {"populate_by_name": True}

    @property
    def unit_amount(self) -> int:
        """Price in minor units (cents)."""
        return round_half_away_from_zero(self.price * 100)

    def to_metadata(self) -> dict[str, str]:
        """Stripe metadata carried through to the checkout webhook."""
        return {
            "objectKey": self.object_key,
            "sizeId": self.size,
            "wmm": _metadata_number(self.wmm),
            "hmm": _metadata_number(self.hmm),
            "cropArea": json.dumps(self.crop_area or {}),
            "imageInfo": json.dumps(self.image_info or {}),
        }


def _metadata_number(value: float | None) -> str:
    if not value:
        return ""
    return str(int(value)) if float(value).is_integer() else str(value)


class CheckoutRequest(BaseModel):
    """Cart submitted by the storefront."""

    items: list[CheckoutItem] = Field(default_factory=list)


class CheckoutResponse(BaseModel):
    """Hosted checkout page to redirect the customer to."""

    url: str


# =============================================================================
# Admin
# =============================================================================

class StoredFile(BaseModel):
    """One object under prod/ or hotfolder/."""

    key: str
    size: int | None = None
    last_modified: str | None = Field(default=None, alias="lastModified")

    model_config = {"populate_by_name": True}


class FileListing(BaseModel):
    """Objects of both output destinations."""

    prod: list[StoredFile] = Field(default_factory=list)
    hotfolder: list[StoredFile] = Field(default_factory=list)


class SignedUrlResponse(BaseModel):
    """Short-lived download URL."""

    url: str
