# =============================================================================
# app/routers/assets.py - Source Image Upload Endpoints
# =============================================================================
# The storefront uploads the customer's image straight to storage with a
# signed URL and sends the returned objectKey back at checkout.
# =============================================================================

import logging

from fastapi import APIRouter

from app.config import settings
from app.dependencies import StorageDep
from app.exceptions import SigningFailedError
from core.models.order import SignUploadRequest, SignUploadResponse
from lib.utils import unix_millis

logger = logging.getLogger(__name__)

router = APIRouter()

RAW_PREFIX = "raw"


def source_object_key(filename: str, timestamp_ms: int) -> str:
    """Key for an uploaded source image: raw/<ms>_<filename>."""
    return f"{RAW_PREFIX}/{timestamp_ms}_{filename}"


@router.post("/sign", response_model=SignUploadResponse, response_model_by_alias=True)
async def sign_upload(body: SignUploadRequest, storage: StorageDep):
    """
    Issue a signed upload URL for a source image.

    The URL accepts one upload of the object returned as objectKey.
    """
    object_key = source_object_key(body.filename, unix_millis())

    try:
        signed = storage.create_signed_upload_url(settings.STORAGE_BUCKET, object_key)
    except Exception as e:
        logger.error(f"Failed to sign upload for {object_key}: {e}")
        raise SigningFailedError(str(e))

    logger.info(f"Signed upload for {object_key} ({body.content_type})")
    return SignUploadResponse(url=signed["url"], object_key=object_key, token=signed.get("token"))
