# =============================================================================
# app/routers/admin.py - Output File Browser
# =============================================================================
# Lets an operator list the rendered files and fetch short-lived download
# links. All endpoints require HTTP Basic auth.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.auth import AdminUser, get_admin_user
from app.config import settings
from app.dependencies import StorageDep
from app.exceptions import ListingFailedError, MissingKeyError, SigningFailedError
from core.models.order import FileListing, SignedUrlResponse, StoredFile
from core.services.output_service import HOTFOLDER_PREFIX, PROD_PREFIX

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/files", response_model=FileListing, response_model_by_alias=True)
async def list_files(
    storage: StorageDep,
    admin: AdminUser = Depends(get_admin_user),
):
    """
    List the files under prod/ and hotfolder/.

    Folder placeholders are skipped.
    """
    try:
        listing = FileListing(
            prod=[StoredFile(**f) for f in storage.list_files(settings.STORAGE_BUCKET, PROD_PREFIX)],
            hotfolder=[StoredFile(**f) for f in storage.list_files(settings.STORAGE_BUCKET, HOTFOLDER_PREFIX)],
        )
    except Exception as e:
        logger.error(f"Failed to list output files: {e}")
        raise ListingFailedError(str(e))

    logger.debug(
        f"{admin.username} listed {len(listing.prod)} prod / {len(listing.hotfolder)} hotfolder files"
    )
    return listing


@router.get("/sign", response_model=SignedUrlResponse)
async def sign_download(
    storage: StorageDep,
    key: Annotated[str | None, Query(description="Object key, e.g. prod/...")] = None,
    admin: AdminUser = Depends(get_admin_user),
):
    """Signed download URL for one output file."""
    if not key:
        raise MissingKeyError()

    try:
        url = storage.create_signed_url(
            settings.STORAGE_BUCKET, key, settings.SIGNED_URL_EXPIRES_SECONDS
        )
    except Exception as e:
        logger.error(f"Failed to sign download for {key}: {e}")
        raise SigningFailedError(str(e))

    logger.info(f"{admin.username} signed download for {key}")
    return SignedUrlResponse(url=url)
