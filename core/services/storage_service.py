# =============================================================================
# core/services/storage_service.py - Supabase Storage Operations
# =============================================================================
# Object storage for the print pipeline. One bucket holds:
# - raw/        customer uploads (written by the browser via signed URL)
# - prod/       production rasters and print PDFs
# - hotfolder/  print PDFs picked up by the press
#
# RenderService only needs download() and upload(); any object with those
# two methods can stand in for StorageService (tests use an in-memory fake).
# =============================================================================

import logging
from typing import Any

from app.config import settings
from core.errors import SourceNotFoundError, StorageReadError, StorageWriteError
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

# Upper bound for one admin listing call
LIST_LIMIT = 1000


def _is_not_found(error: Exception) -> bool:
    """Storage errors carry the HTTP status in their payload."""
    payload = error.args[0] if error.args else None
    if isinstance(payload, dict):
        if str(payload.get("statusCode")) == "404" or payload.get("error") == "not_found":
            return True
    status = getattr(error, "status", None) or getattr(error, "status_code", None)
    if str(status) == "404":
        return True
    return "not found" in str(error).lower()


class StorageService:
    """
    Service for Supabase Storage operations.

    Handles the source download, output writes, listings and URL signing.
    """

    @staticmethod
    def download(bucket: str, key: str) -> bytes:
        """
        Download an object.

        Args:
            bucket: Bucket name
            key: Object key

        Returns:
            Object content as bytes

        Raises:
            SourceNotFoundError: If the object does not exist
            StorageReadError: On any other backend failure
        """
        try:
            data = SupabaseClient.bucket(bucket).download(key)
        except Exception as e:
            if _is_not_found(e):
                logger.warning(f"Object not found: {bucket}/{key}")
                raise SourceNotFoundError(bucket, key)
            logger.error(f"Storage download failed: {bucket}/{key}: {e}")
            raise StorageReadError(bucket, key, str(e))

        logger.info(f"Downloaded {bucket}/{key} ({len(data)} bytes)")
        return data

    @staticmethod
    def upload(bucket: str, key: str, data: bytes, content_type: str) -> str:
        """
        Write an object, overwriting any existing one.

        Args:
            bucket: Bucket name
            key: Object key
            data: Object content
            content_type: MIME type stored with the object

        Returns:
            The key written

        Raises:
            StorageWriteError: If the backend rejects the write
        """
        try:
            SupabaseClient.bucket(bucket).upload(
                path=key,
                file=data,
                file_options={"content-type": content_type, "upsert": "true"},
            )
        except Exception as e:
            logger.error(f"Storage upload failed: {bucket}/{key}: {e}")
            raise StorageWriteError(
                f"Failed to write {bucket}/{key}: {e}",
                details={"bucket": bucket, "key": key, "error": str(e)},
            )

        logger.info(f"Uploaded {bucket}/{key} ({len(data)} bytes, {content_type})")
        return key

    @staticmethod
    def list_files(bucket: str, prefix: str) -> list[dict[str, Any]]:
        """
        List objects directly under a prefix, newest name first.

        Folder placeholders are skipped.

        Returns:
            List of {"key", "size", "lastModified"} dicts
        """
        folder = prefix.strip("/")
        response = SupabaseClient.bucket(bucket).list(
            folder,
            {"limit": LIST_LIMIT, "sortBy": {"column": "name", "order": "desc"}},
        )

        files = []
        for item in response or []:
            name = item.get("name") or ""
            # Sub-folders come back without an id
            if not item.get("id") or not name or name.endswith("/"):
                continue
            metadata = item.get("metadata") or {}
            files.append({
                "key": f"{folder}/{name}",
                "size": metadata.get("size"),
                "lastModified": item.get("updated_at") or item.get("created_at"),
            })
        return files

    @staticmethod
    def create_signed_url(bucket: str, key: str, expires_in: int | None = None) -> str:
        """Signed GET URL for downloading one object."""
        expires_in = expires_in or settings.SIGNED_URL_EXPIRES_SECONDS
        response = SupabaseClient.bucket(bucket).create_signed_url(key, expires_in)
        url = response.get("signedURL") or response.get("signedUrl")
        if not url:
            raise StorageReadError(bucket, key, "storage returned no signed URL")
        return url

    @staticmethod
    def create_signed_upload_url(bucket: str, key: str) -> dict[str, str | None]:
        """
        Signed URL the browser can PUT the upload to.

        Returns:
            {"url": ..., "token": ...}
        """
        response = SupabaseClient.bucket(bucket).create_signed_upload_url(key)
        url = response.get("signed_url") or response.get("signedUrl") or response.get("signedURL")
        if not url:
            raise StorageWriteError(
                f"Storage returned no signed upload URL for {bucket}/{key}",
                details={"bucket": bucket, "key": key},
            )
        return {"url": url, "token": response.get("token")}
