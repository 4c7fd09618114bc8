# =============================================================================
# core/errors.py - Render Pipeline Errors
# =============================================================================
# Every stage of the render pipeline fails fast with one of these errors.
# The orchestrator (RenderService) turns them into a "failed" outcome.
#
# Each error records the pipeline stage it came from, so the log line
# for a failed order points straight at the step that broke.
# =============================================================================

from typing import Any

from lib.utils import ApplicationError


class RenderPipelineError(ApplicationError):
    """Base class for all render pipeline failures."""

    stage: str = "render"

    def __init__(
        self,
        message: str,
        code: str = "RENDER_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
        stage: str | None = None,
    ):
        super().__init__(message, code=code, suggestion=suggestion, details=details)
        if stage is not None:
            self.stage = stage

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["stage"] = self.stage
        return result


# =============================================================================
# Input Errors
# =============================================================================

class InvalidInputError(RenderPipelineError):
    """Raised for malformed render requests (missing sizes, degenerate crops)."""

    stage = "request"

    def __init__(self, message: str, details: dict[str, Any] | None = None, stage: str | None = None):
        super().__init__(
            message,
            code="INVALID_INPUT",
            suggestion="Check objectKey, wmm, hmm and the cropArea/imageInfo metadata of the order",
            details=details,
            stage=stage,
        )


# =============================================================================
# Storage Errors
# =============================================================================

class SourceNotFoundError(RenderPipelineError):
    """Raised when the uploaded source image does not exist in storage."""

    stage = "fetch"

    def __init__(self, bucket: str, key: str):
        super().__init__(
            f"Source object not found: {bucket}/{key}",
            code="NOT_FOUND",
            suggestion="Verify the upload finished before checkout and the objectKey is correct",
            details={"bucket": bucket, "key": key},
        )


class StorageReadError(RenderPipelineError):
    """Raised when the storage backend fails while reading an object."""

    stage = "fetch"

    def __init__(self, bucket: str, key: str, error: str):
        super().__init__(
            f"Failed to download {bucket}/{key}: {error}",
            code="STORAGE_READ_ERROR",
            suggestion="Check storage availability and credentials",
            details={"bucket": bucket, "key": key, "error": error},
        )


class StorageWriteError(RenderPipelineError):
    """Raised when an object cannot be written to storage."""

    stage = "fanout"

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message,
            code="WRITE_ERROR",
            suggestion="Check storage availability; outputs use unique keys, so re-rendering is safe",
            details=details,
        )


class FanoutError(StorageWriteError):
    """
    Raised after the output fanout when one or more writes failed.

    The writes are independent, so some keys may already exist in
    storage. Both lists are kept for the operator.
    """

    def __init__(self, written: dict[str, str], failures: dict[str, str]):
        super().__init__(
            f"{len(failures)} of {len(written) + len(failures)} output writes failed",
            details={"written": written, "failures": failures},
        )
        self.written = written
        self.failures = failures


# =============================================================================
# Raster Errors
# =============================================================================

class DecodeError(RenderPipelineError):
    """Raised when the source bytes are not a readable image."""

    stage = "raster"

    def __init__(self, error: str):
        super().__init__(
            f"Could not decode source image: {error}",
            code="DECODE_ERROR",
            suggestion="Make sure the upload is a complete JPEG, PNG, WebP or TIFF file",
            details={"error": error},
        )


class OutOfBoundsError(RenderPipelineError):
    """Raised when the crop rectangle extends past the source image."""

    stage = "raster"

    def __init__(self, rect: tuple[int, int, int, int], image_size: tuple[int, int]):
        left, top, width, height = rect
        super().__init__(
            f"Crop {width}x{height}+{left}+{top} exceeds image bounds {image_size[0]}x{image_size[1]}",
            code="OUT_OF_BOUNDS",
            suggestion="Check that imageInfo matches the uploaded file and the crop was taken on the same image",
            details={
                "left": left,
                "top": top,
                "width": width,
                "height": height,
                "image_width": image_size[0],
                "image_height": image_size[1],
            },
        )


class EncodeError(RenderPipelineError):
    """Raised when the raster encoder fails."""

    stage = "raster"

    def __init__(self, output_format: str, error: str):
        super().__init__(
            f"Failed to encode {output_format} raster: {error}",
            code="ENCODE_ERROR",
            details={"format": output_format, "error": error},
        )


# =============================================================================
# Page Errors
# =============================================================================

class EmbedError(RenderPipelineError):
    """Raised when the raster cannot be embedded into the print PDF."""

    stage = "page"

    def __init__(self, error: str):
        super().__init__(
            f"Failed to embed raster into page document: {error}",
            code="EMBED_ERROR",
            suggestion="The page composer accepts JPEG or PNG rasters only",
            details={"error": error},
        )
