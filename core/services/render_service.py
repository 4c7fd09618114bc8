# =============================================================================
# core/services/render_service.py - Render Orchestrator
# =============================================================================
# Runs one print render from start to finish:
#
#   fetch source -> normalize crop -> render raster -> compose PDF -> fan out
#
# State machine:
#   pending -> rendering -> completed
#                       \-> failed
#
# Any stage error aborts the remaining stages. Failures are logged and
# returned as a "failed" RenderOutcome; nothing is retried. Each call is
# independent: no caching, no deduplication, fresh timestamped keys.
# =============================================================================

import logging
from typing import Callable

from app.config import settings
from core.errors import RenderPipelineError
from core.models.render import (
    RenderErrorInfo,
    RenderOutcome,
    RenderRequest,
    RenderStatus,
)
from core.services.crop_service import normalize_crop
from core.services.output_service import OutputService
from core.services.page_service import PageService
from core.services.raster_service import RasterService
from core.services.storage_service import StorageService
from lib.utils import unix_millis

logger = logging.getLogger(__name__)

# Pipeline stages in execution order
STAGES = ("fetch", "crop", "raster", "page", "fanout")

StageCallback = Callable[[str, int, int], None]


class RenderService:
    """
    Orchestrates the render pipeline for one order at a time.

    Collaborators are injectable so the pipeline can run against an
    in-memory store and a fixed clock.

    Example:
        outcome = RenderService().run(request)
        if outcome.succeeded:
            print(outcome.result.hotfolder_key)
    """

    def __init__(
        self,
        storage=None,
        raster_service: RasterService | None = None,
        clock: Callable[[], int] | None = None,
        default_bucket: str | None = None,
    ):
        self.storage = storage or StorageService
        self.raster_service = raster_service or RasterService()
        self.clock = clock or unix_millis
        self.default_bucket = default_bucket or settings.STORAGE_BUCKET

    def run(
        self,
        request: RenderRequest,
        on_stage: StageCallback | None = None,
    ) -> RenderOutcome:
        """
        Render one request.

        Args:
            request: The render request
            on_stage: Optional callback(stage, step, total) called before
                each stage starts

        Returns:
            RenderOutcome, "completed" with the storage keys or "failed"
            with the originating error
        """
        bucket = request.bucket or self.default_bucket
        request_key = f"{bucket}/{request.object_key}"
        size = request.size

        status = RenderStatus.PENDING
        logger.info(
            f"Render {status.value}: {request_key} -> {size.width_mm}x{size.height_mm}mm "
            f"{request.output_format.value}, bleed {request.bleed_mm}mm"
        )

        stage = STAGES[0]

        def enter(name: str) -> None:
            nonlocal stage
            stage = name
            if on_stage:
                on_stage(name, STAGES.index(name) + 1, len(STAGES))

        status = RenderStatus.RENDERING
        try:
            enter("fetch")
            source = self.storage.download(bucket, request.object_key)

            enter("crop")
            crop = normalize_crop(request.crop, request.image_info)

            enter("raster")
            raster = self.raster_service.render(
                source,
                size,
                crop,
                output_format=request.output_format,
            )

            enter("page")
            timestamp_ms = self.clock()
            keys = OutputService.build_keys(
                size,
                request.bleed_mm,
                request.output_format,
                timestamp_ms,
            )
            page = PageService.compose(
                raster.data,
                size,
                bleed_mm=request.bleed_mm,
                filename_base=OutputService.page_filename_base(timestamp_ms),
            )

            enter("fanout")
            result = OutputService.fan_out(self.storage, bucket, raster, page, keys)

        except RenderPipelineError as e:
            status = RenderStatus.FAILED
            logger.error(
                f"Render {status.value} at stage '{e.stage}' for {request_key}: "
                f"[{e.code}] {e.message}"
            )
            return RenderOutcome(
                status=status,
                request_key=request_key,
                error=RenderErrorInfo(
                    code=e.code,
                    message=e.message,
                    stage=e.stage,
                    details=e.details,
                ),
            )

        except Exception as e:
            status = RenderStatus.FAILED
            logger.exception(f"Render {status.value} at stage '{stage}' for {request_key}: {e}")
            return RenderOutcome(
                status=status,
                request_key=request_key,
                error=RenderErrorInfo(
                    code="INTERNAL_ERROR",
                    message=str(e) or type(e).__name__,
                    stage=stage,
                ),
            )

        status = RenderStatus.COMPLETED
        logger.info(
            f"Render {status.value}: {request_key} -> {result.raster_key}, "
            f"{result.page_document_key}, {result.hotfolder_key}"
        )
        return RenderOutcome(status=status, request_key=request_key, result=result)
