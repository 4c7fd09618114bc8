# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Defines background tasks for print rendering.
#
# Tasks:
# - render_order: Full render pipeline for one paid order
#   (fetch -> crop -> raster -> page -> fanout)
#
# A failed render is not retried. The task returns the RenderOutcome with
# status "failed"; the failure is visible in the worker log and through
# GET /api/v1/tasks/{task_id}.
# =============================================================================

import logging
from typing import Any

from celery import current_task, shared_task

logger = logging.getLogger(__name__)


# =============================================================================
# Task State Updates
# =============================================================================

def update_progress(current: int, total: int, message: str = "Processing..."):
    """
    Update task progress for polling.

    Args:
        current: Current step number
        total: Total steps
        message: Status message
    """
    if current_task and current_task.request.id:
        current_task.update_state(
            state="PROGRESS",
            meta={
                "current": current,
                "total": total,
                "percent": int((current / total) * 100),
                "message": message,
            }
        )


STAGE_MESSAGES = {
    "fetch": "Downloading source image...",
    "crop": "Mapping crop to source resolution...",
    "raster": "Rendering print raster...",
    "page": "Composing print PDF...",
    "fanout": "Writing outputs...",
}


def _report_stage(stage: str, step: int, total: int) -> None:
    update_progress(step, total, STAGE_MESSAGES.get(stage, stage))


# =============================================================================
# Render Task
# =============================================================================

def run_render(payload: dict[str, Any], report_progress: bool = False) -> dict[str, Any]:
    """
    Validate a serialized RenderRequest and run the pipeline.

    Shared by the Celery task and the inline (in-process) dispatch mode.

    Args:
        payload: RenderRequest.model_dump(mode="json")
        report_progress: Publish per-stage progress to the task backend

    Returns:
        RenderOutcome as a JSON-serializable dict
    """
    from core.models.render import RenderRequest
    from core.services.render_service import RenderService

    request = RenderRequest.model_validate(payload)
    outcome = RenderService().run(
        request,
        on_stage=_report_stage if report_progress else None,
    )

    if outcome.succeeded:
        logger.info(f"Rendered production files for {outcome.request_key}: {outcome.result.model_dump()}")
    else:
        logger.error(
            f"Render failed for {outcome.request_key}: "
            f"[{outcome.error.code}] {outcome.error.message}"
        )

    return outcome.model_dump(mode="json")


@shared_task(bind=True, name="workers.tasks.render_order", max_retries=0)
def render_order(self, payload: dict[str, Any]) -> dict[str, Any]:
    """
    Render the print files for one paid order.

    Args:
        payload: Serialized RenderRequest

    Returns:
        Dict with:
        - status: "completed" or "failed"
        - request_key: bucket/object key of the source
        - result: raster_key, page_document_key, hotfolder_key (if completed)
        - error: code, message, stage, details (if failed)
    """
    logger.info(f"Render task {self.request.id} for {payload.get('object_key')}")
    return run_render(payload, report_progress=True)
