# =============================================================================
# app/routers/tasks.py - Task Status Endpoints
# =============================================================================
# Provides endpoints for checking render task status and results.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Path, HTTPException
from pydantic import BaseModel

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class TaskStatusResponse(BaseModel):
    """Response model for task status."""
    task_id: str
    status: str
    progress: int | None = None
    message: str | None = None
    result: dict | None = None
    error: str | None = None


class TaskSubmitResponse(BaseModel):
    """Response model for task submission."""
    task_id: str
    status: str
    message: str


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/{task_id}", response_model=TaskStatusResponse)
async def get_task_status(
    task_id: Annotated[str, Path(description="Celery task ID")]
):
    """
    Get the status of a render task.

    Returns the current state of the task:
    - PENDING: Task is waiting in queue
    - STARTED: Task has been picked up by a worker
    - PROGRESS: Task is running (includes the current pipeline stage)
    - SUCCESS: Task finished; result holds the RenderOutcome
    - FAILURE: Task crashed outside the pipeline

    A render that failed inside the pipeline still ends in SUCCESS with
    result.status == "failed" and result.error set.
    """
    try:
        from workers.celery_app import celery_app

        result = celery_app.AsyncResult(task_id)

        response = TaskStatusResponse(
            task_id=task_id,
            status=result.status,
        )

        # Add details based on state
        if result.status == "PROGRESS":
            info = result.info or {}
            response.progress = info.get("percent", 0)
            response.message = info.get("message", "Rendering...")

        elif result.status == "SUCCESS":
            response.result = result.result
            response.progress = 100
            outcome = result.result or {}
            if outcome.get("status") == "failed":
                response.message = "Render failed"
                response.error = (outcome.get("error") or {}).get("message")
            else:
                response.message = "Complete"

        elif result.status == "FAILURE":
            response.error = str(result.result) if result.result else "Unknown error"
            response.message = "Failed"

        elif result.status == "PENDING":
            response.progress = 0
            response.message = "Waiting in queue..."

        elif result.status == "STARTED":
            response.progress = 0
            response.message = "Starting..."

        return response

    except Exception as e:
        logger.error(f"Error getting task status: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to get task status: {e}")


@router.post("/healthcheck", response_model=TaskSubmitResponse)
async def submit_healthcheck_task():
    """
    Submit a healthcheck task to verify a worker is consuming.

    Returns a task_id that can be used to check status.
    """
    try:
        from workers.celery_app import healthcheck

        result = healthcheck.delay()

        return TaskSubmitResponse(
            task_id=result.id,
            status="PENDING",
            message="Healthcheck submitted. Use GET /api/v1/tasks/{task_id} to check status.",
        )

    except Exception as e:
        logger.error(f"Error submitting healthcheck task: {e}")
        raise HTTPException(
            status_code=503,
            detail=f"Failed to submit task. Is Redis running? Error: {e}"
        )
