# =============================================================================
# app/routers/tasks.py - Task Status Endpoints
# =============================================================================
# Poll and cancel queued builder prompts.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Path
from pydantic import BaseModel

from app.dependencies import CeleryDep, CurrentUser

logger = logging.getLogger(__name__)

router = APIRouter()

FINISHED_STATES = ("SUCCESS", "FAILURE", "REVOKED")


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


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/{task_id}", response_model=TaskStatusResponse)
async def get_task_status(
    task_id: Annotated[str, Path(description="Celery task ID")],
    user: CurrentUser,
    celery: CeleryDep,
):
    """
    Get the status of a background task.

    Returns the current state of the task:
    - PENDING: Task is waiting in queue
    - STARTED: Task has been picked up by a worker
    - PROGRESS: Task is running (includes progress percentage)
    - SUCCESS: Task completed (the builder's answer is in result)
    - FAILURE: Task crashed

    A prompt the builder refused (ended session, timeout, agent error)
    still finishes as SUCCESS with result.success = false.
    """
    try:
        result = celery.AsyncResult(task_id)
        response = TaskStatusResponse(task_id=task_id, status=result.status)

        if result.status == "PROGRESS":
            info = result.info or {}
            response.progress = info.get("percent", 0)
            response.message = info.get("message", "Processing...")

        elif result.status == "SUCCESS":
            response.result = result.result
            response.progress = 100
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


@router.get("/{task_id}/result")
async def get_task_result(
    task_id: Annotated[str, Path(description="Celery task ID")],
    user: CurrentUser,
    celery: CeleryDep,
):
    """
    Get the result of a completed task.

    Only returns data if task status is SUCCESS.
    For other states, returns status info.
    """
    try:
        result = celery.AsyncResult(task_id)

        if result.status == "SUCCESS":
            return {"task_id": task_id, "status": "SUCCESS", "result": result.result}

        if result.status == "FAILURE":
            return {
                "task_id": task_id,
                "status": "FAILURE",
                "error": str(result.result) if result.result else "Unknown error",
            }

        return {
            "task_id": task_id,
            "status": result.status,
            "message": "Task not yet complete",
        }

    except Exception as e:
        logger.error(f"Error getting task result: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to get task result: {e}")


@router.delete("/{task_id}")
async def cancel_task(
    task_id: Annotated[str, Path(description="Celery task ID")],
    user: CurrentUser,
    celery: CeleryDep,
):
    """
    Cancel a queued or running prompt.

    Only works for tasks that haven't finished yet.
    """
    try:
        result = celery.AsyncResult(task_id)

        if result.status in FINISHED_STATES:
            return {
                "task_id": task_id,
                "message": f"Task already {result.status.lower()}, cannot cancel",
                "cancelled": False,
            }

        result.revoke(terminate=True)
        logger.info(f"Cancelled task {task_id}")

        return {"task_id": task_id, "message": "Task cancelled", "cancelled": True}

    except Exception as e:
        logger.error(f"Error cancelling task: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to cancel task: {e}")
