# =============================================================================
# app/routers/builder.py - AI Builder Endpoints
# =============================================================================
# Builder sessions, queued prompts and the change request workflow.
#
# Prompts are queued on Celery (ai_tasks queue) and polled through
# /tasks/{task_id}:
#   POST /builder/sessions/{id}/prompts  -> {task_id}
#   GET  /tasks/{task_id}                -> status / progress
#   GET  /tasks/{task_id}/result         -> assistant message + change request
#
# Change requests move pending -> approved -> applied, or pending -> rejected.
# =============================================================================

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, HTTPException, Path

from app.dependencies import CeleryDep, CurrentUser
from core.models.builder import PlatformMetrics, PromptRequest, PromptTaskResponse, SessionStart
from core.services.builder_service import BuilderService

logger = logging.getLogger(__name__)

router = APIRouter()

PROMPT_TASK = "workers.tasks.process_builder_prompt"
PROMPT_QUEUE = "ai_tasks"


# =============================================================================
# Sessions
# =============================================================================

@router.post("/builder/sessions", status_code=201)
async def start_session(user: CurrentUser, request: SessionStart | None = None):
    """
    Start a builder session.

    Discussion mode only talks; build mode turns prompts into change
    requests when the session has a project.
    """
    request = request or SessionStart()
    return BuilderService.start_session(user.id, request.mode, request.project_id)


@router.get("/builder/sessions/{session_id}")
async def get_session(
    session_id: Annotated[UUID, Path(description="Builder session UUID")],
    user: CurrentUser,
):
    """Get a session with its message history."""
    return BuilderService.get_session(session_id, user.id)


@router.post("/builder/sessions/{session_id}/end")
async def end_session(
    session_id: Annotated[UUID, Path(description="Builder session UUID")],
    user: CurrentUser,
):
    return BuilderService.end_session(session_id, user.id)


@router.post(
    "/builder/sessions/{session_id}/prompts",
    response_model=PromptTaskResponse,
    status_code=202,
)
async def submit_prompt(
    session_id: Annotated[UUID, Path(description="Builder session UUID")],
    request: PromptRequest,
    user: CurrentUser,
    celery: CeleryDep,
):
    """
    Queue a prompt for the builder.

    The session is checked before queueing so a missing or ended session
    fails here instead of inside the worker.

    Raises:
        404: Session not found
        400: BUILDER_SESSION_ENDED
        503: The task queue is unreachable
    """
    BuilderService.get_open_session(session_id, user.id)

    try:
        task = celery.send_task(
            PROMPT_TASK,
            args=[str(session_id), str(user.id), request.prompt],
            queue=PROMPT_QUEUE,
        )
    except Exception as e:
        logger.error(f"Failed to queue builder prompt for session {session_id}: {e}")
        raise HTTPException(
            status_code=503,
            detail=f"Failed to queue prompt. Is Redis running? Error: {e}",
        )

    logger.info(f"Queued builder prompt {task.id} for session {session_id}")
    return PromptTaskResponse(task_id=task.id, session_id=str(session_id))


# =============================================================================
# Change Requests
# =============================================================================

@router.get("/projects/{project_id}/changes")
async def list_pending_changes(
    project_id: Annotated[UUID, Path(description="Project UUID")],
    user: CurrentUser,
):
    """Pending change requests of a project, newest first."""
    changes = BuilderService.list_pending_changes(project_id, user.id)
    return {"changes": changes, "count": len(changes)}


@router.get("/changes/{change_id}")
async def get_change(
    change_id: Annotated[UUID, Path(description="Change request UUID")],
    user: CurrentUser,
):
    return BuilderService.get_change(change_id, user.id)


@router.post("/changes/{change_id}/approve")
async def approve_change(
    change_id: Annotated[UUID, Path(description="Change request UUID")],
    user: CurrentUser,
):
    """
    Approve a pending change request.

    Raises:
        409: CHANGE_REQUEST_STATE when it isn't pending any more
    """
    return BuilderService.approve_change(change_id, user.id)


@router.post("/changes/{change_id}/reject")
async def reject_change(
    change_id: Annotated[UUID, Path(description="Change request UUID")],
    user: CurrentUser,
):
    """Reject a pending change request."""
    return BuilderService.reject_change(change_id, user.id)


@router.post("/changes/{change_id}/apply")
async def apply_change(
    change_id: Annotated[UUID, Path(description="Change request UUID")],
    user: CurrentUser,
):
    """
    Apply an approved change request.

    Starts a "code" pipeline stage for the project and returns it with the
    applied change request.
    """
    return BuilderService.apply_change(change_id, user.id)


# =============================================================================
# Pipeline & Metrics
# =============================================================================

@router.get("/projects/{project_id}/pipeline")
async def list_pipeline_stages(
    project_id: Annotated[UUID, Path(description="Project UUID")],
    user: CurrentUser,
):
    stages = BuilderService.list_pipeline_stages(project_id, user.id)
    return {"stages": stages, "count": len(stages)}


@router.get("/builder/metrics", response_model=PlatformMetrics)
async def get_platform_metrics(user: CurrentUser):
    """LLM calls and cost over the last 30 days, plus pipeline stage counts."""
    return BuilderService.get_platform_metrics(user.id)
