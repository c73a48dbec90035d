# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Defines background tasks for the AI app builder.
#
# Tasks:
# - process_builder_prompt: Send one prompt through BuilderService
# =============================================================================

import logging
from typing import Any
from celery import shared_task, current_task

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
    if current_task:
        current_task.update_state(
            state="PROGRESS",
            meta={
                "current": current,
                "total": total,
                "percent": int((current / total) * 100),
                "message": message,
            }
        )


# =============================================================================
# Builder Prompt Task
# =============================================================================

@shared_task(bind=True, name="workers.tasks.process_builder_prompt", acks_late=False)
def process_builder_prompt(
    self,
    session_id: str,
    user_id: str,
    prompt: str,
) -> dict[str, Any]:
    """
    Process one builder prompt.

    Waits on the builder agent (bounded by BUILDER_TIMEOUT_SECONDS), then
    records the LLM call, usage event and change request as BuilderService
    does for the session's mode.

    Args:
        session_id: The builder session UUID
        user_id: The user who sent the prompt
        prompt: The prompt text

    Returns:
        Dict with:
        - success: bool
        - message: Assistant message (if successful)
        - change_request: Pending change request or None
        - credits_consumed: Session credit total
        - error / code / suggestion: When the request was refused or failed
    """
    logger.info(f"Processing builder prompt for session {session_id}: {prompt[:50]}...")

    from app.exceptions import GridbaseException
    from core.services.builder_service import BuilderService
    from lib.utils import ApplicationError

    update_progress(1, 2, "Generating...")

    try:
        result = BuilderService.submit_prompt(session_id, user_id, prompt)

    except (GridbaseException, ApplicationError) as e:
        logger.warning(f"Builder prompt failed for session {session_id}: [{e.code}] {e.message}")
        return {
            "success": False,
            "error": e.message,
            "code": e.code,
            "suggestion": e.suggestion,
        }

    update_progress(2, 2, "Saving...")
    logger.info(f"Builder prompt done for session {session_id}")
    return {"success": True, **result}
