# =============================================================================
# core/services/builder_service.py - AI Builder Business Logic
# =============================================================================
# Sessions, prompt handling and the change request workflow.
#
# Prompt flow (run by the Celery worker):
#   1. Append the user message
#   2. Submit to the builder agent, wait up to BUILDER_TIMEOUT_SECONDS
#   3. Build mode: log the LLM call, meter an ai_generation usage event and,
#      when the session has a project, file a pending change request
#   4. Append the assistant message and count the credit
#
# Change requests: pending -> approved -> applied, or pending -> rejected.
# Applying records a running "code" pipeline stage.
# =============================================================================

import logging
from concurrent.futures import TimeoutError as FuturesTimeoutError
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import utc_now_iso
from app.config import settings
from app.exceptions import (
    BuilderAgentError,
    BuilderSessionEndedError,
    BuilderSessionNotFoundError,
    BuilderTimeoutError,
    ChangeRequestNotFoundError,
    ChangeRequestStateError,
    ProjectNotFoundError,
)
from agents.builder import (
    BuilderAgent,
    BuilderError,
    BuildRequest,
    BuildResult,
    estimate_tokens,
    get_builder_agent,
)
from core.models.builder import (
    SESSION_GREETINGS,
    ChangeRequestStatus,
    LLMRequestStatus,
    MessageRole,
    PipelineAgentType,
    PipelineStageName,
    PipelineStageStatus,
    SessionMode,
)
from core.services.project_service import ProjectService

logger = logging.getLogger(__name__)

# Credits charged per build prompt
BUILD_CREDIT = 1
METRICS_WINDOW_DAYS = 30
USAGE_EVENT_AI_GENERATION = "ai_generation"


def _message(role: MessageRole, content: str) -> dict[str, Any]:
    return {"role": role.value, "content": content, "timestamp": utc_now_iso()}


class BuilderService:
    """
    Service for AI builder sessions and change requests.
    """

    # -------------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------------

    @staticmethod
    def start_session(
        user_id: str | UUID,
        mode: SessionMode | str = SessionMode.DISCUSSION,
        project_id: str | UUID | None = None,
    ) -> dict[str, Any]:
        """
        Start a builder session with the mode's greeting as first message.

        Raises:
            ProjectNotFoundError: If project_id isn't the user's
            ProjectArchivedError: If the project is archived
        """
        mode = SessionMode(mode)
        if project_id:
            ProjectService.get_active_project(project_id, user_id)

        session = SupabaseClient.insert_row(
            "ai_sessions",
            {
                "project_id": str(project_id) if project_id else None,
                "user_id": str(user_id),
                "session_type": mode.value,
                "messages": [_message(MessageRole.ASSISTANT, SESSION_GREETINGS[mode])],
                "credits_consumed": 0,
            },
        )
        logger.info(f"Started {mode.value} session: {session['id']} for user: {user_id}")
        return session

    @staticmethod
    def get_session(session_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """
        Get a session owned by the user.

        Raises:
            BuilderSessionNotFoundError: If it doesn't exist or isn't the user's
        """
        session = SupabaseClient.fetch_row("ai_sessions", session_id)
        if not session or str(session.get("user_id")) != str(user_id):
            raise BuilderSessionNotFoundError(str(session_id))
        return session

    @staticmethod
    def get_open_session(session_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """Get a session that hasn't ended yet."""
        session = BuilderService.get_session(session_id, user_id)
        if session.get("ended_at"):
            raise BuilderSessionEndedError(str(session_id))
        return session

    @staticmethod
    def end_session(session_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """Mark a session as ended. Ending twice keeps the first timestamp."""
        session = BuilderService.get_session(session_id, user_id)
        if session.get("ended_at"):
            return session

        updated = SupabaseClient.update_row(
            "ai_sessions", session_id, {"ended_at": utc_now_iso()}
        )
        logger.info(f"Ended session: {session_id}")
        return updated or session

    # -------------------------------------------------------------------------
    # Prompts
    # -------------------------------------------------------------------------

    @staticmethod
    def submit_prompt(
        session_id: str | UUID,
        user_id: str | UUID,
        prompt: str,
        agent: BuilderAgent | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """
        Send a prompt to the builder agent and record the outcome.

        Args:
            session_id: Open session of the user
            user_id: Acting user
            prompt: What the user asked for
            agent: Builder agent (default: the configured one)
            timeout: Seconds to wait (default: BUILDER_TIMEOUT_SECONDS)

        Returns:
            {"session_id", "message", "change_request", "credits_consumed"}

        Raises:
            BuilderTimeoutError: If the agent doesn't answer in time
            BuilderAgentError: If the agent fails
        """
        session = BuilderService.get_open_session(session_id, user_id)
        mode = SessionMode(session["session_type"])
        project_id = session.get("project_id")
        agent = agent or get_builder_agent()
        timeout = timeout if timeout is not None else settings.BUILDER_TIMEOUT_SECONDS

        project_name = None
        if project_id:
            project_name = ProjectService.get_project(project_id, user_id).get("name")

        history = [
            {"role": m["role"], "content": m["content"]}
            for m in (session.get("messages") or [])
        ]
        messages = list(session.get("messages") or [])
        messages.append(_message(MessageRole.USER, prompt))

        request = BuildRequest(
            session_id=str(session_id),
            user_id=str(user_id),
            project_id=str(project_id) if project_id else None,
            project_name=project_name,
            mode=mode,
            prompt=prompt,
            history=history,
        )

        future = agent.submit(request)
        try:
            result = future.result(timeout=timeout)

        except FuturesTimeoutError:
            future.cancel()
            logger.warning(f"Builder timed out after {timeout}s for session {session_id}")
            BuilderService._log_llm_request(
                user_id, project_id, getattr(agent, "model", agent.name), prompt,
                status=LLMRequestStatus.TIMEOUT,
                latency_ms=int(timeout * 1000),
                error_message=f"No response within {timeout}s",
            )
            SupabaseClient.update_row("ai_sessions", session_id, {"messages": messages})
            raise BuilderTimeoutError(str(session_id), timeout)

        except BuilderError as e:
            logger.error(f"Builder failed for session {session_id}: {e}")
            BuilderService._log_llm_request(
                user_id, project_id, getattr(agent, "model", agent.name), prompt,
                status=LLMRequestStatus.ERROR,
                error_message=e.message,
            )
            SupabaseClient.update_row("ai_sessions", session_id, {"messages": messages})
            raise BuilderAgentError(e.message, details={"code": e.code, **e.details})

        change_request = None
        credits = session.get("credits_consumed") or 0

        if mode == SessionMode.BUILD:
            BuilderService._log_llm_request(user_id, project_id, result.model, prompt, result=result)
            SupabaseClient.call_rpc(
                "track_usage_event",
                {
                    "p_user_id": str(user_id),
                    "p_event_type": USAGE_EVENT_AI_GENERATION,
                    "p_quantity": 1,
                    "p_metadata": {"session_id": str(session_id), "mode": mode.value},
                },
            )
            if project_id:
                change_request = SupabaseClient.insert_row(
                    "change_requests",
                    {
                        "session_id": str(session_id),
                        "project_id": str(project_id),
                        "diff": result.diff(),
                        "summary": result.summary,
                        "status": ChangeRequestStatus.PENDING.value,
                    },
                )
                logger.info(f"Filed change request: {change_request['id']} for project: {project_id}")
            credits += BUILD_CREDIT

        content = result.summary
        if change_request:
            content += "\n\nReview the pending change request to apply it."
        assistant_message = _message(MessageRole.ASSISTANT, content)
        messages.append(assistant_message)

        SupabaseClient.update_row(
            "ai_sessions",
            session_id,
            {"messages": messages, "credits_consumed": credits},
        )

        return {
            "session_id": str(session_id),
            "message": assistant_message,
            "change_request": change_request,
            "credits_consumed": credits,
        }

    @staticmethod
    def _log_llm_request(
        user_id: str | UUID,
        project_id: str | UUID | None,
        model: str,
        prompt: str,
        result: BuildResult | None = None,
        status: LLMRequestStatus = LLMRequestStatus.SUCCESS,
        latency_ms: int = 0,
        error_message: str | None = None,
    ) -> dict[str, Any]:
        """Insert one llm_requests row."""
        if result is not None:
            prompt_tokens = result.prompt_tokens
            completion_tokens = result.completion_tokens
            cost_usd = result.cost_usd
            latency_ms = result.latency_ms
        else:
            prompt_tokens = estimate_tokens(prompt)
            completion_tokens = 0
            cost_usd = 0.0

        return SupabaseClient.insert_row(
            "llm_requests",
            {
                "user_id": str(user_id),
                "project_id": str(project_id) if project_id else None,
                "model": model,
                "prompt_tokens": prompt_tokens,
                "completion_tokens": completion_tokens,
                "total_tokens": prompt_tokens + completion_tokens,
                "cost_usd": cost_usd,
                "latency_ms": latency_ms,
                "status": status.value,
                "error_message": error_message,
            },
        )

    # -------------------------------------------------------------------------
    # Change Requests
    # -------------------------------------------------------------------------

    @staticmethod
    def get_change(change_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """
        Get a change request on one of the user's projects.

        Raises:
            ChangeRequestNotFoundError: If it doesn't exist or isn't reachable
        """
        change = SupabaseClient.fetch_row("change_requests", change_id)
        if not change:
            raise ChangeRequestNotFoundError(str(change_id))
        try:
            ProjectService.get_project(change["project_id"], user_id)
        except ProjectNotFoundError:
            raise ChangeRequestNotFoundError(str(change_id))
        return change

    @staticmethod
    def list_pending_changes(project_id: str | UUID, user_id: str | UUID) -> list[dict[str, Any]]:
        """Pending change requests of a project, newest first."""
        ProjectService.get_project(project_id, user_id)
        return SupabaseClient.fetch_rows(
            "change_requests",
            {"project_id": str(project_id), "status": ChangeRequestStatus.PENDING.value},
            order_by="created_at",
            desc=True,
        )

    @staticmethod
    def _transition(
        change_id: str | UUID,
        user_id: str | UUID,
        expected: ChangeRequestStatus,
        update_data: dict[str, Any],
        action: str,
    ) -> dict[str, Any]:
        """
        Move a change request out of `expected`.

        The update is filtered on the expected status too, so two reviewers
        acting at once can't both succeed.

        Raises:
            ChangeRequestStateError: If the request isn't in `expected`
        """
        change = BuilderService.get_change(change_id, user_id)
        if change["status"] != expected.value:
            raise ChangeRequestStateError(str(change_id), change["status"], action)

        rows = SupabaseClient.update_rows(
            "change_requests",
            update_data,
            {"id": str(change_id), "status": expected.value},
        )
        if not rows:
            current = SupabaseClient.fetch_row("change_requests", change_id) or change
            raise ChangeRequestStateError(str(change_id), current["status"], action)

        logger.info(f"Change request {change_id}: {expected.value} -> {update_data['status']}")
        return rows[0]

    @staticmethod
    def approve_change(change_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """Approve a pending change request."""
        return BuilderService._transition(
            change_id,
            user_id,
            ChangeRequestStatus.PENDING,
            {
                "status": ChangeRequestStatus.APPROVED.value,
                "approved_by": str(user_id),
                "approved_at": utc_now_iso(),
            },
            action="approve",
        )

    @staticmethod
    def reject_change(change_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """Reject a pending change request."""
        return BuilderService._transition(
            change_id,
            user_id,
            ChangeRequestStatus.PENDING,
            {"status": ChangeRequestStatus.REJECTED.value},
            action="reject",
        )

    @staticmethod
    def apply_change(change_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """
        Apply an approved change request.

        Records a running "code" pipeline stage for the project.

        Returns:
            {"change_request": ..., "pipeline_stage": ...}
        """
        change = BuilderService._transition(
            change_id,
            user_id,
            ChangeRequestStatus.APPROVED,
            {"status": ChangeRequestStatus.APPLIED.value},
            action="apply",
        )

        stage = SupabaseClient.insert_row(
            "pipeline_stages",
            {
                "project_id": change["project_id"],
                "stage_name": PipelineStageName.CODE.value,
                "agent_type": PipelineAgentType.CODER.value,
                "status": PipelineStageStatus.RUNNING.value,
                "output": {"change_request_id": str(change_id)},
                "gate_status": "open",
            },
        )
        logger.info(f"Applied change request {change_id}, pipeline stage: {stage['id']}")
        return {"change_request": change, "pipeline_stage": stage}

    # -------------------------------------------------------------------------
    # Pipeline & Metrics
    # -------------------------------------------------------------------------

    @staticmethod
    def list_pipeline_stages(project_id: str | UUID, user_id: str | UUID) -> list[dict[str, Any]]:
        """Pipeline stages of a project, oldest first."""
        ProjectService.get_project(project_id, user_id)
        return SupabaseClient.fetch_rows(
            "pipeline_stages",
            {"project_id": str(project_id)},
            order_by="created_at",
        )

    @staticmethod
    def get_platform_metrics(user_id: str | UUID) -> dict[str, Any]:
        """
        LLM calls and cost over the last 30 days, plus running and passed
        pipeline stages across the user's projects.
        """
        since = (datetime.now(timezone.utc) - timedelta(days=METRICS_WINDOW_DAYS)).isoformat()
        llm_requests = SupabaseClient.fetch_rows(
            "llm_requests",
            {"user_id": str(user_id)},
            gte={"created_at": since},
            columns="cost_usd, status",
        )

        projects = SupabaseClient.fetch_rows(
            "projects", {"user_id": str(user_id)}, columns="id"
        )
        project_ids = [p["id"] for p in projects]

        return {
            "llm_calls": len(llm_requests),
            "total_cost_usd": round(sum(float(r.get("cost_usd") or 0) for r in llm_requests), 6),
            "running_stages": SupabaseClient.count_rows(
                "pipeline_stages",
                {"status": PipelineStageStatus.RUNNING.value},
                in_filters={"project_id": project_ids},
            ),
            "passed_stages": SupabaseClient.count_rows(
                "pipeline_stages",
                {"status": PipelineStageStatus.PASSED.value},
                in_filters={"project_id": project_ids},
            ),
        }
