# =============================================================================
# core/models/builder.py - AI Builder Schemas
# =============================================================================
# These models define the API contract for the AI app builder:
# - SessionMode: discussion (free brainstorming) or build (makes changes)
# - BuilderMessage: One chat message stored in ai_sessions.messages
# - PromptRequest / PromptTaskResponse: Queue a prompt, poll the task
# - ChangeRequestStatus: pending -> approved -> applied, or rejected
# - PipelineStage* : Rows of the project's build pipeline
#
# Flow:
# 1. POST /builder/sessions -> session with the mode's greeting
# 2. POST /builder/sessions/{id}/prompts -> task_id (Celery)
# 3. GET /tasks/{task_id} -> assistant message + pending change request
# 4. Approve / reject the change request, then apply it
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class SessionMode(str, Enum):
    """
    Builder session mode.

    - discussion: Plan features without touching the app or using credits
    - build: Generate code, log LLM usage and create change requests
    """
    DISCUSSION = "discussion"
    BUILD = "build"


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


# First assistant message of a session, per mode
SESSION_GREETINGS = {
    SessionMode.DISCUSSION: (
        "💭 **Discussion Mode**: Let's brainstorm and plan features without "
        "affecting your live app or using credits. What would you like to explore?"
    ),
    SessionMode.BUILD: (
        "🔨 **Build Mode**: I'll generate code and make real changes to your app. "
        "What would you like me to build?"
    ),
}


class ChangeRequestStatus(str, Enum):
    """
    State machine:
        pending -> approved -> applied
               \\-> rejected
    """
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    APPLIED = "applied"


class PipelineStageName(str, Enum):
    PLAN = "plan"
    CODE = "code"
    TEST = "test"
    REVIEW = "review"
    DEPLOY = "deploy"


class PipelineAgentType(str, Enum):
    ARCHITECT = "architect"
    CODER = "coder"
    TESTER = "tester"
    REVIEWER = "reviewer"
    DEPLOYER = "deployer"


class PipelineStageStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"
    BLOCKED = "blocked"


class LLMRequestStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    TIMEOUT = "timeout"


class BuilderMessage(BaseModel):
    """One message in a builder session."""
    role: MessageRole
    content: str
    timestamp: datetime | None = None


class SessionStart(BaseModel):
    """
    Start a builder session.

    Example:
        {"mode": "build", "project_id": "550e8400-..."}
    """
    mode: SessionMode = Field(default=SessionMode.DISCUSSION)
    project_id: UUID | None = Field(
        default=None,
        description="Project that change requests are filed against"
    )


class PromptRequest(BaseModel):
    """
    Send a prompt to the builder.

    Example:
        {"prompt": "Add a kanban view for leads"}
    """
    prompt: str = Field(..., min_length=1, max_length=5000)


class PromptTaskResponse(BaseModel):
    """Immediate response after queueing a prompt."""
    task_id: str = Field(..., description="Celery task ID to poll")
    session_id: str
    status: str = Field(default="queued")
    message: str = Field(default="Prompt queued for the builder")


class FileChange(BaseModel):
    """One file touched by a change request diff."""
    path: str
    action: str = Field(..., description="create, update or delete")
    content: str = ""


class ChangeRequestResponse(BaseModel):
    id: UUID
    session_id: UUID | None = None
    project_id: UUID
    diff: dict[str, Any] = Field(default_factory=dict)
    summary: str
    status: ChangeRequestStatus
    approved_by: UUID | None = None
    approved_at: datetime | None = None
    created_at: datetime | None = None


class PlatformMetrics(BaseModel):
    """Builder activity over the last 30 days."""
    llm_calls: int = 0
    total_cost_usd: float = 0.0
    running_stages: int = 0
    passed_stages: int = 0
