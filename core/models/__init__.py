# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - workspace.py: Workspaces, memberships and bases
# - grid.py: Tables, fields and records
# - subscription.py: Plans, subscriptions and usage
# - project.py: Projects built with the AI builder
# - builder.py: Builder sessions, change requests, pipeline stages
# - marketplace.py: Blueprints and installs
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Workspace Models
# -----------------------------------------------------------------------------
from .workspace import (
    BaseCreate,
    BaseResponse,
    BaseUpdate,
    WorkspaceCreate,
    WorkspaceResponse,
    WorkspaceRole,
    WorkspaceUpdate,
)

# -----------------------------------------------------------------------------
# Grid Models - Tables, fields, records
# -----------------------------------------------------------------------------
from .grid import (
    CellEdit,
    FieldCreate,
    FieldResponse,
    FieldType,
    FieldUpdate,
    MoveRequest,
    RecordCreate,
    RecordResponse,
    TableCreate,
    TableResponse,
    TableUpdate,
)

# -----------------------------------------------------------------------------
# Subscription Models
# -----------------------------------------------------------------------------
from .subscription import (
    LimitType,
    SubscriptionPlan,
    SubscriptionStatus,
    UsageItem,
    UsageSummary,
    UserSubscription,
)

# -----------------------------------------------------------------------------
# Project Models
# -----------------------------------------------------------------------------
from .project import (
    ProjectCreate,
    ProjectResponse,
    ProjectStatus,
    ProjectUpdate,
)

# -----------------------------------------------------------------------------
# Builder Models
# -----------------------------------------------------------------------------
from .builder import (
    BuilderMessage,
    ChangeRequestResponse,
    ChangeRequestStatus,
    FileChange,
    LLMRequestStatus,
    MessageRole,
    PipelineAgentType,
    PipelineStageName,
    PipelineStageStatus,
    PlatformMetrics,
    PromptRequest,
    PromptTaskResponse,
    SessionMode,
    SessionStart,
)

# -----------------------------------------------------------------------------
# Marketplace Models
# -----------------------------------------------------------------------------
from .marketplace import (
    BlueprintInstallRequest,
    BlueprintInstallResponse,
    BlueprintResponse,
    InstallStatus,
)

__all__ = [
    # Workspace
    "BaseCreate",
    "BaseResponse",
    "BaseUpdate",
    "WorkspaceCreate",
    "WorkspaceResponse",
    "WorkspaceRole",
    "WorkspaceUpdate",
    # Grid
    "CellEdit",
    "FieldCreate",
    "FieldResponse",
    "FieldType",
    "FieldUpdate",
    "MoveRequest",
    "RecordCreate",
    "RecordResponse",
    "TableCreate",
    "TableResponse",
    "TableUpdate",
    # Subscription
    "LimitType",
    "SubscriptionPlan",
    "SubscriptionStatus",
    "UsageItem",
    "UsageSummary",
    "UserSubscription",
    # Project
    "ProjectCreate",
    "ProjectResponse",
    "ProjectStatus",
    "ProjectUpdate",
    # Builder
    "BuilderMessage",
    "ChangeRequestResponse",
    "ChangeRequestStatus",
    "FileChange",
    "LLMRequestStatus",
    "MessageRole",
    "PipelineAgentType",
    "PipelineStageName",
    "PipelineStageStatus",
    "PlatformMetrics",
    "PromptRequest",
    "PromptTaskResponse",
    "SessionMode",
    "SessionStart",
    # Marketplace
    "BlueprintInstallRequest",
    "BlueprintInstallResponse",
    "BlueprintResponse",
    "InstallStatus",
]
