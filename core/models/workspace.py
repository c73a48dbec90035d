# =============================================================================
# core/models/workspace.py - Workspace & Base Schemas
# =============================================================================
# These models define the API contract for workspaces and bases:
# - WorkspaceRole: Membership roles (owner, editor, viewer)
# - WorkspaceCreate / WorkspaceUpdate
# - BaseCreate / BaseUpdate: A base is one spreadsheet-like database
#
# Workspace -> Base -> Table -> Field / Record
# =============================================================================

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class WorkspaceRole(str, Enum):
    """
    Role of a user inside a workspace.

    - owner: Everything, including deleting bases and the workspace
    - editor: Create and edit bases, tables, fields and records
    - viewer: Read only
    """
    OWNER = "owner"
    EDITOR = "editor"
    VIEWER = "viewer"


# Roles allowed to change grid content
WRITE_ROLES = (WorkspaceRole.OWNER, WorkspaceRole.EDITOR)
OWNER_ONLY = (WorkspaceRole.OWNER,)
ANY_ROLE = tuple(WorkspaceRole)

# Picked when a base is created without an icon / color
BASE_ICONS = ["📊", "📈", "📋", "📝", "💼", "🎯", "🚀", "⚡", "🎨", "🔥"]
BASE_COLORS = ["#3b82f6", "#ef4444", "#10b981", "#f59e0b", "#8b5cf6", "#ec4899"]


class WorkspaceCreate(BaseModel):
    """
    Schema for creating a workspace.

    Example:
        {"name": "Acme Sales"}
    """
    name: str = Field(..., min_length=1, max_length=255, description="Workspace name")


class WorkspaceUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class WorkspaceResponse(BaseModel):
    """A workspace plus the caller's role in it."""
    id: UUID
    name: str
    owner_id: UUID
    role: WorkspaceRole | None = None
    created_at: datetime | None = None


class BaseCreate(BaseModel):
    """
    Schema for creating a base.

    Icon and color are optional; one is picked from the palette if omitted.

    Example:
        {"name": "Sales", "description": "Pipeline tracking"}
    """
    name: str = Field(..., min_length=1, max_length=255, description="Base name")
    description: str | None = Field(default=None, max_length=2000)
    icon: str | None = Field(default=None, max_length=16)
    color: str | None = Field(
        default=None,
        pattern=r"^#[0-9a-fA-F]{6}$",
        description="Hex color like #3b82f6"
    )


class BaseUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=2000)
    icon: str | None = Field(default=None, max_length=16)
    color: str | None = Field(default=None, pattern=r"^#[0-9a-fA-F]{6}$")


class BaseResponse(BaseModel):
    """A base as stored."""
    id: UUID
    workspace_id: UUID
    name: str
    description: str | None = None
    icon: str | None = None
    color: str | None = None
    created_by: UUID | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True
