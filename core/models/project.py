# =============================================================================
# core/models/project.py - Project Schemas
# =============================================================================
# A project is an app built with the AI builder inside a workspace.
# Archiving is a status change; archived projects don't count against the
# plan's project limit.
# =============================================================================

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class ProjectStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"
    DEPLOYED = "deployed"


class ProjectCreate(BaseModel):
    """
    Schema for creating a project.

    Example:
        {"workspace_id": "550e8400-...", "name": "CRM", "description": "Lead tracker"}
    """
    workspace_id: UUID
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=2000)


class ProjectUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=2000)
    deployment_url: str | None = Field(default=None, max_length=2048)


class ProjectResponse(BaseModel):
    id: UUID
    user_id: UUID
    workspace_id: UUID | None = None
    name: str
    description: str | None = None
    code_repository: str | None = None
    deployment_url: str | None = None
    status: ProjectStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True
