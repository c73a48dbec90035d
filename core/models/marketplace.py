# =============================================================================
# core/models/marketplace.py - Blueprint Marketplace Schemas
# =============================================================================
# A blueprint is a reusable app template; installing it into a project
# records which version was installed so the install can be rolled back.
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class InstallStatus(str, Enum):
    """
    State machine:
        installed -> active -> rolled_back
                 \\-----------> rolled_back
    """
    INSTALLED = "installed"
    ACTIVE = "active"
    ROLLED_BACK = "rolled_back"


# Installs that can still be rolled back
ROLLBACKABLE = (InstallStatus.INSTALLED, InstallStatus.ACTIVE)


class BlueprintResponse(BaseModel):
    id: UUID
    name: str
    description: str
    category: str
    author_id: UUID | None = None
    code_template: dict[str, Any] = Field(default_factory=dict)
    config_schema: dict[str, Any] = Field(default_factory=dict)
    version: str
    price_cents: int = 0
    install_count: int = 0
    rating: float | None = None
    is_public: bool = False
    created_at: datetime | None = None


class BlueprintInstallRequest(BaseModel):
    """
    Install a blueprint into a project.

    Example:
        {"project_id": "550e8400-...", "config_values": {"currency": "EUR"}}
    """
    project_id: UUID
    config_values: dict[str, Any] = Field(default_factory=dict)


class BlueprintInstallResponse(BaseModel):
    id: UUID
    blueprint_id: UUID
    project_id: UUID
    user_id: UUID
    version_installed: str
    config_values: dict[str, Any] = Field(default_factory=dict)
    status: InstallStatus
    installed_at: datetime | None = None
    rolled_back_at: datetime | None = None
