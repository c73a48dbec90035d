# =============================================================================
# app/routers/workspaces.py - Workspace Endpoints
# =============================================================================
# Workspaces group bases and projects. Every member has a role; only the
# owner may rename or delete a workspace.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path

from app.dependencies import CurrentUser
from core.models.workspace import WorkspaceCreate, WorkspaceUpdate
from core.services.workspace_service import WorkspaceService

router = APIRouter()


@router.get("")
async def list_workspaces(user: CurrentUser):
    """
    List the workspaces the user belongs to, newest first.

    A user with no memberships gets a default workspace created on the fly.
    """
    workspaces = WorkspaceService.list_workspaces(user.id)
    return {"workspaces": workspaces, "count": len(workspaces)}


@router.post("", status_code=201)
async def create_workspace(request: WorkspaceCreate, user: CurrentUser):
    """Create a workspace owned by the current user."""
    return WorkspaceService.create_workspace(user.id, request.name)


@router.get("/{workspace_id}")
async def get_workspace(
    workspace_id: Annotated[UUID, Path(description="Workspace UUID")],
    user: CurrentUser,
):
    """Get a workspace with the caller's role."""
    return WorkspaceService.get_workspace(workspace_id, user.id)


@router.patch("/{workspace_id}")
async def rename_workspace(
    workspace_id: Annotated[UUID, Path(description="Workspace UUID")],
    request: WorkspaceUpdate,
    user: CurrentUser,
):
    """Rename a workspace. Owner only."""
    return WorkspaceService.rename_workspace(workspace_id, user.id, request.name)


@router.delete("/{workspace_id}")
async def delete_workspace(
    workspace_id: Annotated[UUID, Path(description="Workspace UUID")],
    user: CurrentUser,
):
    """
    Delete a workspace and everything in it. Owner only.

    Bases, tables, fields and records go with it through the database's
    cascading foreign keys.
    """
    WorkspaceService.delete_workspace(workspace_id, user.id)
    return {"id": str(workspace_id), "deleted": True}
