# =============================================================================
# app/routers/bases.py - Base Endpoints
# =============================================================================
# Bases live in a workspace and hold tables. Creating one counts against
# the user's plan limit.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path

from app.dependencies import CurrentUser
from core.models.workspace import BaseCreate, BaseUpdate
from core.services.base_service import BaseService

router = APIRouter()


@router.get("/workspaces/{workspace_id}/bases")
async def list_bases(
    workspace_id: Annotated[UUID, Path(description="Workspace UUID")],
    user: CurrentUser,
):
    """List the bases in a workspace, newest first."""
    bases = BaseService.list_bases(workspace_id, user.id)
    return {"bases": bases, "count": len(bases)}


@router.post("/workspaces/{workspace_id}/bases", status_code=201)
async def create_base(
    workspace_id: Annotated[UUID, Path(description="Workspace UUID")],
    request: BaseCreate,
    user: CurrentUser,
):
    """
    Create a base.

    Requires the owner or editor role. Icon and color are picked at random
    when not given.

    Raises:
        403: PLAN_LIMIT_REACHED when the plan's base limit is used up
    """
    return BaseService.create_base(
        workspace_id,
        user.id,
        name=request.name,
        description=request.description,
        icon=request.icon,
        color=request.color,
    )


@router.get("/bases/{base_id}")
async def get_base(
    base_id: Annotated[UUID, Path(description="Base UUID")],
    user: CurrentUser,
):
    return BaseService.get_base(base_id, user.id)


@router.patch("/bases/{base_id}")
async def update_base(
    base_id: Annotated[UUID, Path(description="Base UUID")],
    request: BaseUpdate,
    user: CurrentUser,
):
    """Update a base's name, description, icon or color."""
    return BaseService.update_base(
        base_id,
        user.id,
        name=request.name,
        description=request.description,
        icon=request.icon,
        color=request.color,
    )


@router.delete("/bases/{base_id}")
async def delete_base(
    base_id: Annotated[UUID, Path(description="Base UUID")],
    user: CurrentUser,
):
    """Delete a base with its tables. Owner only."""
    BaseService.delete_base(base_id, user.id)
    return {"id": str(base_id), "deleted": True}
