# =============================================================================
# app/routers/marketplace.py - Blueprint Marketplace Endpoints
# =============================================================================
# Browse public blueprints, install one into a project and roll an install
# back.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query

from app.auth import AuthUser, get_current_user_optional
from app.dependencies import CurrentUser
from core.models.marketplace import BlueprintInstallRequest
from core.services.marketplace_service import MarketplaceService

router = APIRouter()


@router.get("/blueprints")
async def list_blueprints(
    category: Annotated[str | None, Query(description="Only this category")] = None,
):
    """Public blueprints, most installed first. No login needed."""
    blueprints = MarketplaceService.list_blueprints(category)
    return {"blueprints": blueprints, "count": len(blueprints)}


@router.get("/blueprints/{blueprint_id}")
async def get_blueprint(
    blueprint_id: Annotated[UUID, Path(description="Blueprint UUID")],
    user: AuthUser | None = Depends(get_current_user_optional),
):
    """
    Get a blueprint.

    Private blueprints are only visible to their author.
    """
    return MarketplaceService.get_blueprint(blueprint_id, user.id if user else None)


@router.post("/blueprints/{blueprint_id}/install", status_code=201)
async def install_blueprint(
    blueprint_id: Annotated[UUID, Path(description="Blueprint UUID")],
    request: BlueprintInstallRequest,
    user: CurrentUser,
):
    """
    Install a blueprint into one of the user's projects.

    Raises:
        400: PROJECT_ARCHIVED
    """
    return MarketplaceService.install_blueprint(
        blueprint_id,
        request.project_id,
        user.id,
        config_values=request.config_values,
    )


@router.get("/projects/{project_id}/installs")
async def list_installs(
    project_id: Annotated[UUID, Path(description="Project UUID")],
    user: CurrentUser,
):
    installs = MarketplaceService.list_installs(project_id, user.id)
    return {"installs": installs, "count": len(installs)}


@router.post("/installs/{install_id}/rollback")
async def rollback_install(
    install_id: Annotated[UUID, Path(description="Install UUID")],
    user: CurrentUser,
):
    """
    Roll back an install.

    Raises:
        409: INSTALL_STATE when it's already rolled back
    """
    return MarketplaceService.rollback_install(install_id, user.id)
