# =============================================================================
# app/routers/projects.py - Project Endpoints
# =============================================================================
# Projects are the apps the builder works on. They belong to the user who
# created them and sit in one of their workspaces.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path

from app.dependencies import CurrentUser
from core.models.project import ProjectCreate, ProjectUpdate
from core.services.project_service import ProjectService

router = APIRouter()


@router.get("/workspaces/{workspace_id}/projects")
async def list_projects(
    workspace_id: Annotated[UUID, Path(description="Workspace UUID")],
    user: CurrentUser,
):
    """List the user's projects in a workspace, newest first."""
    projects = ProjectService.list_projects(workspace_id, user.id)
    return {"projects": projects, "count": len(projects)}


@router.post("/projects", status_code=201)
async def create_project(request: ProjectCreate, user: CurrentUser):
    """
    Create a project.

    Raises:
        403: PLAN_LIMIT_REACHED when the plan's project limit is used up
    """
    return ProjectService.create_project(
        request.workspace_id,
        user.id,
        name=request.name,
        description=request.description,
    )


@router.get("/projects/{project_id}")
async def get_project(
    project_id: Annotated[UUID, Path(description="Project UUID")],
    user: CurrentUser,
):
    return ProjectService.get_project(project_id, user.id)


@router.patch("/projects/{project_id}")
async def update_project(
    project_id: Annotated[UUID, Path(description="Project UUID")],
    request: ProjectUpdate,
    user: CurrentUser,
):
    return ProjectService.update_project(
        project_id,
        user.id,
        name=request.name,
        description=request.description,
        deployment_url=request.deployment_url,
    )


@router.post("/projects/{project_id}/archive")
async def archive_project(
    project_id: Annotated[UUID, Path(description="Project UUID")],
    user: CurrentUser,
):
    """Archive a project. Archived projects stop counting against the plan."""
    return ProjectService.archive_project(project_id, user.id)
