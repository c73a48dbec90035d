# =============================================================================
# core/services/project_service.py - Project Business Logic
# =============================================================================
# Projects are apps built with the AI builder. Each belongs to its creator
# and a workspace. Creation is gated by the plan's projects limit; archiving
# frees the slot again.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from app.exceptions import ProjectArchivedError, ProjectNotFoundError
from core.models.project import ProjectStatus
from core.models.subscription import LimitType
from core.models.workspace import WRITE_ROLES
from core.services.subscription_service import SubscriptionService
from core.services.workspace_service import WorkspaceService
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)


class ProjectService:
    """
    Service for project CRUD and lifecycle.
    """

    @staticmethod
    def list_projects(workspace_id: str | UUID, user_id: str | UUID) -> list[dict[str, Any]]:
        """The user's projects in a workspace, newest first."""
        WorkspaceService.require_role(workspace_id, user_id)
        return SupabaseClient.fetch_rows(
            "projects",
            {"workspace_id": str(workspace_id), "user_id": str(user_id)},
            order_by="created_at",
            desc=True,
        )

    @staticmethod
    def create_project(
        workspace_id: str | UUID,
        user_id: str | UUID,
        name: str,
        description: str | None = None,
    ) -> dict[str, Any]:
        """
        Create a project.

        Raises:
            WorkspaceNotFoundError: If the user isn't a member
            PermissionDeniedError: If the user is a viewer
            PlanLimitExceededError: If the plan's projects limit is reached
        """
        WorkspaceService.require_role(
            workspace_id, user_id, WRITE_ROLES, action="create projects"
        )
        SubscriptionService.ensure_can_create(user_id, LimitType.PROJECTS)

        project = SupabaseClient.insert_row(
            "projects",
            {
                "user_id": str(user_id),
                "workspace_id": str(workspace_id),
                "name": name,
                "description": description or "",
                "status": ProjectStatus.ACTIVE.value,
            },
        )
        logger.info(f"Created project: {project['id']} for user: {user_id}")
        return project

    @staticmethod
    def get_project(project_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """
        Get a project owned by the user.

        Raises:
            ProjectNotFoundError: If it doesn't exist or isn't the user's
        """
        project = SupabaseClient.fetch_row("projects", project_id)

        if not project or str(project.get("user_id")) != str(user_id):
            # Don't reveal that the project exists
            raise ProjectNotFoundError(str(project_id))

        return project

    @staticmethod
    def get_active_project(project_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """
        Get a project the user may still change.

        Raises:
            ProjectNotFoundError: If it doesn't exist or isn't the user's
            ProjectArchivedError: If it has been archived
        """
        project = ProjectService.get_project(project_id, user_id)
        if project["status"] == ProjectStatus.ARCHIVED.value:
            raise ProjectArchivedError(str(project_id))
        return project

    @staticmethod
    def update_project(
        project_id: str | UUID,
        user_id: str | UUID,
        name: str | None = None,
        description: str | None = None,
        deployment_url: str | None = None,
    ) -> dict[str, Any]:
        """Update a project's name, description or deployment URL."""
        project = ProjectService.get_active_project(project_id, user_id)

        update_data: dict[str, Any] = {}
        if name is not None:
            update_data["name"] = name
        if description is not None:
            update_data["description"] = description
        if deployment_url is not None:
            update_data["deployment_url"] = deployment_url
        if not update_data:
            return project

        update_data["updated_at"] = utc_now_iso()
        updated = SupabaseClient.update_row("projects", project_id, update_data)
        if not updated:
            raise ProjectNotFoundError(str(project_id))
        return updated

    @staticmethod
    def archive_project(project_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """
        Archive a project.

        Archived projects no longer count against the projects limit.
        Archiving twice is a no-op.
        """
        project = ProjectService.get_project(project_id, user_id)
        if project["status"] == ProjectStatus.ARCHIVED.value:
            return project

        updated = SupabaseClient.update_row(
            "projects",
            project_id,
            {"status": ProjectStatus.ARCHIVED.value, "updated_at": utc_now_iso()},
        )
        logger.info(f"Archived project: {project_id}")
        return updated or {**project, "status": ProjectStatus.ARCHIVED.value}
