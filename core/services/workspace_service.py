# =============================================================================
# core/services/workspace_service.py - Workspace Business Logic
# =============================================================================
# Handles workspaces and memberships.
#
# The service-role client bypasses row level security, so every other
# service asks require_role() before touching a workspace's content.
# Non-members are told "not found" so existence is never revealed.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient, SupabaseClientError
from app.config import settings
from app.exceptions import (
    GridbaseException,
    PermissionDeniedError,
    WorkspaceNotFoundError,
)
from core.models.workspace import ANY_ROLE, OWNER_ONLY, WorkspaceRole

logger = logging.getLogger(__name__)


class WorkspaceService:
    """
    Service for workspace management and membership checks.
    """

    # -------------------------------------------------------------------------
    # Membership
    # -------------------------------------------------------------------------

    @staticmethod
    def get_role(workspace_id: str | UUID, user_id: str | UUID) -> WorkspaceRole | None:
        """The user's role in the workspace, or None for non-members."""
        rows = SupabaseClient.fetch_rows(
            "workspace_members",
            {"workspace_id": str(workspace_id), "user_id": str(user_id)},
            columns="role",
            limit=1,
        )
        if not rows:
            return None
        return WorkspaceRole(rows[0]["role"])

    @staticmethod
    def require_role(
        workspace_id: str | UUID,
        user_id: str | UUID,
        roles: tuple[WorkspaceRole, ...] = ANY_ROLE,
        action: str = "access this workspace",
        not_found: GridbaseException | None = None,
    ) -> WorkspaceRole:
        """
        Check that the user holds one of `roles` in the workspace.

        Args:
            workspace_id: Workspace to check
            user_id: Acting user
            roles: Roles allowed to perform the action
            action: Human readable action for the error message
            not_found: Raised instead of WorkspaceNotFoundError for non-members
                       (so a base/table lookup reports the entity asked for)

        Returns:
            The user's role

        Raises:
            WorkspaceNotFoundError: If the user isn't a member
            PermissionDeniedError: If the role isn't allowed
        """
        role = WorkspaceService.get_role(workspace_id, user_id)

        if role is None:
            raise not_found or WorkspaceNotFoundError(str(workspace_id))

        if role not in roles:
            logger.warning(
                f"User {user_id} ({role.value}) refused to {action} in workspace {workspace_id}"
            )
            raise PermissionDeniedError(action, role.value)

        return role

    # -------------------------------------------------------------------------
    # Workspaces
    # -------------------------------------------------------------------------

    @staticmethod
    def list_workspaces(user_id: str | UUID) -> list[dict[str, Any]]:
        """
        List workspaces the user is a member of, newest first.

        A user with no memberships gets the default workspace created on the
        spot.
        """
        memberships = SupabaseClient.fetch_rows(
            "workspace_members",
            {"user_id": str(user_id)},
            columns="workspace_id, role",
        )

        if not memberships:
            workspace = WorkspaceService.create_workspace(
                user_id, settings.DEFAULT_WORKSPACE_NAME
            )
            logger.info(f"Created default workspace {workspace['id']} for user: {user_id}")
            return [workspace]

        roles = {str(m["workspace_id"]): m["role"] for m in memberships}
        workspaces = SupabaseClient.fetch_rows(
            "workspaces",
            in_filters={"id": list(roles)},
            order_by="created_at",
            desc=True,
        )
        return [{**w, "role": roles.get(str(w["id"]))} for w in workspaces]

    @staticmethod
    def create_workspace(user_id: str | UUID, name: str) -> dict[str, Any]:
        """
        Create a workspace owned by the user.

        Two sequential writes: the workspace, then the owner membership. If
        the membership insert fails the workspace is deleted again.

        Raises:
            SupabaseClientError: If either write fails
        """
        workspace = SupabaseClient.insert_row(
            "workspaces",
            {"name": name, "owner_id": str(user_id)},
        )

        try:
            SupabaseClient.insert_row(
                "workspace_members",
                {
                    "workspace_id": workspace["id"],
                    "user_id": str(user_id),
                    "role": WorkspaceRole.OWNER.value,
                },
            )
        except SupabaseClientError as e:
            logger.error(f"Owner membership failed for workspace {workspace['id']}, rolling back: {e}")
            SupabaseClient.delete_row("workspaces", workspace["id"])
            raise

        logger.info(f"Created workspace: {workspace['id']} for user: {user_id}")
        return {**workspace, "role": WorkspaceRole.OWNER.value}

    @staticmethod
    def get_workspace(workspace_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """
        Get a workspace the user is a member of.

        Raises:
            WorkspaceNotFoundError: If it doesn't exist or the user isn't a member
        """
        role = WorkspaceService.require_role(workspace_id, user_id)
        workspace = SupabaseClient.fetch_row("workspaces", workspace_id)
        if not workspace:
            raise WorkspaceNotFoundError(str(workspace_id))
        return {**workspace, "role": role.value}

    @staticmethod
    def rename_workspace(
        workspace_id: str | UUID,
        user_id: str | UUID,
        name: str,
    ) -> dict[str, Any]:
        """Rename a workspace (owner only)."""
        WorkspaceService.require_role(
            workspace_id, user_id, OWNER_ONLY, action="rename this workspace"
        )
        workspace = SupabaseClient.update_row("workspaces", workspace_id, {"name": name})
        if not workspace:
            raise WorkspaceNotFoundError(str(workspace_id))
        return {**workspace, "role": WorkspaceRole.OWNER.value}

    @staticmethod
    def delete_workspace(workspace_id: str | UUID, user_id: str | UUID) -> None:
        """
        Delete a workspace (owner only).

        Bases, tables, fields and records go with it (database cascade).
        """
        WorkspaceService.require_role(
            workspace_id, user_id, OWNER_ONLY, action="delete this workspace"
        )
        SupabaseClient.delete_row("workspaces", workspace_id)
        logger.info(f"Deleted workspace: {workspace_id} by user: {user_id}")
