# =============================================================================
# core/services/base_service.py - Base Business Logic
# =============================================================================
# A base is one spreadsheet-like database inside a workspace.
# Creation is gated by the plan's bases limit.
# =============================================================================

import logging
import random
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from app.exceptions import BaseNotFoundError
from core.models.subscription import LimitType
from core.models.workspace import (
    ANY_ROLE,
    BASE_COLORS,
    BASE_ICONS,
    OWNER_ONLY,
    WRITE_ROLES,
    WorkspaceRole,
)
from core.services.subscription_service import SubscriptionService
from core.services.workspace_service import WorkspaceService

logger = logging.getLogger(__name__)


class BaseService:
    """
    Service for base CRUD operations.
    """

    @staticmethod
    def get_base(
        base_id: str | UUID,
        user_id: str | UUID,
        roles: tuple[WorkspaceRole, ...] = ANY_ROLE,
        action: str = "view this base",
    ) -> dict[str, Any]:
        """
        Get a base the user can reach with one of `roles`.

        Raises:
            BaseNotFoundError: If it doesn't exist or the user isn't a member
            PermissionDeniedError: If the role isn't allowed
        """
        base = SupabaseClient.fetch_row("bases", base_id)
        if not base:
            raise BaseNotFoundError(str(base_id))

        WorkspaceService.require_role(
            base["workspace_id"],
            user_id,
            roles,
            action=action,
            not_found=BaseNotFoundError(str(base_id)),
        )
        return base

    @staticmethod
    def list_bases(workspace_id: str | UUID, user_id: str | UUID) -> list[dict[str, Any]]:
        """Bases of a workspace, newest first."""
        WorkspaceService.require_role(workspace_id, user_id)
        return SupabaseClient.fetch_rows(
            "bases",
            {"workspace_id": str(workspace_id)},
            order_by="created_at",
            desc=True,
        )

    @staticmethod
    def create_base(
        workspace_id: str | UUID,
        user_id: str | UUID,
        name: str,
        description: str | None = None,
        icon: str | None = None,
        color: str | None = None,
    ) -> dict[str, Any]:
        """
        Create a base.

        Icon and color default to a random pick from the palette.

        Raises:
            WorkspaceNotFoundError: If the user isn't a member
            PermissionDeniedError: If the user is a viewer
            PlanLimitExceededError: If the plan's bases limit is reached
        """
        WorkspaceService.require_role(
            workspace_id, user_id, WRITE_ROLES, action="create bases"
        )
        SubscriptionService.ensure_can_create(user_id, LimitType.BASES)

        base = SupabaseClient.insert_row(
            "bases",
            {
                "workspace_id": str(workspace_id),
                "name": name,
                "description": description or "",
                "icon": icon or random.choice(BASE_ICONS),
                "color": color or random.choice(BASE_COLORS),
                "created_by": str(user_id),
            },
        )
        logger.info(f"Created base: {base['id']} in workspace: {workspace_id}")
        return base

    @staticmethod
    def update_base(
        base_id: str | UUID,
        user_id: str | UUID,
        name: str | None = None,
        description: str | None = None,
        icon: str | None = None,
        color: str | None = None,
    ) -> dict[str, Any]:
        """Update a base's name, description, icon or color."""
        base = BaseService.get_base(base_id, user_id, WRITE_ROLES, action="edit this base")

        update_data = {
            key: value
            for key, value in {
                "name": name,
                "description": description,
                "icon": icon,
                "color": color,
            }.items()
            if value is not None
        }
        if not update_data:
            return base

        updated = SupabaseClient.update_row("bases", base_id, update_data)
        if not updated:
            raise BaseNotFoundError(str(base_id))
        return updated

    @staticmethod
    def delete_base(base_id: str | UUID, user_id: str | UUID) -> None:
        """
        Delete a base (owner only).

        Tables, fields and records go with it (database cascade).
        """
        BaseService.get_base(base_id, user_id, OWNER_ONLY, action="delete this base")
        SupabaseClient.delete_row("bases", base_id)
        logger.info(f"Deleted base: {base_id} by user: {user_id}")
