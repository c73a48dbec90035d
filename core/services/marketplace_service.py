# =============================================================================
# core/services/marketplace_service.py - Blueprint Marketplace
# =============================================================================
# Public blueprints can be installed into a project the user owns. An
# install remembers the blueprint version so it can be rolled back once.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import utc_now_iso
from app.exceptions import (
    BlueprintInstallNotFoundError,
    BlueprintNotFoundError,
    InstallStateError,
    ProjectNotFoundError,
)
from core.models.marketplace import ROLLBACKABLE, InstallStatus
from core.services.project_service import ProjectService

logger = logging.getLogger(__name__)


class MarketplaceService:
    """
    Service for browsing, installing and rolling back blueprints.
    """

    @staticmethod
    def list_blueprints(category: str | None = None) -> list[dict[str, Any]]:
        """Public blueprints, most installed first."""
        filters: dict[str, Any] = {"is_public": True}
        if category:
            filters["category"] = category
        return SupabaseClient.fetch_rows(
            "blueprints",
            filters,
            order_by="install_count",
            desc=True,
        )

    @staticmethod
    def get_blueprint(blueprint_id: str | UUID, user_id: str | UUID | None = None) -> dict[str, Any]:
        """
        Get a blueprint. Private blueprints are visible to their author only.

        Raises:
            BlueprintNotFoundError: If it doesn't exist or isn't visible
        """
        blueprint = SupabaseClient.fetch_row("blueprints", blueprint_id)
        if not blueprint:
            raise BlueprintNotFoundError(str(blueprint_id))
        if not blueprint.get("is_public") and str(blueprint.get("author_id")) != str(user_id):
            raise BlueprintNotFoundError(str(blueprint_id))
        return blueprint

    @staticmethod
    def install_blueprint(
        blueprint_id: str | UUID,
        project_id: str | UUID,
        user_id: str | UUID,
        config_values: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Install a blueprint into one of the user's active projects.

        Raises:
            BlueprintNotFoundError: If the blueprint isn't visible
            ProjectNotFoundError: If the project isn't the user's
            ProjectArchivedError: If the project is archived
        """
        blueprint = MarketplaceService.get_blueprint(blueprint_id, user_id)
        ProjectService.get_active_project(project_id, user_id)

        install = SupabaseClient.insert_row(
            "blueprint_installs",
            {
                "blueprint_id": str(blueprint_id),
                "project_id": str(project_id),
                "user_id": str(user_id),
                "version_installed": blueprint["version"],
                "config_values": config_values or {},
                "status": InstallStatus.INSTALLED.value,
            },
        )

        # Read-modify-write; concurrent installs may undercount
        SupabaseClient.update_row(
            "blueprints",
            blueprint_id,
            {"install_count": (blueprint.get("install_count") or 0) + 1},
        )

        logger.info(
            f"Installed blueprint {blueprint_id} v{blueprint['version']} into project {project_id}"
        )
        return install

    @staticmethod
    def list_installs(project_id: str | UUID, user_id: str | UUID) -> list[dict[str, Any]]:
        """Installs of a project, newest first."""
        ProjectService.get_project(project_id, user_id)
        return SupabaseClient.fetch_rows(
            "blueprint_installs",
            {"project_id": str(project_id)},
            order_by="installed_at",
            desc=True,
        )

    @staticmethod
    def rollback_install(install_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """
        Roll back an install.

        Raises:
            BlueprintInstallNotFoundError: If it doesn't exist or isn't reachable
            InstallStateError: If it's already rolled back
        """
        install = SupabaseClient.fetch_row("blueprint_installs", install_id)
        if not install:
            raise BlueprintInstallNotFoundError(str(install_id))
        try:
            ProjectService.get_project(install["project_id"], user_id)
        except ProjectNotFoundError:
            raise BlueprintInstallNotFoundError(str(install_id))

        if InstallStatus(install["status"]) not in ROLLBACKABLE:
            raise InstallStateError(str(install_id), install["status"])

        updated = SupabaseClient.update_row(
            "blueprint_installs",
            install_id,
            {"status": InstallStatus.ROLLED_BACK.value, "rolled_back_at": utc_now_iso()},
        )
        logger.info(f"Rolled back blueprint install: {install_id}")
        return updated or install
