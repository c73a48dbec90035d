# =============================================================================
# core/services/table_service.py - Table Business Logic
# =============================================================================
# Tables live in a base and keep a dense order_index 0..n-1.
#
# Every new table gets a required "Name" text field. The table and its
# default field are two writes; if the field insert fails, the table is
# deleted again so no table exists without its Name field.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient, SupabaseClientError
from app.exceptions import TableNotFoundError
from core import ordering
from core.models.grid import DEFAULT_FIELD_NAME, FieldType
from core.models.workspace import ANY_ROLE, WRITE_ROLES, WorkspaceRole
from core.services.base_service import BaseService
from core.services.workspace_service import WorkspaceService

logger = logging.getLogger(__name__)


def apply_order_changes(table: str, changes: dict[str, int]) -> None:
    """Write {row_id: order_index} back, one update per row."""
    for row_id, order_index in changes.items():
        SupabaseClient.update_row(table, row_id, {"order_index": order_index})
    if changes:
        logger.debug(f"Reindexed {len(changes)} rows in {table}")


class TableService:
    """
    Service for table CRUD and ordering.
    """

    @staticmethod
    def get_table(
        table_id: str | UUID,
        user_id: str | UUID,
        roles: tuple[WorkspaceRole, ...] = ANY_ROLE,
        action: str = "view this table",
    ) -> dict[str, Any]:
        """
        Get a table the user can reach with one of `roles`.

        Raises:
            TableNotFoundError: If it doesn't exist or the user isn't a member
            PermissionDeniedError: If the role isn't allowed
        """
        table = SupabaseClient.fetch_row("tables", table_id)
        if not table:
            raise TableNotFoundError(str(table_id))

        base = SupabaseClient.fetch_row("bases", table["base_id"], columns="id, workspace_id")
        if not base:
            raise TableNotFoundError(str(table_id))

        WorkspaceService.require_role(
            base["workspace_id"],
            user_id,
            roles,
            action=action,
            not_found=TableNotFoundError(str(table_id)),
        )
        return table

    @staticmethod
    def list_tables(base_id: str | UUID, user_id: str | UUID) -> list[dict[str, Any]]:
        """Tables of a base in display order."""
        BaseService.get_base(base_id, user_id)
        return SupabaseClient.fetch_rows(
            "tables",
            {"base_id": str(base_id)},
            order_by="order_index",
        )

    @staticmethod
    def create_table(
        base_id: str | UUID,
        user_id: str | UUID,
        name: str,
        description: str | None = None,
    ) -> dict[str, Any]:
        """
        Create a table at the end of the base, with its default Name field.

        Raises:
            BaseNotFoundError: If the base doesn't exist or isn't reachable
            PermissionDeniedError: If the user is a viewer
            SupabaseClientError: If either write fails (table is compensated)
        """
        BaseService.get_base(base_id, user_id, WRITE_ROLES, action="create tables")

        siblings = SupabaseClient.fetch_rows(
            "tables", {"base_id": str(base_id)}, columns="order_index"
        )
        table = SupabaseClient.insert_row(
            "tables",
            {
                "base_id": str(base_id),
                "name": name,
                "description": description or "",
                "order_index": ordering.next_order_index(r["order_index"] for r in siblings),
            },
        )

        try:
            SupabaseClient.insert_row(
                "fields",
                {
                    "table_id": table["id"],
                    "name": DEFAULT_FIELD_NAME,
                    "type": FieldType.TEXT.value,
                    "options": [],
                    "order_index": 0,
                    "required": True,
                },
            )
        except SupabaseClientError as e:
            logger.error(f"Default field failed for table {table['id']}, rolling back: {e}")
            SupabaseClient.delete_row("tables", table["id"])
            raise

        logger.info(f"Created table: {table['id']} in base: {base_id}")
        return table

    @staticmethod
    def update_table(
        table_id: str | UUID,
        user_id: str | UUID,
        name: str | None = None,
        description: str | None = None,
    ) -> dict[str, Any]:
        """Rename a table or change its description."""
        table = TableService.get_table(table_id, user_id, WRITE_ROLES, action="edit this table")

        update_data = {}
        if name is not None:
            update_data["name"] = name
        if description is not None:
            update_data["description"] = description
        if not update_data:
            return table

        updated = SupabaseClient.update_row("tables", table_id, update_data)
        if not updated:
            raise TableNotFoundError(str(table_id))
        return updated

    @staticmethod
    def move_table(
        table_id: str | UUID,
        user_id: str | UUID,
        position: int,
    ) -> list[dict[str, Any]]:
        """
        Move a table to `position` among its siblings.

        Returns:
            The base's tables in their new order
        """
        table = TableService.get_table(table_id, user_id, WRITE_ROLES, action="reorder tables")

        siblings = SupabaseClient.fetch_rows(
            "tables",
            {"base_id": table["base_id"]},
            columns="id, order_index, created_at",
        )
        apply_order_changes("tables", ordering.move(siblings, str(table_id), position))

        return SupabaseClient.fetch_rows(
            "tables", {"base_id": table["base_id"]}, order_by="order_index"
        )

    @staticmethod
    def delete_table(table_id: str | UUID, user_id: str | UUID) -> None:
        """
        Delete a table and compact its siblings' order indexes.

        Fields and records go with it (database cascade). Deleting the only
        table leaves the base empty.
        """
        table = TableService.get_table(table_id, user_id, WRITE_ROLES, action="delete tables")

        siblings = SupabaseClient.fetch_rows(
            "tables",
            {"base_id": table["base_id"]},
            columns="id, order_index, created_at",
        )

        SupabaseClient.delete_row("tables", table_id)
        remaining = [r for r in siblings if str(r["id"]) != str(table_id)]
        apply_order_changes("tables", ordering.compact(remaining))
        logger.info(f"Deleted table: {table_id} from base: {table['base_id']}")
