# =============================================================================
# core/services/field_service.py - Field Business Logic
# =============================================================================
# Fields are the typed columns of a table, with a dense order_index.
#
# Deleting a field leaves its key in existing records' data by default.
# Such legacy keys are hidden by core.cells.visible_data; set
# PRUNE_ORPHANED_FIELD_KEYS=true to strip them from every record instead.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from app.config import settings
from app.exceptions import FieldNotFoundError, InvalidFieldError, TableNotFoundError
from core import ordering
from core.models.grid import FieldType
from core.models.workspace import ANY_ROLE, WRITE_ROLES, WorkspaceRole
from core.services.table_service import TableService, apply_order_changes

logger = logging.getLogger(__name__)


def _check_options(field_type: FieldType, options: list[str] | None) -> None:
    if options and not field_type.takes_options:
        raise InvalidFieldError(
            f"{field_type.value} fields don't take options",
            details={"type": field_type.value, "options": options},
        )


class FieldService:
    """
    Service for field CRUD and ordering.
    """

    @staticmethod
    def get_field(
        field_id: str | UUID,
        user_id: str | UUID,
        roles: tuple[WorkspaceRole, ...] = ANY_ROLE,
        action: str = "view this field",
    ) -> dict[str, Any]:
        """
        Get a field the user can reach with one of `roles`.

        Raises:
            FieldNotFoundError: If it doesn't exist or the user isn't a member
            PermissionDeniedError: If the role isn't allowed
        """
        field = SupabaseClient.fetch_row("fields", field_id)
        if not field:
            raise FieldNotFoundError(str(field_id))

        try:
            TableService.get_table(field["table_id"], user_id, roles, action=action)
        except TableNotFoundError:
            raise FieldNotFoundError(str(field_id))
        return field

    @staticmethod
    def list_fields(table_id: str | UUID, user_id: str | UUID) -> list[dict[str, Any]]:
        """Fields of a table in display order."""
        TableService.get_table(table_id, user_id)
        return FieldService.fetch_fields(table_id)

    @staticmethod
    def fetch_fields(table_id: str | UUID) -> list[dict[str, Any]]:
        """Fields of a table in display order, without an access check."""
        return SupabaseClient.fetch_rows(
            "fields",
            {"table_id": str(table_id)},
            order_by="order_index",
        )

    @staticmethod
    def create_field(
        table_id: str | UUID,
        user_id: str | UUID,
        name: str,
        field_type: FieldType | str,
        options: list[str] | None = None,
        required: bool = False,
    ) -> dict[str, Any]:
        """
        Append a field to a table.

        Args:
            table_id: Table to add the column to
            user_id: Acting user
            name: Column name
            field_type: One of FieldType
            options: Allowed choices (select/multiselect only)
            required: Whether the column is marked required

        Raises:
            InvalidFieldError: If the type is unknown or options don't apply
        """
        try:
            field_type = FieldType(field_type)
        except ValueError:
            raise InvalidFieldError(
                f"Unknown field type: {field_type}",
                details={"allowed": [t.value for t in FieldType]},
            )
        _check_options(field_type, options)

        TableService.get_table(table_id, user_id, WRITE_ROLES, action="add fields")

        siblings = SupabaseClient.fetch_rows(
            "fields", {"table_id": str(table_id)}, columns="order_index"
        )
        field = SupabaseClient.insert_row(
            "fields",
            {
                "table_id": str(table_id),
                "name": name,
                "type": field_type.value,
                "options": options or [],
                "order_index": ordering.next_order_index(r["order_index"] for r in siblings),
                "required": required,
            },
        )
        logger.info(f"Created {field_type.value} field: {field['id']} in table: {table_id}")
        return field

    @staticmethod
    def update_field(
        field_id: str | UUID,
        user_id: str | UUID,
        name: str | None = None,
        options: list[str] | None = None,
        required: bool | None = None,
    ) -> dict[str, Any]:
        """
        Rename a field, change its options or its required flag.

        The type can't change; existing values were coerced for it.
        """
        field = FieldService.get_field(field_id, user_id, WRITE_ROLES, action="edit fields")
        _check_options(FieldType(field["type"]), options)

        update_data: dict[str, Any] = {}
        if name is not None:
            update_data["name"] = name
        if options is not None:
            update_data["options"] = options
        if required is not None:
            update_data["required"] = required
        if not update_data:
            return field

        updated = SupabaseClient.update_row("fields", field_id, update_data)
        if not updated:
            raise FieldNotFoundError(str(field_id))
        return updated

    @staticmethod
    def move_field(
        field_id: str | UUID,
        user_id: str | UUID,
        position: int,
    ) -> list[dict[str, Any]]:
        """
        Move a field to `position` among its siblings.

        Returns:
            The table's fields in their new order
        """
        field = FieldService.get_field(field_id, user_id, WRITE_ROLES, action="reorder fields")

        siblings = SupabaseClient.fetch_rows(
            "fields",
            {"table_id": field["table_id"]},
            columns="id, order_index, created_at",
        )
        apply_order_changes("fields", ordering.move(siblings, str(field_id), position))
        return FieldService.fetch_fields(field["table_id"])

    @staticmethod
    def delete_field(field_id: str | UUID, user_id: str | UUID) -> None:
        """
        Delete a field and compact its siblings' order indexes.

        Existing records keep the field's key unless
        PRUNE_ORPHANED_FIELD_KEYS is on.
        """
        field = FieldService.get_field(field_id, user_id, WRITE_ROLES, action="delete fields")
        table_id = field["table_id"]

        siblings = SupabaseClient.fetch_rows(
            "fields",
            {"table_id": table_id},
            columns="id, order_index, created_at",
        )
        SupabaseClient.delete_row("fields", field_id)
        remaining = [r for r in siblings if str(r["id"]) != str(field_id)]
        apply_order_changes("fields", ordering.compact(remaining))

        if settings.PRUNE_ORPHANED_FIELD_KEYS:
            FieldService.prune_key(table_id, str(field_id))

        logger.info(f"Deleted field: {field_id} from table: {table_id}")

    @staticmethod
    def prune_key(table_id: str | UUID, key: str) -> int:
        """
        Remove one key from the data of every record in a table.

        Returns:
            Number of records rewritten
        """
        records = SupabaseClient.fetch_rows(
            "records", {"table_id": str(table_id)}, columns="id, data"
        )
        pruned = 0
        for record in records:
            data = record.get("data") or {}
            if key in data:
                SupabaseClient.update_row(
                    "records",
                    record["id"],
                    {"data": {k: v for k, v in data.items() if k != key}},
                )
                pruned += 1

        logger.info(f"Pruned key {key} from {pruned} records of table {table_id}")
        return pruned
