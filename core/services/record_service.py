# =============================================================================
# core/services/record_service.py - Record Business Logic
# =============================================================================
# Records are the rows of a table. records.data maps field id -> JSON value.
#
# - A new record gets one entry per current field, defaulted by type
# - A cell edit coerces the text for its field and writes the whole map
# - Keys of deleted fields stay in data and are reported as legacy_keys
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from app.exceptions import (
    FieldNotFoundError,
    FieldTableMismatchError,
    RecordNotFoundError,
    TableNotFoundError,
)
from core.cells import build_initial_data, coerce_edit, merge_cell, orphaned_keys
from core.models.workspace import ANY_ROLE, WRITE_ROLES, WorkspaceRole
from core.services.field_service import FieldService
from core.services.table_service import TableService

logger = logging.getLogger(__name__)


def _with_legacy_keys(record: dict[str, Any], fields: list[dict[str, Any]]) -> dict[str, Any]:
    return {**record, "legacy_keys": orphaned_keys(record.get("data"), fields)}


class RecordService:
    """
    Service for record CRUD and cell edits.
    """

    @staticmethod
    def _get_record(
        record_id: str | UUID,
        user_id: str | UUID,
        roles: tuple[WorkspaceRole, ...] = ANY_ROLE,
        action: str = "view this record",
    ) -> dict[str, Any]:
        record = SupabaseClient.fetch_row("records", record_id)
        if not record:
            raise RecordNotFoundError(str(record_id))

        try:
            TableService.get_table(record["table_id"], user_id, roles, action=action)
        except TableNotFoundError:
            raise RecordNotFoundError(str(record_id))
        return record

    @staticmethod
    def list_records(table_id: str | UUID, user_id: str | UUID) -> list[dict[str, Any]]:
        """Records of a table, newest first."""
        TableService.get_table(table_id, user_id)
        fields = FieldService.fetch_fields(table_id)
        records = SupabaseClient.fetch_rows(
            "records",
            {"table_id": str(table_id)},
            order_by="created_at",
            desc=True,
        )
        return [_with_legacy_keys(r, fields) for r in records]

    @staticmethod
    def get_record(record_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """
        Get one record.

        Raises:
            RecordNotFoundError: If it doesn't exist or the user isn't a member
        """
        record = RecordService._get_record(record_id, user_id)
        return _with_legacy_keys(record, FieldService.fetch_fields(record["table_id"]))

    @staticmethod
    def add_record(
        table_id: str | UUID,
        user_id: str | UUID,
        values: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """
        Add a record with a value for every current field.

        Args:
            table_id: Table to add the row to
            user_id: Acting user, stored as created_by
            values: Optional {field_id: text}, coerced per field type

        Raises:
            FieldNotFoundError: If a value names a field of another table
            InvalidCellValueError: If a value doesn't fit its field
        """
        TableService.get_table(table_id, user_id, WRITE_ROLES, action="add records")
        fields = FieldService.fetch_fields(table_id)
        data = build_initial_data(fields)

        fields_by_id = {str(f["id"]): f for f in fields}
        for field_id, text in (values or {}).items():
            field = fields_by_id.get(str(field_id))
            if field is None:
                raise FieldNotFoundError(str(field_id))
            data = merge_cell(data, field_id, coerce_edit(field, text))

        record = SupabaseClient.insert_row(
            "records",
            {"table_id": str(table_id), "data": data, "created_by": str(user_id)},
        )
        logger.info(f"Created record: {record['id']} in table: {table_id}")
        return _with_legacy_keys(record, fields)

    @staticmethod
    def edit_cell(
        record_id: str | UUID,
        user_id: str | UUID,
        field_id: str | UUID,
        text: str,
    ) -> dict[str, Any]:
        """
        Set one cell from edited text.

        The text is coerced for the field's type and merged into the
        record's map; the whole map is written back (last write wins).

        Raises:
            FieldTableMismatchError: If the field isn't in the record's table
            InvalidCellValueError: If the text doesn't fit the field type
        """
        record = RecordService._get_record(record_id, user_id, WRITE_ROLES, action="edit records")

        field = SupabaseClient.fetch_row("fields", field_id)
        if not field or str(field["table_id"]) != str(record["table_id"]):
            raise FieldTableMismatchError(str(field_id), str(record_id))

        data = merge_cell(record.get("data"), str(field_id), coerce_edit(field, text))
        updated = SupabaseClient.update_row("records", record_id, {"data": data})
        if not updated:
            raise RecordNotFoundError(str(record_id))

        logger.debug(f"Edited cell {field_id} of record {record_id}")
        return _with_legacy_keys(updated, FieldService.fetch_fields(record["table_id"]))

    @staticmethod
    def delete_record(record_id: str | UUID, user_id: str | UUID) -> None:
        """Delete a record."""
        record = RecordService._get_record(
            record_id, user_id, WRITE_ROLES, action="delete records"
        )
        SupabaseClient.delete_row("records", record_id)
        logger.info(f"Deleted record: {record_id} from table: {record['table_id']}")
