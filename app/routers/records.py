# =============================================================================
# app/routers/records.py - Record Endpoints
# =============================================================================
# Records hold one value per field, keyed by field id. Cells are edited one
# at a time from the text the grid sends.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path

from app.dependencies import CurrentUser
from core.models.grid import CellEdit, RecordCreate
from core.services.record_service import RecordService

router = APIRouter()


@router.get("/tables/{table_id}/records")
async def list_records(
    table_id: Annotated[UUID, Path(description="Table UUID")],
    user: CurrentUser,
):
    """
    List a table's records, newest first.

    Each record carries legacy_keys: stored keys with no matching field.
    """
    records = RecordService.list_records(table_id, user.id)
    return {"records": records, "count": len(records)}


@router.post("/tables/{table_id}/records", status_code=201)
async def add_record(
    table_id: Annotated[UUID, Path(description="Table UUID")],
    user: CurrentUser,
    request: RecordCreate | None = None,
):
    """
    Add a record.

    Every field gets its default; `values` (field id -> text) are coerced
    the same way a cell edit is.

    Raises:
        422: INVALID_CELL_VALUE when a value doesn't fit its field
    """
    values = request.values if request else None
    return RecordService.add_record(table_id, user.id, values)


@router.get("/records/{record_id}")
async def get_record(
    record_id: Annotated[UUID, Path(description="Record UUID")],
    user: CurrentUser,
):
    return RecordService.get_record(record_id, user.id)


@router.patch("/records/{record_id}/cells")
async def edit_cell(
    record_id: Annotated[UUID, Path(description="Record UUID")],
    request: CellEdit,
    user: CurrentUser,
):
    """
    Edit one cell.

    Raises:
        400: The field belongs to another table
        422: INVALID_CELL_VALUE when the text doesn't fit the field type
    """
    return RecordService.edit_cell(record_id, user.id, request.field_id, request.value)


@router.delete("/records/{record_id}")
async def delete_record(
    record_id: Annotated[UUID, Path(description="Record UUID")],
    user: CurrentUser,
):
    RecordService.delete_record(record_id, user.id)
    return {"id": str(record_id), "deleted": True}
