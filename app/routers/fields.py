# =============================================================================
# app/routers/fields.py - Field Endpoints
# =============================================================================
# Fields are the typed columns of a table. A field's type is fixed once it
# is created; name, options and the required flag can change.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path

from app.dependencies import CurrentUser
from core.models.grid import FieldCreate, FieldUpdate, MoveRequest
from core.services.field_service import FieldService

router = APIRouter()


@router.get("/tables/{table_id}/fields")
async def list_fields(
    table_id: Annotated[UUID, Path(description="Table UUID")],
    user: CurrentUser,
):
    """List a table's fields in column order."""
    fields = FieldService.list_fields(table_id, user.id)
    return {"fields": fields, "count": len(fields)}


@router.post("/tables/{table_id}/fields", status_code=201)
async def create_field(
    table_id: Annotated[UUID, Path(description="Table UUID")],
    request: FieldCreate,
    user: CurrentUser,
):
    """
    Add a field as the table's last column.

    Existing records are not rewritten; they read the field's default
    until a cell is edited.
    """
    return FieldService.create_field(
        table_id,
        user.id,
        name=request.name,
        field_type=request.type,
        options=request.options,
        required=request.required,
    )


@router.get("/fields/{field_id}")
async def get_field(
    field_id: Annotated[UUID, Path(description="Field UUID")],
    user: CurrentUser,
):
    return FieldService.get_field(field_id, user.id)


@router.patch("/fields/{field_id}")
async def update_field(
    field_id: Annotated[UUID, Path(description="Field UUID")],
    request: FieldUpdate,
    user: CurrentUser,
):
    return FieldService.update_field(
        field_id,
        user.id,
        name=request.name,
        options=request.options,
        required=request.required,
    )


@router.post("/fields/{field_id}/move")
async def move_field(
    field_id: Annotated[UUID, Path(description="Field UUID")],
    request: MoveRequest,
    user: CurrentUser,
):
    """Move a field to a new column position. Returns the reordered fields."""
    fields = FieldService.move_field(field_id, user.id, request.position)
    return {"fields": fields, "count": len(fields)}


@router.delete("/fields/{field_id}")
async def delete_field(
    field_id: Annotated[UUID, Path(description="Field UUID")],
    user: CurrentUser,
):
    """
    Delete a field.

    Record values stored under the field stay in place unless key pruning
    is switched on; reads list them as legacy keys.
    """
    FieldService.delete_field(field_id, user.id)
    return {"id": str(field_id), "deleted": True}
