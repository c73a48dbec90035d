# =============================================================================
# app/routers/tables.py - Table Endpoints
# =============================================================================
# Tables are ordered within their base. Every table starts with a "Name"
# field and a base always keeps at least one table.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path

from app.dependencies import CurrentUser
from core.models.grid import MoveRequest, TableCreate, TableUpdate
from core.services.table_service import TableService

router = APIRouter()


@router.get("/bases/{base_id}/tables")
async def list_tables(
    base_id: Annotated[UUID, Path(description="Base UUID")],
    user: CurrentUser,
):
    """List the tables of a base in display order."""
    tables = TableService.list_tables(base_id, user.id)
    return {"tables": tables, "count": len(tables)}


@router.post("/bases/{base_id}/tables", status_code=201)
async def create_table(
    base_id: Annotated[UUID, Path(description="Base UUID")],
    request: TableCreate,
    user: CurrentUser,
):
    """
    Create a table at the end of the base.

    The table comes with a required text field called "Name".
    """
    return TableService.create_table(
        base_id,
        user.id,
        name=request.name,
        description=request.description,
    )


@router.get("/tables/{table_id}")
async def get_table(
    table_id: Annotated[UUID, Path(description="Table UUID")],
    user: CurrentUser,
):
    return TableService.get_table(table_id, user.id)


@router.patch("/tables/{table_id}")
async def update_table(
    table_id: Annotated[UUID, Path(description="Table UUID")],
    request: TableUpdate,
    user: CurrentUser,
):
    return TableService.update_table(
        table_id,
        user.id,
        name=request.name,
        description=request.description,
    )


@router.post("/tables/{table_id}/move")
async def move_table(
    table_id: Annotated[UUID, Path(description="Table UUID")],
    request: MoveRequest,
    user: CurrentUser,
):
    """
    Move a table to a new position.

    Positions past the end are clamped. Returns the base's tables in their
    new order.
    """
    tables = TableService.move_table(table_id, user.id, request.position)
    return {"tables": tables, "count": len(tables)}


@router.delete("/tables/{table_id}")
async def delete_table(
    table_id: Annotated[UUID, Path(description="Table UUID")],
    user: CurrentUser,
):
    """Delete a table with its fields and records."""
    TableService.delete_table(table_id, user.id)
    return {"id": str(table_id), "deleted": True}
