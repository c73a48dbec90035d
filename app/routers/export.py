# =============================================================================
# app/routers/export.py - Export Endpoints
# =============================================================================
# Downloads a table as CSV. Exports are a plan feature.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path
from fastapi.responses import Response

from app.dependencies import CurrentUser
from core.services.export_service import ExportService

router = APIRouter()


@router.get("/tables/{table_id}/export")
async def export_table(
    table_id: Annotated[UUID, Path(description="Table UUID")],
    user: CurrentUser,
):
    """
    Download a table as CSV, one column per field in column order.

    Raises:
        403: FEATURE_NOT_AVAILABLE when the plan has no exports
    """
    filename, content = ExportService.export_table_csv(table_id, user.id)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
