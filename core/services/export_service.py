# =============================================================================
# core/services/export_service.py - Table Export
# =============================================================================
# Exports a table as CSV: one column per field in field order (header is the
# field name), one row per record. Legacy keys of deleted fields are left
# out. Requires the plan's "exports" feature.
# =============================================================================

import logging
import re
from typing import Any
from uuid import UUID

import pandas as pd

from app.exceptions import FeatureNotAvailableError
from core.cells import Checkbox, MultiSelect, read_cell
from core.services.field_service import FieldService
from core.services.record_service import RecordService
from core.services.subscription_service import SubscriptionService
from core.services.table_service import TableService

logger = logging.getLogger(__name__)

EXPORT_FEATURE = "exports"


def _csv_value(field_type: str, raw: Any) -> Any:
    """Flatten a stored value for a CSV cell."""
    cell = read_cell(field_type, raw)
    if isinstance(cell, MultiSelect):
        return ", ".join(sorted(cell.values))
    if isinstance(cell, Checkbox):
        return "true" if cell.value else "false"
    return cell.to_json()


def _safe_filename(name: str) -> str:
    return re.sub(r"[^\w\-. ]", "_", name).strip() or "table"


class ExportService:
    """
    Service for exporting grid data.
    """

    @staticmethod
    def build_frame(fields: list[dict[str, Any]], records: list[dict[str, Any]]) -> pd.DataFrame:
        """
        Build the export DataFrame.

        Records missing a field's key (field added later) export that
        field's empty value.
        """
        rows = [
            [_csv_value(f["type"], (r.get("data") or {}).get(str(f["id"]))) for f in fields]
            for r in records
        ]
        return pd.DataFrame(rows, columns=[f["name"] for f in fields])

    @staticmethod
    def export_table_csv(table_id: str | UUID, user_id: str | UUID) -> tuple[str, str]:
        """
        Export a table as CSV text.

        Returns:
            (filename, csv_text)

        Raises:
            FeatureNotAvailableError: If the plan doesn't include exports
        """
        table = TableService.get_table(table_id, user_id, action="export this table")

        if not SubscriptionService.has_feature(user_id, EXPORT_FEATURE):
            logger.warning(f"User {user_id} refused export of table {table_id}: plan lacks exports")
            raise FeatureNotAvailableError(EXPORT_FEATURE)

        fields = FieldService.fetch_fields(table_id)
        records = RecordService.list_records(table_id, user_id)

        df = ExportService.build_frame(fields, records)
        logger.info(f"Exported table {table_id}: {len(df)} rows x {len(df.columns)} columns")
        return f"{_safe_filename(table['name'])}.csv", df.to_csv(index=False)
