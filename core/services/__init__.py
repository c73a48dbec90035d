# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .workspace_service import WorkspaceService
from .subscription_service import SubscriptionService
from .base_service import BaseService
from .table_service import TableService
from .field_service import FieldService
from .record_service import RecordService
from .export_service import ExportService
from .project_service import ProjectService
from .builder_service import BuilderService
from .marketplace_service import MarketplaceService

__all__ = [
    "WorkspaceService",
    "SubscriptionService",
    "BaseService",
    "TableService",
    "FieldService",
    "RecordService",
    "ExportService",
    "ProjectService",
    "BuilderService",
    "MarketplaceService",
]
