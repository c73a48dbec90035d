# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains framework-agnostic business logic:
# - models/: Pydantic schemas for data validation
# - services/: Workspace, grid, subscription, project, builder and
#   marketplace operations on top of lib.supabase_client
# - cells.py: Typed cell values and text coercion
# - ordering.py: Dense order_index maintenance
# - limits.py: Plan limit arithmetic
#
# Code in this package should NOT import from FastAPI or Celery.
# This keeps the logic testable and reusable.
# =============================================================================
