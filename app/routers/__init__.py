# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - workspaces.py: Workspaces and membership roles
# - bases.py: Bases inside a workspace
# - tables.py / fields.py / records.py: The grid itself
# - export.py: CSV download of a table
# - usage.py: Plans, subscription and usage against limits
# - projects.py: Builder projects
# - builder.py: Builder sessions, prompts and change requests
# - marketplace.py: Blueprints and installs
# - tasks.py: Background task status endpoints
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import workspaces
from . import bases
from . import tables
from . import fields
from . import records
from . import export
from . import usage
from . import projects
from . import builder
from . import marketplace
from . import tasks

__all__ = [
    "health",
    "workspaces",
    "bases",
    "tables",
    "fields",
    "records",
    "export",
    "usage",
    "projects",
    "builder",
    "marketplace",
    "tasks",
]
