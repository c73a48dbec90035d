# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Gridbase API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import (
    GridbaseException,
    backend_exception_handler,
    gridbase_exception_handler,
)
from app.routers import (
    bases,
    builder,
    export,
    fields,
    health,
    marketplace,
    projects,
    records,
    tables,
    tasks,
    usage,
    workspaces,
)
from app.auth import routes as auth_routes
from lib.supabase_client import SupabaseClientError

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    The Supabase client and the builder agent are created lazily on first
    use, so startup only reports configuration.
    """
    logger.info(f"Starting Gridbase API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    logger.info(f"Builder backend: {settings.BUILDER_BACKEND}")

    yield

    logger.info("Shutting down Gridbase API")


# Create FastAPI application
app = FastAPI(
    title="Gridbase API",
    description="""
## Spreadsheet-Database Workspaces with an AI App Builder

### Grid

1. **Workspaces** - Shared spaces with owner, editor and viewer roles
2. **Bases** - Collections of tables inside a workspace
3. **Tables & Fields** - Ordered tables with typed columns
4. **Records** - One value per field, edited cell by cell
5. **Export** - Download a table as CSV

### Builder

1. **Start a session** in discussion or build mode
2. **Send prompts** (queued, poll `/api/v1/tasks/{task_id}`)
3. **Review change requests**: approve, reject, apply
4. **Install blueprints** from the marketplace

Limits come from the user's subscription plan; `-1` means unlimited.
""",
    version=health.API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "Verify Supabase JWTs and read the profile"},
        {"name": "Workspaces", "description": "Workspaces and roles"},
        {"name": "Bases", "description": "Bases inside a workspace"},
        {"name": "Tables", "description": "Ordered tables of a base"},
        {"name": "Fields", "description": "Typed columns of a table"},
        {"name": "Records", "description": "Rows and cell edits"},
        {"name": "Export", "description": "CSV export"},
        {"name": "Usage", "description": "Plans, subscription and usage against limits"},
        {"name": "Projects", "description": "Apps the builder works on"},
        {"name": "Builder", "description": "Builder sessions, prompts and change requests"},
        {"name": "Marketplace", "description": "Blueprints and installs"},
        {"name": "Tasks", "description": "Track async task progress"},
        {"name": "Health", "description": "API health and readiness checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(GridbaseException)
async def handle_gridbase_exception(request: Request, exc: GridbaseException):
    """Handle domain exceptions raised by the services."""
    return await gridbase_exception_handler(request, exc)


@app.exception_handler(SupabaseClientError)
async def handle_backend_exception(request: Request, exc: SupabaseClientError):
    """Handle database failures."""
    logger.error(f"Backend error on {request.method} {request.url.path}: {exc}")
    return await backend_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Authentication endpoints (router carries its own /auth prefix)
app.include_router(auth_routes.router, prefix=API_PREFIX)

app.include_router(health.router, prefix=API_PREFIX, tags=["Health"])
app.include_router(workspaces.router, prefix=f"{API_PREFIX}/workspaces", tags=["Workspaces"])
app.include_router(bases.router, prefix=API_PREFIX, tags=["Bases"])
app.include_router(tables.router, prefix=API_PREFIX, tags=["Tables"])
app.include_router(fields.router, prefix=API_PREFIX, tags=["Fields"])
app.include_router(records.router, prefix=API_PREFIX, tags=["Records"])
app.include_router(export.router, prefix=API_PREFIX, tags=["Export"])
app.include_router(usage.router, prefix=API_PREFIX, tags=["Usage"])
app.include_router(projects.router, prefix=API_PREFIX, tags=["Projects"])
app.include_router(builder.router, prefix=API_PREFIX, tags=["Builder"])
app.include_router(marketplace.router, prefix=API_PREFIX, tags=["Marketplace"])
app.include_router(tasks.router, prefix=f"{API_PREFIX}/tasks", tags=["Tasks"])


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Gridbase API",
        "version": health.API_VERSION,
        "docs": "/docs",
        "health": f"{API_PREFIX}/health",
    }
