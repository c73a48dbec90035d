# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends() and can be
# replaced in tests via app.dependency_overrides.
# =============================================================================

from typing import Annotated

from celery import Celery
from fastapi import Depends

from app.auth import AuthUser, get_current_user


def get_celery_app() -> Celery:
    """
    Get the Celery app used to queue builder prompts.

    Imported lazily so the API starts without a broker connection.
    """
    from workers.celery_app import celery_app
    return celery_app


# Type aliases for dependency injection
CurrentUser = Annotated[AuthUser, Depends(get_current_user)]
CeleryDep = Annotated[Celery, Depends(get_celery_app)]
