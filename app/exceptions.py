# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors should tell HOW to fix, not just WHAT failed.
#
# Services raise these directly; main.py turns them into JSON responses.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class GridbaseException(Exception):
    """
    Base exception for the Gridbase API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "GRIDBASE_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


class NotFoundError(GridbaseException):
    """
    Raised when an entity doesn't exist or the user can't see it.

    Non-members get this too, so existence is never revealed.
    """

    def __init__(self, entity: str, entity_id: str):
        super().__init__(
            message=f"{entity.capitalize()} not found: {entity_id}",
            code=f"{entity.upper().replace(' ', '_')}_NOT_FOUND",
            status_code=404,
            suggestion=f"Check that the {entity} id is correct and you are a member of its workspace",
            details={f"{entity.replace(' ', '_')}_id": entity_id}
        )


# =============================================================================
# Workspace / Access Exceptions
# =============================================================================

class WorkspaceNotFoundError(NotFoundError):
    def __init__(self, workspace_id: str):
        super().__init__("workspace", workspace_id)


class PermissionDeniedError(GridbaseException):
    """Raised when a member's role doesn't allow the operation."""

    def __init__(self, action: str, role: str | None):
        super().__init__(
            message=f"Your role ({role or 'none'}) cannot {action}",
            code="PERMISSION_DENIED",
            status_code=403,
            suggestion="Ask a workspace owner to grant you the editor or owner role",
            details={"action": action, "role": role}
        )


# =============================================================================
# Grid Exceptions
# =============================================================================

class BaseNotFoundError(NotFoundError):
    def __init__(self, base_id: str):
        super().__init__("base", base_id)


class TableNotFoundError(NotFoundError):
    def __init__(self, table_id: str):
        super().__init__("table", table_id)


class FieldNotFoundError(NotFoundError):
    def __init__(self, field_id: str):
        super().__init__("field", field_id)


class RecordNotFoundError(NotFoundError):
    def __init__(self, record_id: str):
        super().__init__("record", record_id)


class InvalidFieldError(GridbaseException):
    """Raised when a field definition is inconsistent (e.g. options on a text field)."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="INVALID_FIELD",
            status_code=422,
            suggestion="Only select and multiselect fields take options",
            details=details
        )


class InvalidCellValueError(GridbaseException):
    """Raised when an edited cell doesn't fit its field's type."""

    def __init__(self, field_type: str, value: str, reason: str):
        super().__init__(
            message=f"Invalid {field_type} value {value!r}: {reason}",
            code="INVALID_CELL_VALUE",
            status_code=422,
            suggestion=f"Enter a valid {field_type} or leave the cell empty",
            details={"field_type": field_type, "value": value}
        )


class FieldTableMismatchError(GridbaseException):
    """Raised when a cell edit names a field from another table."""

    def __init__(self, field_id: str, record_id: str):
        super().__init__(
            message=f"Field {field_id} does not belong to the table of record {record_id}",
            code="FIELD_TABLE_MISMATCH",
            status_code=400,
            suggestion="Use a field id returned by GET /tables/{table_id}/fields",
            details={"field_id": field_id, "record_id": record_id}
        )


# =============================================================================
# Subscription Exceptions
# =============================================================================

class PlanLimitExceededError(GridbaseException):
    """Raised when the active plan doesn't allow creating another resource."""

    def __init__(self, limit_type: str, current: int | None = None, limit: int | None = None):
        super().__init__(
            message=f"You have reached your {limit_type} limit",
            code="PLAN_LIMIT_REACHED",
            status_code=403,
            suggestion=f"Upgrade your plan to create more {limit_type}",
            details={"limit_type": limit_type, "current": current, "limit": limit}
        )


class FeatureNotAvailableError(GridbaseException):
    """Raised when a plan feature flag is off."""

    def __init__(self, feature: str):
        super().__init__(
            message=f"Your plan does not include {feature}",
            code="FEATURE_NOT_AVAILABLE",
            status_code=403,
            suggestion="Upgrade your plan to unlock this feature",
            details={"feature": feature}
        )


# =============================================================================
# Project / Builder Exceptions
# =============================================================================

class ProjectNotFoundError(NotFoundError):
    def __init__(self, project_id: str):
        super().__init__("project", project_id)


class ProjectArchivedError(GridbaseException):
    """Raised when trying to modify an archived project."""

    def __init__(self, project_id: str):
        super().__init__(
            message=f"Project is archived: {project_id}",
            code="PROJECT_ARCHIVED",
            status_code=400,
            suggestion="Create a new project to continue building",
            details={"project_id": project_id}
        )


class BuilderSessionNotFoundError(NotFoundError):
    def __init__(self, session_id: str):
        super().__init__("builder session", session_id)


class BuilderSessionEndedError(GridbaseException):
    def __init__(self, session_id: str):
        super().__init__(
            message=f"Builder session has ended: {session_id}",
            code="BUILDER_SESSION_ENDED",
            status_code=400,
            suggestion="Start a new builder session",
            details={"session_id": session_id}
        )


class ChangeRequestNotFoundError(NotFoundError):
    def __init__(self, change_id: str):
        super().__init__("change request", change_id)


class ChangeRequestStateError(GridbaseException):
    """Raised when a change request isn't in a state that allows the transition."""

    def __init__(self, change_id: str, status: str, action: str):
        super().__init__(
            message=f"Cannot {action} change request {change_id} in status {status}",
            code="CHANGE_REQUEST_STATE",
            status_code=409,
            suggestion="Reload pending changes; another reviewer may have acted on it",
            details={"change_id": change_id, "status": status, "action": action}
        )


class BuilderTimeoutError(GridbaseException):
    """Raised when the builder agent doesn't answer in time."""

    def __init__(self, session_id: str, timeout: float):
        super().__init__(
            message=f"Builder did not respond within {timeout:.0f}s",
            code="BUILDER_TIMEOUT",
            status_code=504,
            suggestion="Try again with a shorter request",
            details={"session_id": session_id, "timeout_seconds": timeout}
        )


class BuilderAgentError(GridbaseException):
    """Raised when the builder agent fails to produce a result."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="BUILDER_AGENT_ERROR",
            status_code=502,
            suggestion="Check the builder backend configuration (BUILDER_BACKEND, OPENAI_API_KEY)",
            details=details
        )


# =============================================================================
# Marketplace Exceptions
# =============================================================================

class BlueprintNotFoundError(NotFoundError):
    def __init__(self, blueprint_id: str):
        super().__init__("blueprint", blueprint_id)


class BlueprintInstallNotFoundError(NotFoundError):
    def __init__(self, install_id: str):
        super().__init__("blueprint install", install_id)


class InstallStateError(GridbaseException):
    def __init__(self, install_id: str, status: str):
        super().__init__(
            message=f"Blueprint install {install_id} is already {status}",
            code="INSTALL_STATE",
            status_code=409,
            suggestion="Install the blueprint again to get a fresh install",
            details={"install_id": install_id, "status": status}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def gridbase_exception_handler(
    request: Request,
    exc: GridbaseException
) -> JSONResponse:
    """
    Convert GridbaseException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def backend_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle Supabase failures.

    The backend owns durability and access control, so its failures surface
    as a bad gateway instead of pretending nothing changed.
    """
    content = {
        "detail": "The database backend rejected the request",
        "code": "BACKEND_ERROR",
    }
    suggestion = getattr(exc, "suggestion", None)
    if suggestion:
        content["suggestion"] = suggestion
    return JSONResponse(status_code=502, content=content)
