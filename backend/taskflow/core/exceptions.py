"""
Application exceptions and their HTTP rendering.

Services raise the classes below; ``register_exception_handlers`` maps each one
to a status code and a uniform JSON error body::

    {"status": 404, "error": "Not Found", "message": "...", "path": "/api/...",
     "timestamp": "...", "details": {...}}
"""

from datetime import datetime, timezone
from http import HTTPStatus
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from taskflow.core.logging import get_logger

logger = get_logger(__name__)


class TaskflowException(Exception):
    """Base exception for Taskflow."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class NotFound(TaskflowException):
    """Raised when a requested entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class Forbidden(TaskflowException):
    """Raised when the caller is authenticated but not allowed to act."""

    status_code = status.HTTP_403_FORBIDDEN


class Conflict(TaskflowException):
    """Raised on duplicate registration or membership."""

    status_code = status.HTTP_409_CONFLICT


class ValidationFailed(TaskflowException):
    """Raised when request data is malformed.

    ``errors`` maps each offending field to the list of violated rules.
    """

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, errors: dict[str, list[str]], message: str = "Validation failed"):
        self.errors = errors
        super().__init__(message, details={"errors": errors})


class Unauthenticated(TaskflowException):
    """Raised when a protected endpoint is called without a valid token."""

    status_code = status.HTTP_401_UNAUTHORIZED


def raise_not_found(resource_type: str, identifier: Any = None, message: str = None) -> None:
    """
    Raise NotFound with a descriptive message.

    Args:
        resource_type: Type of resource (e.g., "Project", "Task", "User")
        identifier: The id that was not found
        message: Custom message (overrides default)
    """
    if message:
        detail = message
    elif identifier is not None:
        detail = f"{resource_type} not found with id: {identifier}"
    else:
        detail = f"{resource_type} not found"

    raise NotFound(detail, details={"resource": resource_type, "id": identifier})


def raise_permission_denied(message: str = "Permission denied") -> None:
    """Raise Forbidden with the given message."""
    raise Forbidden(message)


def error_body(request: Request, status_code: int, message: str, details: dict) -> dict:
    return {
        "status": status_code,
        "error": HTTPStatus(status_code).phrase,
        "message": message,
        "path": request.url.path,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "details": details,
    }


def _field_name(loc: tuple) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path", "header")]
    return ".".join(parts) or str(loc[0] if loc else "request")


async def taskflow_exception_handler(request: Request, exc: TaskflowException) -> JSONResponse:
    logger.info(
        "request_rejected",
        error_type=type(exc).__name__,
        status_code=exc.status_code,
        message=exc.message,
    )
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(request, exc.status_code, exc.message, exc.details),
        headers=headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        errors.setdefault(_field_name(tuple(error.get("loc", ()))), []).append(error.get("msg", "invalid"))
    failure = ValidationFailed(errors)
    return await taskflow_exception_handler(request, failure)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", error_type=type(exc).__name__, path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", {}),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TaskflowException, taskflow_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
