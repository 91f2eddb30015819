"""
Custom exceptions and error handlers for consistent error responses.

Every error leaves the API as ``{"error": <message>, "error_code": <code>}``.
"""

import logging

from fastapi import Request, status
from starlette.exceptions import HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from typing import Any, Dict

logger = logging.getLogger("trailsafe.errors")


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, status_code: int = 500, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class AuthenticationError(AppException):
    """Raised when no caller identity can be resolved."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message=message,
            error_code="ERR_AUTH_001",
            status_code=status.HTTP_401_UNAUTHORIZED
        )


class TokenRevokedError(AppException):
    """Raised when token has been revoked."""

    def __init__(self):
        super().__init__(
            message="Token has been revoked",
            error_code="ERR_AUTH_002",
            status_code=status.HTTP_401_UNAUTHORIZED
        )


class InactiveUserError(AppException):
    """Raised when an authenticated account has been deactivated."""

    def __init__(self, message: str = "User account is inactive"):
        super().__init__(
            message=message,
            error_code="ERR_PERM_001",
            status_code=status.HTTP_403_FORBIDDEN
        )


class ValidationFailedError(AppException):
    """Raised when required fields are missing or malformed."""

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_VALIDATION",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details
        )


class ResourceNotFoundError(AppException):
    """Raised when a resource is absent or not owned by the caller."""

    def __init__(self, resource: str, resource_id: Any = None):
        super().__init__(
            message=f"{resource} not found",
            error_code="ERR_NOT_FOUND_001",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id}
        )


class TripStateError(AppException):
    """Raised when a transition is not allowed from the trip's current status."""

    def __init__(self, message: str, current_status: str = None):
        super().__init__(
            message=message,
            error_code="ERR_TRIP_STATE",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"status": current_status}
        )


class ActiveTripExistsError(AppException):
    """Raised when the caller already has an active trip."""

    def __init__(self, trip_id: str = None):
        super().__init__(
            message="You already have an active trip. Complete it before starting another.",
            error_code="ERR_CONFLICT_001",
            status_code=status.HTTP_409_CONFLICT,
            details={"active_trip_id": trip_id}
        )


class DispatchError(AppException):
    """
    Raised inside the SMS dispatcher when the provider rejects a message.

    Never reaches an HTTP caller; the dispatcher logs and swallows it.
    """

    def __init__(self, message: str, to_number: str = None):
        super().__init__(
            message=message,
            error_code="ERR_DISPATCH",
            status_code=status.HTTP_502_BAD_GATEWAY,
            details={"to": to_number}
        )


def _error_body(message: str, error_code: str) -> Dict[str, Any]:
    return {"error": message, "error_code": error_code}


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions. ``details`` is logged, never returned."""
    logger.warning(
        exc.message,
        extra={
            "path": request.url.path,
            "error_code": exc.error_code,
            "status_code": exc.status_code,
            "details": exc.details,
        },
    )
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.message, exc.error_code),
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPException with standardized format."""
    # Map status code to error code
    error_code_map = {
        400: "ERR_BAD_REQUEST",
        401: "ERR_UNAUTHORIZED",
        403: "ERR_FORBIDDEN",
        404: "ERR_NOT_FOUND",
        405: "ERR_METHOD_NOT_ALLOWED",
        409: "ERR_CONFLICT",
        500: "ERR_INTERNAL_SERVER"
    }

    error_code = error_code_map.get(exc.status_code, "ERR_UNKNOWN")

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail), error_code),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for request body validation errors, reported as 400."""
    errors = exc.errors()
    message = "Validation error"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(message, "ERR_VALIDATION"),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.exception(
        "Unhandled exception",
        extra={"path": request.url.path, "exc_type": type(exc).__name__},
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("An internal server error occurred", "ERR_INTERNAL_SERVER"),
    )
