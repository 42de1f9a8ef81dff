"""Application exceptions and the handlers that render them.

Every error leaves the API in the same envelope:

    {"error": {"code": "ERROR_CODE", "message": "...", "details": {...}}}

Validation and authentication failures are reported as-is. Database and
unexpected failures are logged with request context and reported with a
generic message so internals never reach the client.
"""

import logging
from typing import Union

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class FreightDeskException(Exception):
    """Base exception for FreightDesk application errors."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: str = "INTERNAL_ERROR",
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(self.message)


# ── Validation ───────────────────────────────────────────────

class BusinessLogicError(FreightDeskException):
    """Exception for business rule violations."""

    def __init__(self, message: str, error_code: str = "BUSINESS_LOGIC_ERROR"):
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code=error_code,
        )


class DuplicateNameError(FreightDeskException):
    """A record with the same name already exists in its collection."""

    def __init__(self, label: str):
        super().__init__(
            message=f"{label} with this name already exists. Please choose a different name.",
            status_code=status.HTTP_409_CONFLICT,
            error_code="DUPLICATE_NAME",
        )


class ResourceNotFoundError(FreightDeskException):
    """Exception for resources not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            message=f"{resource} not found: {identifier}",
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="RESOURCE_NOT_FOUND",
        )


class PermissionDeniedError(FreightDeskException):
    """Exception for permission denied."""

    def __init__(self, message: str = "Permission denied"):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="PERMISSION_DENIED",
        )


# ── Authentication ───────────────────────────────────────────

class SessionError(FreightDeskException):
    """A login or session could not be established."""

    def __init__(
        self,
        message: str,
        error_code: str,
        status_code: int = status.HTTP_401_UNAUTHORIZED,
    ):
        super().__init__(message=message, status_code=status_code, error_code=error_code)


class InvalidIdentifierError(SessionError):
    def __init__(self):
        super().__init__("Invalid login code", "INVALID_IDENTIFIER")


class IncorrectCredentialError(SessionError):
    def __init__(self):
        super().__init__("Incorrect password", "INCORRECT_CREDENTIAL")


class AccountInactiveError(SessionError):
    def __init__(self):
        super().__init__(
            "Account is inactive. Contact your administrator.",
            "ACCOUNT_INACTIVE",
            status_code=status.HTTP_403_FORBIDDEN,
        )


class ProfileNotFoundError(SessionError):
    def __init__(self):
        super().__init__(
            "User profile not found. Please contact your administrator.",
            "PROFILE_NOT_FOUND",
        )


# ── Integration ──────────────────────────────────────────────

class IntegrationError(FreightDeskException):
    """A database or storage call failed; the operation was abandoned."""

    def __init__(self, message: str = "The operation could not be completed. Please try again."):
        super().__init__(
            message=message,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            error_code="INTEGRATION_ERROR",
        )


def create_error_response(
    status_code: int,
    message: str,
    error_code: str = "ERROR",
    details: Union[dict, list, None] = None,
    headers: dict | None = None,
) -> JSONResponse:
    """Build the standard error envelope."""
    error = {"code": error_code, "message": message}
    if details:
        error["details"] = details
    return JSONResponse(status_code=status_code, content={"error": error}, headers=headers)


def _context(request: Request, **extra) -> dict:
    return {"path": request.url.path, "method": request.method, **extra}


# Substring of the driver message → (error code, client message)
_INTEGRITY_ERRORS = (
    ("unique", "DUPLICATE_RECORD", "A record with this value already exists"),
    ("foreign key", "FOREIGN_KEY_VIOLATION", "Referenced record does not exist"),
    ("not null", "NULL_VALUE_NOT_ALLOWED", "Required field is missing"),
)


async def freightdesk_exception_handler(request: Request, exc: FreightDeskException) -> JSONResponse:
    logger.warning(
        "%s on %s: %s",
        exc.error_code,
        request.url.path,
        exc.message,
        extra=_context(request, error_code=exc.error_code),
    )
    return create_error_response(exc.status_code, exc.message, exc.error_code)


async def http_exception_handler(
    request: Request,
    exc: Union[HTTPException, StarletteHTTPException],
) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("HTTP %s: %s", exc.status_code, exc.detail, extra=_context(request))
    return create_error_response(
        status_code=exc.status_code,
        message=str(exc.detail),
        error_code=f"HTTP_{exc.status_code}",
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request,
    exc: Union[RequestValidationError, ValidationError],
) -> JSONResponse:
    """Report every failing field as ``{"field": "body -> name", ...}``."""
    logger.warning("Validation error on %s", request.url.path, extra=_context(request))
    errors = [
        {
            "field": " -> ".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    return create_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        message="Validation error",
        error_code="VALIDATION_ERROR",
        details={"errors": errors},
    )


async def database_exception_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """A constraint rejected the write; the driver text never reaches the client."""
    logger.error("Integrity error on %s: %s", request.url.path, exc, extra=_context(request))

    driver_message = str(getattr(exc, "orig", exc)).lower()
    for needle, error_code, message in _INTEGRITY_ERRORS:
        if needle in driver_message:
            break
    else:
        error_code, message = "INTEGRITY_ERROR", "Database constraint violation"

    return create_error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, message, error_code)


async def operational_exception_handler(request: Request, exc: OperationalError) -> JSONResponse:
    logger.error("Database unavailable on %s: %s", request.url.path, exc, extra=_context(request))
    return create_error_response(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        message="Database temporarily unavailable. Please try again.",
        error_code="DATABASE_UNAVAILABLE",
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled exception on %s: %s",
        request.url.path,
        exc,
        extra=_context(request),
        exc_info=exc,
    )
    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message="An unexpected error occurred. Please try again later.",
        error_code="INTERNAL_SERVER_ERROR",
    )


def register_exception_handlers(app):
    """Register all custom exception handlers with FastAPI app."""
    app.add_exception_handler(FreightDeskException, freightdesk_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, database_exception_handler)
    app.add_exception_handler(OperationalError, operational_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
