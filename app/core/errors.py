"""
Domain error taxonomy and its mapping onto HTTP responses.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class CarbonError(Exception):
    """Base class for errors the API reports to clients."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    retryable = False

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(CarbonError):
    """Malformed or missing input. User-correctable, never retried."""

    status_code = status.HTTP_400_BAD_REQUEST


class InvalidInput(ValidationError):
    """Non-numeric input handed to a pure calculation."""


class AuthError(CarbonError):
    """Missing credential."""

    status_code = status.HTTP_401_UNAUTHORIZED


class InvalidCredential(AuthError):
    """Credential present but invalid or expired."""

    status_code = status.HTTP_403_FORBIDDEN


class PermissionDenied(CarbonError):
    """Authenticated, but not allowed to act on the target."""

    status_code = status.HTTP_403_FORBIDDEN


class ConflictError(CarbonError):
    """Duplicate unique key."""

    status_code = status.HTTP_409_CONFLICT


class DerivationFailed(CarbonError):
    """
    Transactional failure while deriving credits/alerts for a reading.

    Retryable by re-submitting the same emission_id.
    """

    retryable = True


class StoreUnavailable(CarbonError):
    """Persistence layer unreachable or timed out."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    retryable = True


async def carbon_error_handler(request: Request, exc: CarbonError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "Request failed: %s",
            exc.message,
            extra={"reason": type(exc).__name__},
        )
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "retryable": exc.retryable},
        headers=headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        details.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request body", "details": details},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the domain error handlers to an application."""
    app.add_exception_handler(CarbonError, carbon_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
