"""
Error types and the single error sink for the user API.

Every failure that reaches a client is an ApiError rendered as
{"status": "error", "message": ..., "details": ...}. Anything else is
wrapped first; stack traces and raw internal errors are never rendered.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from .config import Settings

logger = logging.getLogger(__name__)

ALREADY_REGISTERED_MESSAGE = "User already registered"


class ApiError(Exception):
    """
    A user-visible failure.

    Args:
        status_code: HTTP status to respond with
        message: Client-facing message
        details: Optional structured payload rendered alongside the message
        cause: Original error kept as debug context, never rendered raw
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        details: Any = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.details = details
        self.cause = cause


class RequestValidationError(ApiError):
    """Field-level input defects (400)."""

    def __init__(self, errors: list[dict[str, str]], message: str = "Validation Error"):
        super().__init__(400, message, {"errors": errors})
        self.errors = errors


class ConflictError(ApiError):
    """Uniqueness violation (409)."""

    def __init__(self, message: str):
        super().__init__(409, message)


class NotImplementedApiError(ApiError):
    """Placeholder for functionality that does not exist yet (501)."""

    def __init__(self, message: str = "Not implemented yet"):
        super().__init__(501, message)


class UnexpectedError(ApiError):
    """Catch-all wrapper for unclassified failures (500)."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(500, message, cause=cause)


class UserServiceError(Exception):
    """Base class for failures raised by a user service."""


class UserAlreadyRegisteredError(UserServiceError):
    """The email is already registered."""

    def __init__(self, message: str = ALREADY_REGISTERED_MESSAGE):
        super().__init__(message)


def is_already_registered(exc: BaseException) -> bool:
    """Recognise the duplicate-email condition, typed or by its sentinel message."""
    if isinstance(exc, UserAlreadyRegisteredError):
        return True
    return str(exc) == ALREADY_REGISTERED_MESSAGE


def normalize_error(
    exc: BaseException,
    message: str,
    attach_cause: bool = False,
    detect_conflict: bool = False,
) -> ApiError:
    """
    Map any failure raised while handling a request to an ApiError.

    ApiErrors pass through unchanged. When detect_conflict is set, duplicate
    registrations become a 409. Everything else is wrapped in a generic 500.

    Args:
        exc: The failure
        message: Generic message used when the failure is wrapped
        attach_cause: Keep the original failure as debug context on the wrapper
        detect_conflict: Translate the already-registered condition to a 409
    """
    if isinstance(exc, ApiError):
        return exc
    if detect_conflict and is_already_registered(exc):
        return ConflictError("Email is already registered")
    return UnexpectedError(message, cause=exc if attach_cause else None)


def error_response(
    status_code: int,
    message: str,
    details: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build a consistent JSON error envelope."""
    body: dict[str, Any] = {"status": "error", "message": message}
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def render_api_error(exc: ApiError, expose_details: bool = False) -> JSONResponse:
    """Render an ApiError, dropping anything that is not plain data."""
    details = exc.details
    if isinstance(details, BaseException):
        details = None
    if expose_details and exc.cause is not None and exc.status_code >= 500:
        details = {"cause": f"{type(exc.cause).__name__}: {exc.cause}"}
    return error_response(exc.status_code, exc.message, details)


def register_error_handlers(app: FastAPI, config: Settings) -> None:
    """Register the error sink on the FastAPI application.

    Args:
        app: The FastAPI application instance.
        config: Settings controlling whether wrapped causes are exposed.
    """

    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
        """Render classified failures."""
        if exc.status_code >= 500 and exc.status_code != 501:
            logger.error(
                "%s %s failed: %s",
                request.method,
                request.url.path,
                exc.message,
                exc_info=exc.cause,
            )
        else:
            logger.warning(
                "%s %s rejected with %d: %s",
                request.method,
                request.url.path,
                exc.status_code,
                exc.message,
            )
        return render_api_error(exc, expose_details=config.expose_error_details)

    @app.exception_handler(HTTPException)
    async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
        """Render framework errors such as unknown routes or missing bearer credentials."""
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return error_response(500, "Internal server error")
