"""
Error types and secure error handling

Domain errors raised by the project store and the media relay, plus helpers
that turn them into HTTP responses without leaking internal details.
"""

import logging
import uuid
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class PortfolioError(Exception):
    """Base class for errors surfaced to API clients."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PortfolioError):
    """Client input is missing or malformed."""
    status_code = 400

    def __init__(self, message: str, fields: Optional[list[str]] = None):
        super().__init__(message)
        self.fields = fields or []


class NotFoundError(PortfolioError):
    status_code = 404


class StorageError(PortfolioError):
    """The projects document could not be read or written."""
    status_code = 500


class UpstreamMediaError(PortfolioError):
    """The image host rejected a request or returned an unusable response."""
    status_code = 500


def log_and_sanitize_error(
    error: Exception,
    context: str,
    user_message: Optional[str] = None
) -> tuple[str, str]:
    """
    Log full error details server-side and return sanitized message for client.

    Args:
        error: The exception that occurred
        context: Description of what operation failed (e.g., "Image upload")
        user_message: Optional custom message to show user. If None, uses generic message.

    Returns:
        Tuple of (sanitized_message, error_id) for client response
    """
    error_id = str(uuid.uuid4())[:8]

    logger.error(
        f"{context} failed [{error_id}]: {type(error).__name__}: {str(error)}",
        exc_info=error,
    )

    if user_message:
        sanitized = f"{user_message} (Error ID: {error_id})"
    else:
        sanitized = f"{context} failed. Please try again later. (Error ID: {error_id})"

    return sanitized, error_id


def register_error_handlers(app: FastAPI) -> None:
    """Map PortfolioError subclasses to JSON responses."""

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        detail = {"message": exc.message}
        if exc.fields:
            detail["fields"] = exc.fields
        return JSONResponse(status_code=exc.status_code, content={"detail": detail})

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(PortfolioError)
    async def handle_server_error(request: Request, exc: PortfolioError) -> JSONResponse:
        context = f"{request.method} {request.url.path}"
        sanitized, _ = log_and_sanitize_error(exc, context, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"detail": sanitized})
