"""
Global error handling for the FastAPI application.

Catches StoopError subclasses, database errors, Pydantic validation errors,
and unhandled exceptions, converting them into a consistent JSON envelope:
``{"error", "detail", "code", "timestamp"}``.
"""

import logging
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from stoop.core.exceptions import StoopError
from stoop.core.models import ErrorResponse

logger = logging.getLogger(__name__)


def _envelope(status_code: int, detail: str, code: str, timestamp: str | None = None) -> JSONResponse:
    body = ErrorResponse(
        error=detail,
        detail=detail,
        code=code,
        timestamp=timestamp or datetime.now(UTC).isoformat(),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


def register_error_handlers(app: FastAPI) -> None:
    """Attach exception handlers to the FastAPI application.

    Registers four handlers:
    1. ``StoopError`` - maps domain errors to their own status and code.
    2. ``SQLAlchemyError`` - store failures (500, ``DATABASE_ERROR``).
    3. ``RequestValidationError`` - malformed body/params (422).
    4. ``Exception`` - catch-all for unexpected server errors (500).
    """

    @app.exception_handler(StoopError)
    async def stoop_error_handler(_request: Request, exc: StoopError) -> JSONResponse:
        """Convert domain-specific errors into a JSON error envelope."""
        return _envelope(exc.status_code, exc.detail, exc.code, exc.timestamp)

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
        message = str(exc.orig) if getattr(exc, "orig", None) is not None else str(exc)
        return _envelope(500, f"Database error: {message}", "DATABASE_ERROR")

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle Pydantic request validation errors (malformed body/params)."""
        return _envelope(422, str(exc), "VALIDATION_ERROR")

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all handler; prevents stack traces from leaking to clients."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return _envelope(500, "Internal server error", "INTERNAL_ERROR")
