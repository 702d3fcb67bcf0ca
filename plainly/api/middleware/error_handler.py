"""
Global error handling middleware for the FastAPI application.

Catches PlainlyError subclasses, request validation errors, and unhandled
exceptions, converting them into a consistent ``{"error": ...}`` envelope.
"""

import logging
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from plainly.core.exceptions import PlainlyError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Attach exception handlers to the FastAPI application.

    Registers three handlers in priority order:
    1. ``PlainlyError``: maps domain errors to their HTTP status class.
    2. ``RequestValidationError``: malformed body/params (400).
    3. ``Exception``: catch-all for unexpected server errors (500).

    Args:
        app: The FastAPI application instance to register handlers on.
    """

    @app.exception_handler(PlainlyError)
    async def plainly_error_handler(_request: Request, exc: PlainlyError) -> JSONResponse:
        """Convert domain-specific errors into a JSON error envelope."""
        logger.info("%s -> %s: %s", exc.code, exc.status_code, exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.detail,
                "code": exc.code,
                "timestamp": exc.timestamp,
                **exc.extra,
            },
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle request validation errors (malformed body/params)."""
        return JSONResponse(
            status_code=400,
            content={
                "error": str(exc),
                "code": "INVALID_REQUEST",
                "timestamp": datetime.now(UTC).isoformat(),
            },
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(_request: Request, exc: Exception) -> JSONResponse:
        """Catch-all handler: prevents stack traces from leaking to clients."""
        logger.exception("Unhandled error: %s", exc)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "code": "INTERNAL_ERROR",
                "timestamp": datetime.now(UTC).isoformat(),
            },
        )
