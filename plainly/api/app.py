"""
FastAPI application factory.

``create_app()`` assembles the application with CORS, error handlers,
routers, and the health endpoint. The module-level ``app`` instance
allows ``uvicorn plainly.api.app:app --reload --port 3001``.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from plainly import __version__
from plainly.api.middleware.error_handler import register_error_handlers
from plainly.api.routes import processing
from plainly.core.config import get_settings
from plainly.core.models import HealthResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Apply the configured log level and warn about missing credentials."""
    settings = get_settings()
    logging.getLogger("plainly").setLevel(settings.log_level.upper())
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY not set; processing endpoints will return 500")
    yield


def create_app() -> FastAPI:
    """Build and return a fully configured FastAPI application.

    Returns:
        FastAPI: The configured application, ready for ``uvicorn``.
    """

    app = FastAPI(
        title="Plainly",
        description="Voice-note processing: transcription and structured summaries.",
        version=__version__,
        lifespan=lifespan,
    )

    # -- CORS --
    settings = get_settings()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -- Error handlers --
    register_error_handlers(app)

    # -- Health check (root-level, not under /api) --
    @app.get("/health", response_model=HealthResponse, tags=["system"])
    async def health() -> HealthResponse:
        return HealthResponse(version=__version__, timestamp=datetime.now(UTC))

    # -- REST routes --
    app.include_router(processing.router, prefix="/api")

    return app


app = create_app()
