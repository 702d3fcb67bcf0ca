"""Integration test fixtures for Plainly.

Provides an async HTTP client over the real FastAPI app, with the
pipeline dependency wired to mock STT/LLM providers.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from plainly.api.app import create_app
from plainly.api.dependencies import get_optional_pipeline, get_pipeline
from plainly.services.pipeline import ProcessingPipeline


@pytest.fixture
def pipeline(mock_stt, mock_llm):
    return ProcessingPipeline(stt=mock_stt, llm=mock_llm)


@pytest.fixture
def app(pipeline):
    """Create a fresh FastAPI application with the mock pipeline injected."""
    app = create_app()
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    app.dependency_overrides[get_optional_pipeline] = lambda: pipeline
    return app


@pytest.fixture
async def async_client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def unconfigured_client():
    """Client for an app whose providers have no credentials."""
    from plainly.core.exceptions import ConfigurationError

    def _raise():
        raise ConfigurationError("OpenAI API key not configured")

    app = create_app()
    app.dependency_overrides[get_pipeline] = _raise
    app.dependency_overrides[get_optional_pipeline] = lambda: None
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
