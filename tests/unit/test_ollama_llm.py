"""Unit tests for OllamaLLM provider."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from ollama import ResponseError

from plainly.core.exceptions import (
    GenerationError,
    ProviderAuthError,
    ProviderRateLimitError,
    ProviderTimeoutError,
)
from plainly.services.llm.ollama import OllamaLLM

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_chat_response(text: str):
    """Build a minimal object that looks like ``ollama.ChatResponse``."""
    message = SimpleNamespace(content=text)
    return SimpleNamespace(message=message)


def _mock_settings(**overrides):
    """Return a fake Settings object with sensible defaults."""
    defaults = {
        "ollama_base_url": "http://localhost:11434",
        "ollama_model": "llama3.2",
        "provider_timeout_seconds": 120.0,
    }
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_client():
    """Return an ``AsyncMock`` mimicking ``ollama.AsyncClient``."""
    client = AsyncMock()
    client.chat = AsyncMock(return_value=_make_chat_response('{"gist": "x"}'))
    return client


@pytest.fixture
def llm(mock_client):
    """Create an OllamaLLM with a mocked Ollama client."""
    with patch("plainly.services.llm.ollama.get_settings", return_value=_mock_settings()):
        with patch("plainly.services.llm.ollama.AsyncClient", return_value=mock_client):
            instance = OllamaLLM()
    return instance


class TestOllamaLLMInit:
    """Constructor / settings tests."""

    def test_defaults_from_settings(self):
        with patch("plainly.services.llm.ollama.get_settings", return_value=_mock_settings()):
            with patch("plainly.services.llm.ollama.AsyncClient") as mock_cls:
                llm = OllamaLLM()

        assert llm._base_url == "http://localhost:11434"
        assert llm._model == "llama3.2"
        mock_cls.assert_called_once_with(host="http://localhost:11434", timeout=120.0)


class TestGenerate:
    """Tests for ``generate()``."""

    async def test_builds_messages_with_system(self, llm, mock_client):
        await llm.generate("user prompt", system="Be brief")

        messages = mock_client.chat.call_args.kwargs["messages"]
        assert messages == [
            {"role": "system", "content": "Be brief"},
            {"role": "user", "content": "user prompt"},
        ]

    async def test_json_mode_sets_format(self, llm, mock_client):
        await llm.generate("prompt", json_mode=True, max_tokens=2000)

        call_kwargs = mock_client.chat.call_args.kwargs
        assert call_kwargs["format"] == "json"
        assert call_kwargs["options"]["num_predict"] == 2000

    async def test_plain_mode_has_no_format(self, llm, mock_client):
        await llm.generate("prompt")

        assert mock_client.chat.call_args.kwargs["format"] == ""


class TestErrorHandling:
    """Tests for exception translation."""

    async def test_connection_error(self, llm, mock_client):
        mock_client.chat.side_effect = ConnectionError("refused")

        with pytest.raises(GenerationError, match="Failed to connect"):
            await llm.generate("prompt")

    async def test_timeout_error(self, llm, mock_client):
        mock_client.chat.side_effect = httpx.ReadTimeout("slow")

        with pytest.raises(ProviderTimeoutError):
            await llm.generate("prompt")

    @pytest.mark.parametrize(
        ("status", "expected"),
        [(401, ProviderAuthError), (429, ProviderRateLimitError), (500, GenerationError)],
    )
    async def test_response_error_status(self, llm, mock_client, status, expected):
        mock_client.chat.side_effect = ResponseError("boom", status_code=status)

        with pytest.raises(expected):
            await llm.generate("prompt")
