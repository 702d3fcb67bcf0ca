"""
Ollama LLM provider implementation.

Uses the Ollama Python SDK (``ollama.AsyncClient``) to interact with a
locally running Ollama server. JSON mode maps to ``format="json"``.
"""

import logging

import httpx
from ollama import AsyncClient, ResponseError

from plainly.core.config import get_settings
from plainly.core.exceptions import (
    GenerationError,
    ProviderAuthError,
    ProviderRateLimitError,
    ProviderTimeoutError,
)
from plainly.services.llm.base import BaseLLM

logger = logging.getLogger(__name__)


class OllamaLLM(BaseLLM):
    """Ollama local LLM provider.

    Connects to a locally running Ollama server via its REST API.
    """

    def __init__(
        self,
        base_url: str | None = None,
        model: str | None = None,
        temperature: float = 0.3,
        timeout: float | None = None,
    ) -> None:
        """Initialize the Ollama LLM provider.

        Args:
            base_url: Ollama server URL (falls back to settings if not provided).
            model: Model name to use (e.g. "llama3.2").
            temperature: Sampling temperature for text generation (0.0–1.0).
            timeout: Request timeout in seconds (defaults to the provider timeout).
        """
        settings = get_settings()
        self._base_url = base_url or settings.ollama_base_url
        self._model = model or settings.ollama_model
        self._temperature = temperature
        self._client = AsyncClient(
            host=self._base_url,
            timeout=timeout or settings.provider_timeout_seconds,
        )

    async def _call_api(
        self,
        messages: list[dict[str, str]],
        temperature: float | None = None,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> str:
        """Send a chat request to the Ollama server."""
        options: dict = {
            "temperature": temperature if temperature is not None else self._temperature
        }
        if max_tokens:
            options["num_predict"] = max_tokens
        try:
            response = await self._client.chat(
                model=self._model,
                messages=messages,
                format="json" if json_mode else "",
                options=options,
            )
            return response.message.content or ""

        except httpx.TimeoutException as exc:
            logger.warning("Ollama timeout (%s): %s", self._base_url, exc)
            raise ProviderTimeoutError(f"Ollama request timed out ({self._base_url})") from exc
        except ConnectionError as exc:
            logger.warning("Ollama connection error (%s): %s", self._base_url, exc)
            raise GenerationError(
                f"Failed to connect to Ollama at {self._base_url}: {exc}"
            ) from exc
        except ResponseError as exc:
            logger.error("Ollama response error: %s", exc)
            if exc.status_code == 401:
                raise ProviderAuthError() from exc
            if exc.status_code == 429:
                raise ProviderRateLimitError() from exc
            raise GenerationError(
                f"Ollama error: {exc.error}", provider_status=exc.status_code
            ) from exc

    async def generate(self, prompt: str, **kwargs) -> str:
        """Generate a free-form text response."""
        messages: list[dict[str, str]] = []
        system = kwargs.pop("system", None)
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        return await self._call_api(
            messages=messages,
            temperature=kwargs.pop("temperature", None),
            max_tokens=kwargs.pop("max_tokens", None),
            json_mode=kwargs.pop("json_mode", False),
        )
