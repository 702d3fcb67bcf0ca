"""
Claude LLM provider implementation.

Uses the Anthropic Python SDK (``anthropic.AsyncAnthropic``) to interact with
the Claude API. Includes a concurrency semaphore; SDK retries are disabled so
failures reach the caller within the configured timeout.
"""

import asyncio
import logging

from anthropic import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AsyncAnthropic,
    AuthenticationError,
    RateLimitError,
)

from plainly.core.config import get_settings
from plainly.core.exceptions import (
    GenerationError,
    ProviderAuthError,
    ProviderRateLimitError,
    ProviderTimeoutError,
)
from plainly.services.llm.base import BaseLLM

logger = logging.getLogger(__name__)

JSON_ONLY_SUFFIX = "\n\nRespond with a single JSON object and nothing else."


class ClaudeLLM(BaseLLM):
    """Claude API LLM provider with a rate-limit semaphore."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        max_tokens: int = 1000,
        temperature: float = 0.3,
        max_concurrent: int = 5,
        timeout: float | None = None,
    ) -> None:
        settings = get_settings()
        self._api_key = api_key or settings.claude_api_key
        self._model = model or settings.claude_model
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._client = AsyncAnthropic(
            api_key=self._api_key,
            timeout=timeout or settings.provider_timeout_seconds,
            max_retries=0,
        )

    async def _call_api(
        self,
        user_prompt: str,
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Send a request to Claude, respecting the concurrency semaphore.

        SDK exceptions are translated to the Plainly provider errors so the
        API layer can map them to HTTP status classes.
        """
        async with self._semaphore:
            try:
                kwargs: dict = {
                    "model": self._model,
                    "max_tokens": max_tokens or self._max_tokens,
                    "temperature": temperature if temperature is not None else self._temperature,
                    "messages": [{"role": "user", "content": user_prompt}],
                }
                if system:
                    kwargs["system"] = system

                response = await self._client.messages.create(**kwargs)
            except AuthenticationError as exc:
                logger.error("Claude API rejected the API key")
                raise ProviderAuthError() from exc
            except RateLimitError as exc:
                logger.warning("Claude API rate limit hit: %s", exc)
                raise ProviderRateLimitError() from exc
            except APITimeoutError as exc:
                logger.warning("Claude API timeout: %s", exc)
                raise ProviderTimeoutError("Claude API request timed out") from exc
            except APIConnectionError as exc:
                logger.warning("Claude API connection error: %s", exc)
                raise GenerationError(f"Failed to connect to Claude API: {exc}") from exc
            except APIStatusError as exc:
                logger.error("Claude API error: %s", exc)
                raise GenerationError(
                    f"Claude API error: {exc.status_code}",
                    provider_status=exc.status_code,
                ) from exc

        if not response.content:
            return ""
        return getattr(response.content[0], "text", "") or ""

    async def generate(self, prompt: str, **kwargs) -> str:
        """Generate a free-form text response."""
        system = kwargs.pop("system", None)
        if kwargs.pop("json_mode", False):
            # No native JSON mode; constrain through the system prompt
            system = (system or "") + JSON_ONLY_SUFFIX
        return await self._call_api(
            user_prompt=prompt,
            system=system,
            temperature=kwargs.pop("temperature", None),
            max_tokens=kwargs.pop("max_tokens", None),
        )
