"""
OpenAI chat-completions LLM provider.

Uses ``openai.AsyncOpenAI`` with a fixed timeout and no SDK retries. JSON
mode maps to ``response_format={"type": "json_object"}``.
"""

import logging

from plainly.core.config import get_settings
from plainly.core.exceptions import GenerationError
from plainly.services.llm.base import BaseLLM
from plainly.services.openai_client import create_openai_client, translate_openai_error

logger = logging.getLogger(__name__)


class OpenAILLM(BaseLLM):
    """Chat-completions provider (default model ``gpt-4o-mini``)."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        max_tokens: int = 1000,
        temperature: float = 0.3,
        timeout: float | None = None,
    ) -> None:
        settings = get_settings()
        self._api_key = api_key or settings.openai_api_key
        self._model = model or settings.openai_llm_model
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._client = create_openai_client(
            api_key=self._api_key,
            timeout=timeout or settings.provider_timeout_seconds,
            base_url=settings.openai_base_url,
        )

    async def _call_api(
        self,
        messages: list[dict[str, str]],
        temperature: float | None = None,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> str:
        kwargs: dict = {
            "model": self._model,
            "messages": messages,
            "temperature": temperature if temperature is not None else self._temperature,
            "max_tokens": max_tokens or self._max_tokens,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await self._client.chat.completions.create(**kwargs)
        except Exception as exc:
            raise translate_openai_error(exc, GenerationError, "OpenAI API") from exc

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def generate(self, prompt: str, **kwargs) -> str:
        """Generate a chat completion for *prompt*."""
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
