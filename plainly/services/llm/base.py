"""
Abstract base class for LLM providers.

All LLM implementations (OpenAI, Claude, Ollama) must implement this
interface, enabling provider-agnostic generation in the service layer.
"""

from abc import ABC, abstractmethod


class BaseLLM(ABC):
    """Interface that every LLM provider must implement."""

    @abstractmethod
    async def generate(self, prompt: str, **kwargs) -> str:
        """Generate a text response.

        Args:
            prompt: The user prompt to send to the model.
            **kwargs: ``system`` (system prompt), ``temperature``,
                ``max_tokens`` and ``json_mode`` (ask the provider for a
                JSON object reply where it supports it).

        Returns:
            The model's text response (possibly empty).

        Raises:
            ProviderAuthError: The credential was rejected.
            ProviderRateLimitError: The provider throttled the request.
            GenerationError: Any other provider failure, including timeouts.
        """
