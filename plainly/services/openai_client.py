"""
Shared OpenAI SDK plumbing for the transcription and chat providers.

Both providers talk to the same account, so the client construction and
the SDK-exception translation live here.
"""

import logging

from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
    AuthenticationError,
    RateLimitError,
)

from plainly.core.exceptions import (
    ProviderAuthError,
    ProviderError,
    ProviderRateLimitError,
    ProviderTimeoutError,
)

logger = logging.getLogger(__name__)


def create_openai_client(
    api_key: str,
    timeout: float,
    base_url: str | None = None,
) -> AsyncOpenAI:
    """Build an ``AsyncOpenAI`` client with SDK-level retries disabled.

    Retries are user-initiated from the client, so a failed call must surface
    immediately.
    """
    return AsyncOpenAI(
        api_key=api_key,
        base_url=base_url or None,
        timeout=timeout,
        max_retries=0,
    )


def translate_openai_error(
    exc: Exception, failure_cls: type[ProviderError], label: str
) -> Exception:
    """Map an OpenAI SDK exception to the Plainly error hierarchy.

    Args:
        exc: The exception raised by the SDK.
        failure_cls: Error type for generic provider failures of this stage.
        label: Short provider name used in messages (e.g. "Whisper API").

    Returns:
        The exception to raise in place of *exc*.
    """
    if isinstance(exc, AuthenticationError):
        logger.error("%s rejected the API key", label)
        return ProviderAuthError()
    if isinstance(exc, RateLimitError):
        logger.warning("%s rate limit hit: %s", label, exc)
        return ProviderRateLimitError()
    if isinstance(exc, APITimeoutError):
        logger.warning("%s timeout: %s", label, exc)
        return ProviderTimeoutError(f"{label} request timed out")
    if isinstance(exc, APIConnectionError):
        logger.warning("%s connection error: %s", label, exc)
        return failure_cls(f"Failed to connect to {label}: {exc}")
    if isinstance(exc, APIStatusError):
        logger.error("%s error: %s %s", label, exc.status_code, exc.message)
        return failure_cls(
            f"{label} error: {exc.status_code} - {exc.message}",
            provider_status=exc.status_code,
        )
    logger.error("Unexpected %s error: %s", label, exc)
    return failure_cls(f"{label} error: {exc}")
