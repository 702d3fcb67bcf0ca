"""
Pipeline module - audio to structured outputs.

Factory function for assembling a pipeline from configured providers.
"""

from plainly.core.config import Settings, get_settings
from plainly.core.exceptions import ConfigurationError

from .processor import ProcessingPipeline

__all__ = ["ProcessingPipeline", "create_pipeline"]


def _require_credentials(settings: Settings) -> None:
    uses_openai = (
        settings.stt_provider in ("openai", "whisper") or settings.llm_provider == "openai"
    )
    if uses_openai and not settings.openai_api_key:
        raise ConfigurationError("OpenAI API key not configured")
    if settings.llm_provider == "claude" and not settings.claude_api_key:
        raise ConfigurationError("Claude API key not configured")


def create_pipeline(settings: Settings | None = None) -> ProcessingPipeline:
    """
    Build a ProcessingPipeline from settings.

    Args:
        settings: Optional Settings instance (defaults to get_settings())

    Returns:
        ProcessingPipeline wired to the configured STT and LLM providers

    Raises:
        ConfigurationError: If the configured provider has no credential
        ValueError: If a provider name is unknown
    """
    from plainly.services.llm import create_llm
    from plainly.services.transcription import create_stt

    settings = settings or get_settings()
    _require_credentials(settings)
    return ProcessingPipeline(
        stt=create_stt(provider=settings.stt_provider),
        llm=create_llm(provider=settings.llm_provider),
        max_upload_bytes=settings.max_upload_bytes,
    )
