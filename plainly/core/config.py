"""
Application configuration via pydantic-settings.

Loads values from .env file with sensible defaults for local development.
Use ``get_settings()`` to obtain the cached singleton instance.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Plainly settings loaded from environment / .env file.

    All settings can be overridden via environment variables or a `.env` file.
    Field names map directly to env var names (case-insensitive).

    Attributes:
        llm_provider: Which LLM backend generates structured outputs
            ("openai", "claude" or "ollama").
        stt_provider: Speech-to-text backend ("openai" for the Whisper API).
        provider_timeout_seconds: Hard timeout applied to every provider call.
        client_database_url: Async SQLAlchemy URL of the on-device store.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Silently ignore unrecognized env vars
    )

    # --- Providers ---
    llm_provider: str = "openai"
    stt_provider: str = "openai"

    # OpenAI (Whisper transcription + chat completions)
    openai_api_key: str = ""  # Required for stt_provider="openai"
    openai_base_url: str = ""  # Empty = SDK default endpoint
    openai_llm_model: str = "gpt-4o-mini"
    openai_stt_model: str = "whisper-1"
    transcription_language: str = "en"  # ISO 639-1; empty = auto-detect

    # Claude (Anthropic API) settings
    claude_api_key: str = ""  # Required when llm_provider="claude"
    claude_model: str = "claude-sonnet-4-20250514"

    # Ollama (local LLM) settings
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "llama3.2"

    # --- Pipeline limits ---
    provider_timeout_seconds: float = 120.0
    max_upload_bytes: int = 25 * 1024 * 1024  # Whisper API upload limit

    # --- Application ---
    app_host: str = "0.0.0.0"  # Bind address for the FastAPI server
    app_port: int = 3001
    log_level: str = "INFO"  # Python logging level
    cors_origins: list[str] = ["*"]

    # --- Client ---
    api_base_url: str = "http://localhost:3001"
    client_database_url: str = "sqlite+aiosqlite:///data/plainly.db"
    client_timeout_seconds: float = 150.0  # Slightly above the server's provider timeout


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings singleton.

    Uses ``functools.lru_cache`` so the .env file is read only once.
    Subsequent calls return the same ``Settings`` instance.

    Returns:
        Settings: The application-wide configuration object.
    """
    return Settings()
