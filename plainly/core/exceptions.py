"""
Plainly exception hierarchy.

All application-specific exceptions inherit from PlainlyError, enabling
centralized error handling in the API middleware layer. Each error carries
the HTTP status class it maps to at the response boundary.
"""

from datetime import UTC, datetime


class PlainlyError(Exception):
    """Base exception for all Plainly errors.

    Args:
        detail: Human-readable message, returned as ``error`` in responses.
        code: Stable machine-readable error code.
        status_code: HTTP status used at the API boundary.
        extra: Additional fields merged into the JSON error envelope.
    """

    def __init__(
        self,
        detail: str = "An unexpected error occurred",
        code: str = "PLAINLY_ERROR",
        status_code: int = 500,
        extra: dict | None = None,
    ) -> None:
        self.detail = detail
        self.code = code
        self.status_code = status_code
        self.extra = extra or {}
        self.timestamp = datetime.now(UTC).isoformat()
        super().__init__(detail)


# ---------------------------------------------------------------------------
# Input rejection (400)
# ---------------------------------------------------------------------------


class InvalidRequestError(PlainlyError):
    """Raised for malformed client input (missing audio, bad format, ...)."""

    def __init__(self, detail: str = "Invalid request") -> None:
        super().__init__(detail=detail, code="INVALID_REQUEST", status_code=400)


class AudioTooShortError(PlainlyError):
    """Raised when an audio payload is below the minimum processable size."""

    def __init__(self, size_bytes: int = 0) -> None:
        self.size_bytes = size_bytes
        super().__init__(
            detail="Recording too short to process.",
            code="AUDIO_TOO_SHORT",
            status_code=400,
            extra={"transcript": ""},
        )


class NoSpeechDetectedError(PlainlyError):
    """Raised when the provider returned no usable speech."""

    def __init__(self) -> None:
        super().__init__(
            detail="No speech detected in recording",
            code="NO_SPEECH_DETECTED",
            status_code=400,
            extra={"transcript": "", "output": ""},
        )


# ---------------------------------------------------------------------------
# Configuration (500)
# ---------------------------------------------------------------------------


class ConfigurationError(PlainlyError):
    """Raised when a required provider credential is not configured."""

    def __init__(self, detail: str = "OpenAI API key not configured") -> None:
        super().__init__(detail=detail, code="CONFIGURATION_ERROR", status_code=500)


# ---------------------------------------------------------------------------
# Provider failures
# ---------------------------------------------------------------------------


class ProviderError(PlainlyError):
    """Raised when the external provider call fails.

    Args:
        detail: Human-readable failure reason.
        provider_status: HTTP status reported by the provider, if any.
    """

    def __init__(
        self,
        detail: str = "Provider request failed",
        provider_status: int | None = None,
        code: str = "PROVIDER_ERROR",
    ) -> None:
        self.provider_status = provider_status
        super().__init__(detail=detail, code=code, status_code=500)


class ProviderAuthError(PlainlyError):
    """Raised when the provider rejects the configured credential (401)."""

    def __init__(self) -> None:
        super().__init__(
            detail="Invalid API key. Please check your OpenAI API key.",
            code="PROVIDER_AUTH_ERROR",
            status_code=401,
        )


class ProviderRateLimitError(PlainlyError):
    """Raised when the provider reports a rate limit or quota error (429)."""

    def __init__(self) -> None:
        super().__init__(
            detail="Rate limit exceeded. Please try again later.",
            code="PROVIDER_RATE_LIMIT",
            status_code=429,
        )


class ProviderTimeoutError(ProviderError):
    """Raised when a provider call exceeds the configured timeout."""

    def __init__(self, detail: str = "Provider request timed out") -> None:
        super().__init__(detail=detail, code="PROVIDER_TIMEOUT")


class TranscriptionError(ProviderError):
    """Raised when speech-to-text fails at the provider."""

    def __init__(
        self,
        detail: str = "Transcription failed",
        provider_status: int | None = None,
    ) -> None:
        super().__init__(
            detail=detail,
            provider_status=provider_status,
            code="TRANSCRIPTION_ERROR",
        )


class GenerationError(ProviderError):
    """Raised when structured-output generation fails at the provider."""

    def __init__(
        self,
        detail: str = "Failed to generate outputs",
        provider_status: int | None = None,
    ) -> None:
        super().__init__(
            detail=detail,
            provider_status=provider_status,
            code="GENERATION_ERROR",
        )


# ---------------------------------------------------------------------------
# Client side
# ---------------------------------------------------------------------------


class RecordingNotFoundError(PlainlyError):
    """Raised when a recording ID does not exist in the local store."""

    def __init__(self, recording_id: str) -> None:
        super().__init__(
            detail=f"Recording not found: {recording_id}",
            code="RECORDING_NOT_FOUND",
            status_code=404,
        )


class RecordingBusyError(PlainlyError):
    """Raised when a recording is already being processed."""

    def __init__(self, recording_id: str) -> None:
        super().__init__(
            detail=f"Recording is already processing: {recording_id}",
            code="RECORDING_BUSY",
            status_code=409,
        )


class InvalidTransitionError(PlainlyError):
    """Raised when a recording status change is not allowed."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(
            detail=f"Cannot move recording from {current} to {target}",
            code="INVALID_TRANSITION",
            status_code=409,
        )


class StorageError(PlainlyError):
    """Raised when the local recording store fails to read or write."""

    def __init__(self, detail: str = "Storage operation failed") -> None:
        super().__init__(detail=detail, code="STORAGE_ERROR", status_code=500)
