"""
Abstract base class for Speech-to-Text providers.

All STT implementations must implement this interface, enabling
provider-agnostic transcription in the pipeline.
"""

from abc import ABC, abstractmethod

from plainly.core.models import AudioPayload, TranscriptionResult


class BaseSTT(ABC):
    """Interface that every STT provider must implement."""

    @abstractmethod
    async def transcribe(self, audio: AudioPayload, verbose: bool = False) -> TranscriptionResult:
        """Transcribe an uploaded audio blob.

        Args:
            audio: Raw audio bytes with filename and MIME type.
            verbose: Request per-segment start/end timestamps.

        Returns:
            TranscriptionResult with text and, when verbose, timed segments.

        Raises:
            TranscriptionError: The provider call failed (tagged with its status).
            ProviderAuthError: The credential was rejected.
            ProviderRateLimitError: The provider throttled the request.
        """
