"""Whisper STT implementation backed by the OpenAI audio API.

The audio is uploaded as a multipart request. Plain text is requested by
default; ``verbose=True`` switches to ``verbose_json`` so the response
carries per-segment timestamps for later alignment.
"""

import logging

from plainly.core.config import get_settings
from plainly.core.exceptions import TranscriptionError
from plainly.core.models import AudioPayload, TimedSegment, TranscriptionResult
from plainly.services.openai_client import create_openai_client, translate_openai_error
from plainly.services.transcription.base import BaseSTT

logger = logging.getLogger(__name__)


class WhisperAPISTT(BaseSTT):
    """Speech-to-text provider using the hosted Whisper model.

    Args:
        api_key: OpenAI API key (defaults to settings).
        model: Transcription model name (defaults to ``whisper-1``).
        language: ISO 639-1 hint; empty string lets the model auto-detect.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        language: str | None = None,
        timeout: float | None = None,
    ) -> None:
        settings = get_settings()
        self._api_key = api_key or settings.openai_api_key
        self._model = model or settings.openai_stt_model
        self._language = settings.transcription_language if language is None else language
        self._client = create_openai_client(
            api_key=self._api_key,
            timeout=timeout or settings.provider_timeout_seconds,
            base_url=settings.openai_base_url,
        )

    async def transcribe(self, audio: AudioPayload, verbose: bool = False) -> TranscriptionResult:
        """Upload *audio* and return the recognised text (and segments when verbose)."""
        kwargs: dict = {
            "file": (audio.filename, audio.content, audio.content_type),
            "model": self._model,
            "response_format": "verbose_json" if verbose else "text",
        }
        if self._language:
            kwargs["language"] = self._language
        if verbose:
            kwargs["timestamp_granularities"] = ["segment"]

        logger.info(
            "Transcribing %s bytes (%s, verbose=%s)", audio.size, audio.content_type, verbose
        )
        try:
            response = await self._client.audio.transcriptions.create(**kwargs)
        except Exception as exc:
            raise translate_openai_error(exc, TranscriptionError, "Whisper API") from exc

        if not verbose:
            return TranscriptionResult(text=str(response or "").strip())

        segments = [
            TimedSegment(text=seg.text.strip(), start=seg.start, end=seg.end)
            for seg in (getattr(response, "segments", None) or [])
            if seg.text and seg.text.strip()
        ]
        return TranscriptionResult(
            text=(response.text or "").strip(),
            segments=segments,
            language=getattr(response, "language", None),
            duration=getattr(response, "duration", None),
        )
