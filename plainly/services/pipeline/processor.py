"""
Two-stage recording processing pipeline.

Stage 1 sends the audio to the speech-to-text provider and validates the
transcript; stage 3 turns it into structured outputs through
:class:`OutputGenerator`. The pipeline also produces short titles, which
never fail and fall back to a placeholder instead.
"""

import logging

from pydantic import ValidationError

from plainly.core.exceptions import AudioTooShortError, InvalidRequestError
from plainly.core.models import (
    AudioPayload,
    GeneratedOutputs,
    ProcessAllResponse,
    ProcessOneResponse,
    TimedSegment,
    TranscriptionResult,
)
from plainly.core.structured import (
    OutputKind,
    StructuredOutput,
    StructuredSummary,
    parse_stored_output,
)
from plainly.core.utils import strip_wrapping_quotes
from plainly.services.generation import OutputGenerator
from plainly.services.generation.prompts import TITLE_PROMPT
from plainly.services.llm.base import BaseLLM
from plainly.services.pipeline.validation import (
    TOO_SHORT_MESSAGE,
    is_audio_too_short,
    truncate_transcript,
    validate_transcript,
)
from plainly.services.transcription.base import BaseSTT

logger = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_BYTES = 25 * 1024 * 1024

QUICK_NOTE_TITLE = "Quick note"
DEFAULT_TITLE = "Recording"
MAX_TITLE_CHARS = 50
TITLE_SOURCE_CHARS = 500


def clean_title(raw: str | None) -> str:
    """Strip wrapping quotes, cap the length, and fall back to the placeholder."""
    title = strip_wrapping_quotes(raw or "")
    if len(title) > MAX_TITLE_CHARS:
        title = title[:MAX_TITLE_CHARS].strip()
    return title or DEFAULT_TITLE


def _summary_text(summary: StructuredSummary) -> str:
    leads = [point.lead for point in summary.key_points if point.lead]
    parts = [summary.gist] + leads
    return "\n".join(part for part in parts if part)


def title_source(transcript: str | None, summary: str | dict | None) -> str:
    """Pick the content a title is generated from: the summary, else the transcript head."""
    if isinstance(summary, dict):
        try:
            summary = StructuredSummary.model_validate(summary)
        except ValidationError:
            summary = None
    elif isinstance(summary, str):
        parsed = parse_stored_output(summary, OutputKind.summary)
        summary = parsed if isinstance(parsed, StructuredSummary) else summary.strip()

    if isinstance(summary, StructuredSummary):
        text = _summary_text(summary)
        if text:
            return text
    elif summary:
        return summary
    return (transcript or "").strip()[:TITLE_SOURCE_CHARS]


class ProcessingPipeline:
    """Audio to transcript to structured outputs.

    Args:
        stt: Speech-to-text provider.
        llm: LLM provider used for generation and titles.
        max_upload_bytes: Largest audio payload accepted by the provider.
    """

    def __init__(
        self,
        stt: BaseSTT,
        llm: BaseLLM,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ) -> None:
        self._stt = stt
        self._llm = llm
        self._generator = OutputGenerator(llm)
        self._max_upload_bytes = max_upload_bytes

    # ------------------------------------------------------------------
    # Stage 1 + 2
    # ------------------------------------------------------------------

    async def transcribe(self, audio: AudioPayload, verbose: bool = False) -> TranscriptionResult:
        """Transcribe *audio* and reject payloads that carry no speech.

        Raises:
            AudioTooShortError: Payload below the minimum size (provider not called).
            InvalidRequestError: Payload above the provider upload limit.
            NoSpeechDetectedError: Empty, too short, or hallucinated transcript.
        """
        if is_audio_too_short(audio.size):
            logger.info("Audio too short to process: %d bytes", audio.size)
            raise AudioTooShortError(audio.size)
        if audio.size > self._max_upload_bytes:
            raise InvalidRequestError(
                f"Audio file too large ({audio.size} bytes, limit {self._max_upload_bytes})"
            )

        result = await self._stt.transcribe(audio, verbose=verbose)
        text = validate_transcript(result.text)
        logger.info("Transcript length: %d characters", len(text))
        return result.model_copy(update={"text": text})

    # ------------------------------------------------------------------
    # Stage 3
    # ------------------------------------------------------------------

    @staticmethod
    def _prepare(transcript: str) -> str:
        text = (transcript or "").strip()
        if not text:
            raise InvalidRequestError("No transcript provided")
        return truncate_transcript(text)

    async def generate_one(
        self,
        kind: OutputKind,
        transcript: str,
        segments: list[TimedSegment] | None = None,
    ) -> StructuredOutput:
        """Generate one structured artifact from an existing transcript."""
        return await self._generator.generate_one(kind, self._prepare(transcript), segments)

    async def generate_all(
        self,
        transcript: str,
        segments: list[TimedSegment] | None = None,
    ) -> GeneratedOutputs:
        """Generate the summary and structured transcript from an existing transcript."""
        return await self._generator.generate_all(self._prepare(transcript), segments)

    # ------------------------------------------------------------------
    # Full pipeline
    # ------------------------------------------------------------------

    async def process_one(self, audio: AudioPayload, kind: OutputKind) -> ProcessOneResponse:
        """Transcribe then generate a single artifact (legacy single-format contract)."""
        if is_audio_too_short(audio.size):
            return ProcessOneResponse(transcript="", output=TOO_SHORT_MESSAGE)

        kind = OutputKind(kind)
        result = await self.transcribe(audio, verbose=kind == OutputKind.transcript)
        output = await self.generate_one(kind, result.text, result.segments)
        return ProcessOneResponse(transcript=result.text, output=output.model_dump_json())

    async def process_all(self, audio: AudioPayload) -> ProcessAllResponse | ProcessOneResponse:
        """Transcribe then generate the summary and structured transcript together."""
        if is_audio_too_short(audio.size):
            return ProcessOneResponse(transcript="", output=TOO_SHORT_MESSAGE)

        result = await self.transcribe(audio, verbose=True)
        outputs = await self.generate_all(result.text, result.segments)
        return ProcessAllResponse(
            transcript=result.text,
            summary=outputs.summary.model_dump_json(),
            structured_transcript=outputs.transcript.model_dump_json(),
        )

    # ------------------------------------------------------------------
    # Titles
    # ------------------------------------------------------------------

    async def generate_title(
        self,
        transcript: str | None = None,
        summary: str | dict | None = None,
    ) -> str:
        """Return a 2-5 word title; never raises."""
        content = title_source(transcript, summary)
        if not content:
            return QUICK_NOTE_TITLE
        try:
            raw = await self._llm.generate(
                content,
                system=TITLE_PROMPT,
                temperature=0.3,
                max_tokens=20,
            )
        except Exception:
            logger.warning("Title generation failed; using placeholder", exc_info=True)
            return DEFAULT_TITLE
        return clean_title(raw)
