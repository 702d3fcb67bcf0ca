"""
Structured output generation.

``OutputGenerator`` turns a validated transcript into schema-valid structured
artifacts. There are two explicit entry points: ``generate_one(kind)`` for a
single artifact and ``generate_all()`` for the summary and transcript pair,
which are requested concurrently and joined before returning.
"""

import asyncio
import logging

from plainly.core.models import GeneratedOutputs, TimedSegment
from plainly.core.structured import (
    OutputKind,
    StructuredOutput,
    StructuredTranscript,
    parse_or_default,
)
from plainly.services.generation.alignment import align_segments
from plainly.services.generation.prompts import MAX_TOKENS, PROMPTS, build_user_prompt
from plainly.services.llm.base import BaseLLM

logger = logging.getLogger(__name__)

GENERATION_TEMPERATURE = 0.3


class OutputGenerator:
    """Generates structured outputs from a transcript with one LLM call per kind.

    Malformed model replies never fail a request: they are replaced by the
    kind's default through :func:`parse_or_default`. Provider errors propagate.

    Args:
        llm: An LLM provider implementing ``BaseLLM``.
    """

    def __init__(self, llm: BaseLLM) -> None:
        self._llm = llm

    async def _complete(self, kind: OutputKind, transcript: str) -> str:
        return await self._llm.generate(
            build_user_prompt(transcript),
            system=PROMPTS[kind],
            temperature=GENERATION_TEMPERATURE,
            max_tokens=MAX_TOKENS[kind],
            json_mode=True,
        )

    async def generate_one(
        self,
        kind: OutputKind,
        transcript: str,
        timed_segments: list[TimedSegment] | None = None,
    ) -> StructuredOutput:
        """Generate a single structured artifact.

        Args:
            kind: Which artifact to produce.
            transcript: Validated (and already truncated) transcript text.
            timed_segments: Provider timestamps used to align transcript segments.

        Returns:
            A schema-valid structured object for *kind*.

        Raises:
            NoSpeechDetectedError: The transcript kind produced no usable segment.
        """
        kind = OutputKind(kind)
        logger.info("Generating %s (%d chars)", kind, len(transcript))
        raw = await self._complete(kind, transcript)
        output = parse_or_default(raw, kind, transcript=transcript)
        if isinstance(output, StructuredTranscript):
            output = output.model_copy(
                update={"segments": align_segments(output.segments, timed_segments)}
            )
        return output

    async def generate_all(
        self,
        transcript: str,
        timed_segments: list[TimedSegment] | None = None,
    ) -> GeneratedOutputs:
        """Generate the summary and structured transcript concurrently.

        Both calls must succeed; the first provider error fails the whole call.
        """
        summary, structured = await asyncio.gather(
            self.generate_one(OutputKind.summary, transcript),
            self.generate_one(OutputKind.transcript, transcript, timed_segments),
        )
        return GeneratedOutputs(summary=summary, transcript=structured)
