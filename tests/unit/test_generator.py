"""Tests for OutputGenerator with a mocked LLM."""

import asyncio
import json

import pytest

from plainly.core.exceptions import GenerationError
from plainly.core.models import TimedSegment
from plainly.core.structured import OutputKind, StructuredSummary, StructuredTranscript
from plainly.services.generation import OutputGenerator
from plainly.services.generation.prompts import SUMMARY_PROMPT, TRANSCRIPT_PROMPT

TRANSCRIPT = "We moved the launch to the 14th. Design needs the assets by Friday."


@pytest.fixture
def generator(mock_llm):
    return OutputGenerator(mock_llm)


class TestGenerateOne:
    async def test_summary_call_parameters(self, generator, mock_llm):
        result = await generator.generate_one(OutputKind.summary, TRANSCRIPT)

        assert isinstance(result, StructuredSummary)
        call = mock_llm.generate.await_args
        assert call.args[0].endswith(TRANSCRIPT)
        assert call.kwargs["system"] == SUMMARY_PROMPT
        assert call.kwargs["temperature"] == 0.3
        assert call.kwargs["max_tokens"] == 1000
        assert call.kwargs["json_mode"] is True

    async def test_transcript_is_aligned(self, generator, mock_llm):
        timed = [
            TimedSegment(text="We moved the launch to the 14th.", start=0.0, end=3.2),
            TimedSegment(text="Design needs the assets by Friday.", start=3.2, end=6.5),
        ]

        result = await generator.generate_one(OutputKind.transcript, TRANSCRIPT, timed)

        assert isinstance(result, StructuredTranscript)
        assert mock_llm.generate.await_args.kwargs["system"] == TRANSCRIPT_PROMPT
        assert mock_llm.generate.await_args.kwargs["max_tokens"] == 2000
        assert [(s.start, s.end) for s in result.segments] == [(0.0, 3.2), (3.2, 6.5)]

    async def test_malformed_reply_uses_default(self, generator, mock_llm):
        mock_llm.generate.side_effect = None
        mock_llm.generate.return_value = "I think the summary is..."

        result = await generator.generate_one(OutputKind.transcript, TRANSCRIPT)

        assert result.segments[0].text == TRANSCRIPT

    async def test_provider_error_propagates(self, generator, mock_llm):
        mock_llm.generate.side_effect = GenerationError("boom")

        with pytest.raises(GenerationError):
            await generator.generate_one(OutputKind.summary, TRANSCRIPT)


class TestGenerateAll:
    async def test_both_outputs(self, generator, mock_llm):
        outputs = await generator.generate_all(TRANSCRIPT)

        assert outputs.summary.gist == "Weekly planning for the product launch."
        assert len(outputs.transcript.segments) == 2
        assert mock_llm.generate.await_count == 2

    async def test_calls_run_concurrently(self, generator, mock_llm):
        started: list[str] = []
        release = asyncio.Event()

        async def _slow(prompt, **kwargs):
            started.append(kwargs["system"])
            if len(started) == 2:
                release.set()
            await release.wait()
            return json.dumps({"gist": "x", "segments": [{"text": "Hello there"}]})

        mock_llm.generate.side_effect = _slow

        await asyncio.wait_for(generator.generate_all(TRANSCRIPT), timeout=1.0)

        assert len(started) == 2

    async def test_one_failure_fails_both(self, generator, mock_llm):
        async def _fail_transcript(prompt, **kwargs):
            if kwargs["system"] == TRANSCRIPT_PROMPT:
                raise GenerationError("transcript failed")
            return json.dumps({"gist": "x"})

        mock_llm.generate.side_effect = _fail_transcript

        with pytest.raises(GenerationError, match="transcript failed"):
            await generator.generate_all(TRANSCRIPT)
