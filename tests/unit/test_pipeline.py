"""Tests for ProcessingPipeline, title generation, and the pipeline factory."""

import json
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from plainly.core.exceptions import (
    AudioTooShortError,
    ConfigurationError,
    GenerationError,
    InvalidRequestError,
    NoSpeechDetectedError,
    TranscriptionError,
)
from plainly.core.models import AudioPayload, ProcessAllResponse, TranscriptionResult
from plainly.core.structured import OutputKind, StructuredSummary
from plainly.services.pipeline import ProcessingPipeline, create_pipeline
from plainly.services.pipeline.processor import (
    DEFAULT_TITLE,
    QUICK_NOTE_TITLE,
    clean_title,
    title_source,
)
from plainly.services.pipeline.validation import TOO_SHORT_MESSAGE


@pytest.fixture
def pipeline(mock_stt, mock_llm):
    return ProcessingPipeline(stt=mock_stt, llm=mock_llm, max_upload_bytes=10_000)


# ---------------------------------------------------------------------------
# Stage 1 + 2
# ---------------------------------------------------------------------------


class TestTranscribe:
    async def test_short_audio_never_reaches_provider(
        self, pipeline, mock_stt, short_audio_payload
    ):
        with pytest.raises(AudioTooShortError):
            await pipeline.transcribe(short_audio_payload)
        mock_stt.transcribe.assert_not_awaited()

    async def test_oversized_audio_rejected(self, pipeline, mock_stt):
        with pytest.raises(InvalidRequestError, match="too large"):
            await pipeline.transcribe(AudioPayload(content=b"\x01" * 20_000))
        mock_stt.transcribe.assert_not_awaited()

    async def test_transcript_trimmed(self, pipeline, mock_stt, audio_payload):
        mock_stt.transcribe.return_value = TranscriptionResult(text="  Pick up the dry cleaning.  ")

        result = await pipeline.transcribe(audio_payload)

        assert result.text == "Pick up the dry cleaning."

    async def test_hallucination_rejected(self, pipeline, mock_stt, audio_payload):
        mock_stt.transcribe.return_value = TranscriptionResult(text="Thank you for watching")

        with pytest.raises(NoSpeechDetectedError):
            await pipeline.transcribe(audio_payload)

    async def test_provider_error_propagates(self, pipeline, mock_stt, audio_payload):
        mock_stt.transcribe.side_effect = TranscriptionError("Whisper error", provider_status=400)

        with pytest.raises(TranscriptionError):
            await pipeline.transcribe(audio_payload)


# ---------------------------------------------------------------------------
# Stage 3 + full pipeline
# ---------------------------------------------------------------------------


class TestGenerate:
    async def test_empty_transcript_rejected(self, pipeline, mock_llm):
        with pytest.raises(InvalidRequestError, match="No transcript provided"):
            await pipeline.generate_all("")
        mock_llm.generate.assert_not_awaited()

    async def test_generate_one(self, pipeline):
        result = await pipeline.generate_one(OutputKind.summary, "We moved the launch.")

        assert isinstance(result, StructuredSummary)


class TestProcess:
    async def test_process_all(self, pipeline, audio_payload):
        result = await pipeline.process_all(audio_payload)

        assert isinstance(result, ProcessAllResponse)
        assert json.loads(result.summary)["format"] == "summary"
        assert json.loads(result.structured_transcript)["segments"][0]["start"] == 0.0
        assert "structuredTranscript" in result.model_dump(by_alias=True)

    async def test_process_all_requests_timestamps(self, pipeline, mock_stt, audio_payload):
        await pipeline.process_all(audio_payload)

        assert mock_stt.transcribe.await_args.kwargs["verbose"] is True

    async def test_process_one_short_audio(self, pipeline, mock_stt, short_audio_payload):
        result = await pipeline.process_one(short_audio_payload, OutputKind.summary)

        assert result.transcript == ""
        assert result.output == TOO_SHORT_MESSAGE
        mock_stt.transcribe.assert_not_awaited()

    async def test_process_one_summary_skips_timestamps(self, pipeline, mock_stt, audio_payload):
        result = await pipeline.process_one(audio_payload, OutputKind.summary)

        assert mock_stt.transcribe.await_args.kwargs["verbose"] is False
        assert json.loads(result.output)["gist"] == "Weekly planning for the product launch."

    async def test_generation_failure_fails_request(self, pipeline, mock_llm, audio_payload):
        mock_llm.generate.side_effect = GenerationError("boom")

        with pytest.raises(GenerationError):
            await pipeline.process_all(audio_payload)


# ---------------------------------------------------------------------------
# Titles
# ---------------------------------------------------------------------------


class TestTitles:
    def test_clean_title(self):
        assert clean_title('"Weekly Sync"') == "Weekly Sync"
        assert clean_title("") == DEFAULT_TITLE
        assert len(clean_title("word " * 30)) <= 50

    def test_source_prefers_structured_summary(self):
        summary = StructuredSummary(gist="Planning call.", key_points=[{"lead": "Dates"}])

        source = title_source("transcript text", summary.model_dump_json())

        assert source == "Planning call.\nDates"

    def test_source_accepts_dict_and_plain_summary(self):
        assert title_source(None, {"gist": "From a dict"}) == "From a dict"
        assert title_source(None, "Plain summary") == "Plain summary"

    def test_source_falls_back_to_transcript_head(self):
        assert title_source("x" * 900, None) == "x" * 500

    async def test_generate_title(self, pipeline, mock_llm):
        mock_llm.generate.side_effect = None
        mock_llm.generate.return_value = "'Launch Date Moved'\n"

        title = await pipeline.generate_title(transcript="We moved the launch.")

        assert title == "Launch Date Moved"
        assert mock_llm.generate.await_args.kwargs["max_tokens"] == 20

    async def test_no_content_is_quick_note(self, pipeline, mock_llm):
        assert await pipeline.generate_title("   ", None) == QUICK_NOTE_TITLE
        mock_llm.generate.assert_not_awaited()

    async def test_failure_is_placeholder(self, pipeline, mock_llm):
        mock_llm.generate.side_effect = GenerationError("down")

        assert await pipeline.generate_title("We moved the launch.") == DEFAULT_TITLE


# ---------------------------------------------------------------------------
# create_pipeline
# ---------------------------------------------------------------------------


def _settings(**overrides):
    defaults = {
        "stt_provider": "openai",
        "llm_provider": "openai",
        "openai_api_key": "sk-test",
        "claude_api_key": "",
        "max_upload_bytes": 1024,
    }
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


class TestCreatePipeline:
    def test_missing_key_is_configuration_error(self):
        with pytest.raises(ConfigurationError, match="OpenAI API key not configured"):
            create_pipeline(_settings(openai_api_key=""))

    def test_missing_claude_key(self):
        with pytest.raises(ConfigurationError, match="Claude"):
            create_pipeline(_settings(llm_provider="claude"))

    def test_builds_configured_providers(self, mock_stt, mock_llm):
        with patch("plainly.services.llm.create_llm", return_value=mock_llm) as llm_factory:
            with patch(
                "plainly.services.transcription.create_stt", return_value=mock_stt
            ) as stt_factory:
                pipeline = create_pipeline(_settings())

        assert isinstance(pipeline, ProcessingPipeline)
        llm_factory.assert_called_once_with(provider="openai")
        stt_factory.assert_called_once_with(provider="openai")
