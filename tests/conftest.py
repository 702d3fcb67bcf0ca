"""Shared pytest fixtures for the Plainly test suite.

Provides mock LLM/STT providers, audio payloads, and an in-memory SQLite
engine for the client store.
"""

import json
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# ---------------------------------------------------------------------------
# LLM Fixtures
# ---------------------------------------------------------------------------

SUMMARY_REPLY = {
    "gist": "Weekly planning for the product launch.",
    "key_points": [{"lead": "Launch moved", "detail": "Now on the 14th."}],
    "follow_ups": ["Email the design team"],
    "confidence_notes": {"possible_missed_words": False},
}

TRANSCRIPT_REPLY = {
    "segments": [
        {"speaker": "Speaker", "text": "We moved the launch to the 14th."},
        {"speaker": "Speaker", "text": "Design needs the assets by Friday."},
    ],
    "speaker_separation": "not_provided",
}

TITLE_REPLY = "Launch Planning"


def llm_reply_for(system: str | None) -> str:
    """Return a schema-valid reply matching the system prompt's output kind."""
    if system and "transcript structuring engine" in system:
        return json.dumps(TRANSCRIPT_REPLY)
    if system and system.startswith("Generate a short, descriptive title"):
        return TITLE_REPLY
    return json.dumps(SUMMARY_REPLY)


@pytest.fixture
def mock_llm():
    """Create a mock LLM provider for unit testing.

    Returns:
        AsyncMock: A mock implementing the BaseLLM interface that answers
        summary and transcript prompts with valid JSON.
    """
    from plainly.services.llm.base import BaseLLM

    llm = AsyncMock(spec=BaseLLM)

    async def _generate(prompt, **kwargs):
        return llm_reply_for(kwargs.get("system"))

    llm.generate.side_effect = _generate
    return llm


# ---------------------------------------------------------------------------
# STT Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_stt():
    """Create a mock STT provider returning a transcript with timed segments."""
    from plainly.core.models import TimedSegment, TranscriptionResult
    from plainly.services.transcription.base import BaseSTT

    stt = AsyncMock(spec=BaseSTT)
    stt.transcribe.return_value = TranscriptionResult(
        text="We moved the launch to the 14th. Design needs the assets by Friday.",
        segments=[
            TimedSegment(text="We moved the launch to the 14th.", start=0.0, end=3.2),
            TimedSegment(text="Design needs the assets by Friday.", start=3.2, end=6.5),
        ],
        language="english",
        duration=6.5,
    )
    return stt


# ---------------------------------------------------------------------------
# Audio Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def audio_payload():
    """A payload comfortably above the minimum processable size."""
    from plainly.core.models import AudioPayload

    return AudioPayload(content=b"\x01" * 4096)


@pytest.fixture
def short_audio_payload():
    """A 500-byte payload, below the minimum processable size."""
    from plainly.core.models import AudioPayload

    return AudioPayload(content=b"\x01" * 500)


@pytest.fixture
def sample_audio_path(tmp_path):
    """Write a fake m4a file to disk and return its path."""
    path = tmp_path / "recording.m4a"
    path.write_bytes(b"\x00" * 4096)
    return str(path)


# ---------------------------------------------------------------------------
# Database Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
async def db_engine():
    """In-memory SQLite engine with all client tables created."""
    from plainly.client.database import init_db

    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_scope(db_engine):
    """Transactional session scope bound to the in-memory engine."""
    factory = async_sessionmaker(db_engine, expire_on_commit=False)

    @asynccontextmanager
    async def _scope():
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    return _scope


@pytest.fixture
def store(session_scope):
    from plainly.client.store import RecordingStore

    return RecordingStore(session_scope)


@pytest.fixture
def flags(session_scope):
    from plainly.client.flags import FlagStore

    return FlagStore(session_scope)
