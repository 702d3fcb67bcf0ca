"""
Pydantic v2 request / response and domain models used across Plainly.

API: health, transcription, output generation, title generation
Client: Recording and its generated outputs
"""

import time
import uuid
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from plainly.core.structured import (
    OutputKind,
    StructuredActionItems,
    StructuredKeyPoints,
    StructuredSummary,
    StructuredTranscript,
)

# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """GET /health response."""

    status: str = "ok"
    version: str = "0.1.0"
    timestamp: datetime


# ---------------------------------------------------------------------------
# Transcription
# ---------------------------------------------------------------------------


class AudioPayload(BaseModel):
    """An uploaded audio blob plus the metadata the provider needs."""

    content: bytes
    filename: str = "recording.m4a"
    content_type: str = "audio/m4a"

    @property
    def size(self) -> int:
        return len(self.content)


class TimedSegment(BaseModel):
    """A provider-supplied transcript segment with exact timestamps."""

    text: str
    start: float
    end: float


class TranscriptionResult(BaseModel):
    """Plain text plus optional timed segments from the STT provider."""

    text: str
    segments: list[TimedSegment] = Field(default_factory=list)
    language: str | None = None
    duration: float | None = None


class TranscribeResponse(BaseModel):
    """POST /api/transcribe response."""

    transcript: str
    segments: list[TimedSegment] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


class GenerateOutputsRequest(BaseModel):
    """POST /api/generate-outputs request body."""

    transcript: str = ""
    segments: list[TimedSegment] = Field(default_factory=list)
    format: OutputKind | None = None


class GeneratedOutputs(BaseModel):
    """Summary and structured transcript produced together."""

    summary: StructuredSummary
    transcript: StructuredTranscript


class ProcessAllResponse(BaseModel):
    """Both-at-once response; structured payloads are JSON strings."""

    model_config = ConfigDict(populate_by_name=True)

    transcript: str
    summary: str
    structured_transcript: str = Field(alias="structuredTranscript")


class ProcessOneResponse(BaseModel):
    """Legacy single-format response; ``output`` is a JSON string."""

    transcript: str
    output: str


class GenerateOutputsResponse(BaseModel):
    """POST /api/generate-outputs response (JSON strings)."""

    model_config = ConfigDict(populate_by_name=True)

    summary: str | None = None
    structured_transcript: str | None = Field(default=None, alias="structuredTranscript")
    output: str | None = None


class GenerateTitleRequest(BaseModel):
    """POST /api/generate-title request body."""

    transcript: str | None = None
    summary: str | dict | None = None


class GenerateTitleResponse(BaseModel):
    title: str


# ---------------------------------------------------------------------------
# Recording (client)
# ---------------------------------------------------------------------------


class RecordingStatus(StrEnum):
    """Processing states of a recording."""

    processing = "processing"
    completed = "completed"
    failed = "failed"

    def can_transition_to(self, target: "RecordingStatus") -> bool:
        return target in _TRANSITIONS[self]


_TRANSITIONS: dict[RecordingStatus, frozenset[RecordingStatus]] = {
    RecordingStatus.processing: frozenset({RecordingStatus.completed, RecordingStatus.failed}),
    RecordingStatus.completed: frozenset(),
    # A retry runs from failed and lands on completed or failed again
    RecordingStatus.failed: frozenset(
        {RecordingStatus.processing, RecordingStatus.completed, RecordingStatus.failed}
    ),
}


class RecordingOutputs(BaseModel):
    """Generated artifacts; each is structured or a raw-string fallback."""

    summary: StructuredSummary | StructuredActionItems | StructuredKeyPoints | str | None = None
    transcript: StructuredTranscript | str | None = None


def _new_id() -> str:
    return uuid.uuid4().hex


def _now_ms() -> int:
    return int(time.time() * 1000)


class Recording(BaseModel):
    """A captured audio clip plus its processing state and outputs.

    ``outputs`` is only populated while ``completed`` and
    ``processing_error`` only while ``failed``.
    """

    id: str = Field(default_factory=_new_id)
    title: str = "New recording"
    audio_blob_url: str
    duration_sec: float = 0.0
    created_at: int = Field(default_factory=_now_ms)  # epoch milliseconds
    status: RecordingStatus = RecordingStatus.processing
    processing_error: str | None = None
    outputs: RecordingOutputs | None = None
    last_viewed_format: OutputKind | None = None

    @model_validator(mode="after")
    def _check_status_fields(self) -> "Recording":
        if self.outputs is not None and self.status != RecordingStatus.completed:
            raise ValueError("outputs may only be set on a completed recording")
        if self.processing_error is not None and self.status != RecordingStatus.failed:
            raise ValueError("processing_error may only be set on a failed recording")
        return self


IMMUTABLE_RECORDING_FIELDS = frozenset({"id", "audio_blob_url", "created_at"})
