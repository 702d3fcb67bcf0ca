"""
Structured output schemas and the parse-or-default combinator.

Every output kind has exactly one schema and one canonical default. Model
replies are parsed with :func:`parse_or_default`, which never raises: any
reply that is not a JSON object matching the schema is replaced by
:func:`default_output` for that kind.
"""

import json
import logging
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from plainly.core.utils import strip_code_fences

logger = logging.getLogger(__name__)


class OutputKind(StrEnum):
    """Structured artifacts the generation stage can produce."""

    summary = "summary"
    transcript = "transcript"
    # Legacy single-format kinds
    action_items = "action_items"
    key_points = "key_points"


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------


class ConfidenceNotes(BaseModel):
    """Uncertainty flags attached to a generated artifact."""

    possible_missed_words: bool = False
    mixed_language_detected: bool = False
    noisy_audio_suspected: bool = False
    reason: str | None = None


class _StructuredOutput(BaseModel):
    confidence_notes: ConfidenceNotes = Field(default_factory=ConfidenceNotes)

    @field_validator("confidence_notes", mode="before")
    @classmethod
    def _none_notes(cls, value):
        return {} if value is None else value


def _none_to_list(value):
    return [] if value is None else value


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------


class KeyPoint(BaseModel):
    lead: str = ""
    detail: str = ""


class StructuredSummary(_StructuredOutput):
    format: Literal["summary"] = "summary"
    gist: str = ""
    key_points: list[KeyPoint] = Field(default_factory=list)
    follow_ups: list[str] = Field(default_factory=list)

    @field_validator("gist", mode="before")
    @classmethod
    def _none_gist(cls, value):
        return "" if value is None else value

    @field_validator("key_points", mode="before")
    @classmethod
    def _coerce_key_points(cls, value):
        # Models occasionally return bare strings instead of {lead, detail}
        value = _none_to_list(value)
        if isinstance(value, list):
            return [{"lead": item} if isinstance(item, str) else item for item in value]
        return value

    @field_validator("follow_ups", mode="before")
    @classmethod
    def _none_follow_ups(cls, value):
        return _none_to_list(value)


# ---------------------------------------------------------------------------
# Transcript
# ---------------------------------------------------------------------------


class TranscriptSegment(BaseModel):
    speaker: str = "Speaker"
    text: str = ""
    start: float | None = None
    end: float | None = None

    @field_validator("speaker", mode="before")
    @classmethod
    def _default_speaker(cls, value):
        return value or "Speaker"


class StructuredTranscript(_StructuredOutput):
    format: Literal["transcript"] = "transcript"
    segments: list[TranscriptSegment] = Field(default_factory=list)
    speaker_separation: Literal["provided", "not_provided"] = "not_provided"

    @field_validator("segments", mode="before")
    @classmethod
    def _none_segments(cls, value):
        return _none_to_list(value)

    @field_validator("speaker_separation", mode="before")
    @classmethod
    def _normalize_separation(cls, value):
        return "provided" if value == "provided" else "not_provided"


# ---------------------------------------------------------------------------
# Legacy kinds
# ---------------------------------------------------------------------------


class ActionItem(BaseModel):
    task: str
    owner: str | None = None
    due: str | None = None
    details: str | None = None


class StructuredActionItems(_StructuredOutput):
    format: Literal["action_items"] = "action_items"
    none_found: bool = True
    items: list[ActionItem] = Field(default_factory=list)

    @field_validator("items", mode="before")
    @classmethod
    def _none_items(cls, value):
        return _none_to_list(value)


class StructuredKeyPoints(_StructuredOutput):
    format: Literal["key_points"] = "key_points"
    points: list[str] = Field(default_factory=list)

    @field_validator("points", mode="before")
    @classmethod
    def _none_points(cls, value):
        return _none_to_list(value)


StructuredOutput = (
    StructuredSummary | StructuredTranscript | StructuredActionItems | StructuredKeyPoints
)

SCHEMAS: dict[OutputKind, type[_StructuredOutput]] = {
    OutputKind.summary: StructuredSummary,
    OutputKind.transcript: StructuredTranscript,
    OutputKind.action_items: StructuredActionItems,
    OutputKind.key_points: StructuredKeyPoints,
}

SHORT_SUMMARY_GIST = "Short recording, not enough to summarize."


def default_output(kind: OutputKind, transcript: str = "") -> StructuredOutput:
    """Return the canonical fallback object for *kind*.

    The transcript default is a single unsegmented block holding the source
    transcript (or no segments when there is none).
    """
    kind = OutputKind(kind)
    if kind == OutputKind.summary:
        return StructuredSummary(gist=SHORT_SUMMARY_GIST)
    if kind == OutputKind.transcript:
        text = transcript.strip()
        segments = [TranscriptSegment(text=text, start=0.0)] if text else []
        return StructuredTranscript(segments=segments)
    if kind == OutputKind.action_items:
        return StructuredActionItems(none_found=True)
    return StructuredKeyPoints()


def _load_object(raw: str | None) -> dict | None:
    if not raw or not raw.strip():
        return None
    try:
        data = json.loads(strip_code_fences(raw))
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def parse_or_default(raw: str | None, kind: OutputKind, transcript: str = "") -> StructuredOutput:
    """Parse a model reply into the schema for *kind*, falling back to its default.

    Missing fields are filled with schema defaults. A reply that is not a JSON
    object, or that fails validation, is logged and replaced by
    ``default_output(kind, transcript)``.

    Args:
        raw: Raw text returned by the LLM.
        kind: Which schema to validate against.
        transcript: Source transcript, used to build the transcript default.

    Returns:
        A schema-valid structured object; never raises.
    """
    kind = OutputKind(kind)
    data = _load_object(raw)
    if data is None:
        logger.warning("Malformed %s output, using default: %.200r", kind, raw)
        return default_output(kind, transcript)

    # The kind is decided by the caller, not the model
    data["format"] = kind.value
    try:
        return SCHEMAS[kind].model_validate(data)
    except ValidationError as exc:
        logger.warning(
            "Schema-invalid %s output (%d errors), using default",
            kind,
            exc.error_count(),
        )
        return default_output(kind, transcript)


def parse_stored_output(raw: str | None, kind: OutputKind) -> StructuredOutput | str | None:
    """Client-side parse: structured object when the payload matches, raw string otherwise.

    Used when persisting outputs returned by the service so that older or
    plain-text payloads are kept verbatim instead of being discarded.
    """
    if raw is None:
        return None
    kind = OutputKind(kind)
    data = _load_object(raw)
    if data is None or data.get("format") != kind.value:
        return raw
    try:
        return SCHEMAS[kind].model_validate(data)
    except ValidationError:
        return raw
