"""
Input guards for the processing pipeline.

Audio below ``MIN_AUDIO_SIZE_BYTES`` is treated as silence and never sent to
the provider. Transcripts that are empty, too short, or that exactly match a
known speech-to-text hallucination on silent input are rejected as "no
speech". Long transcripts are truncated before generation to respect the
model's token limits.
"""

import re

from plainly.core.exceptions import NoSpeechDetectedError

MIN_AUDIO_SIZE_BYTES = 1000
MIN_TRANSCRIPT_LENGTH = 10
MAX_TRANSCRIPT_CHARS = 50_000
TRUNCATION_MARKER = "... [truncated]"

TOO_SHORT_MESSAGE = "Recording too short to process. Please record for at least a few seconds."

# Phrases Whisper emits on silent or noisy input; matched against the whole transcript
HALLUCINATION_PATTERNS = [
    re.compile(r"^thank you for watching$", re.IGNORECASE),
    re.compile(r"^thanks for watching$", re.IGNORECASE),
    re.compile(r"^you$", re.IGNORECASE),
    re.compile(r"^subscribe$", re.IGNORECASE),
    re.compile(r"^like and subscribe$", re.IGNORECASE),
    re.compile(r"^thank you$", re.IGNORECASE),
    re.compile(r"^\.$"),
    re.compile(r"^,$"),
]


def is_audio_too_short(size_bytes: int) -> bool:
    """Return True when an audio payload is too small to contain speech."""
    return size_bytes < MIN_AUDIO_SIZE_BYTES


def is_hallucination(text: str) -> bool:
    """Return True when *text* is exactly one of the known filler phrases."""
    stripped = text.strip()
    return any(pattern.match(stripped) for pattern in HALLUCINATION_PATTERNS)


def validate_transcript(text: str | None) -> str:
    """Return the trimmed transcript or raise when it carries no speech.

    Raises:
        NoSpeechDetectedError: Empty, shorter than ``MIN_TRANSCRIPT_LENGTH``,
            or a hallucination phrase.
    """
    trimmed = (text or "").strip()
    if not trimmed or len(trimmed) < MIN_TRANSCRIPT_LENGTH or is_hallucination(trimmed):
        raise NoSpeechDetectedError()
    return trimmed


def truncate_transcript(text: str) -> str:
    """Cap *text* at ``MAX_TRANSCRIPT_CHARS`` characters, marking the cut."""
    if len(text) <= MAX_TRANSCRIPT_CHARS:
        return text
    return text[:MAX_TRANSCRIPT_CHARS] + TRUNCATION_MARKER
