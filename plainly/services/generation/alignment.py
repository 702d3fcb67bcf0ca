"""
Timestamp reconciliation for structured transcripts.

The model segments the transcript by topic but only guesses at timing. When
the provider returned timed segments, each model segment without an exact
start/end pair is matched to the first provider segment (searching forward
from the previous match) whose normalized text shares its prefix. A matched
segment starts where its provider segment starts and ends where the last
provider segment before the next match ends.
"""

import logging

from plainly.core.exceptions import NoSpeechDetectedError
from plainly.core.models import TimedSegment
from plainly.core.structured import TranscriptSegment
from plainly.core.utils import normalize_for_match

logger = logging.getLogger(__name__)

PREFIX_MATCH_CHARS = 24
# Shorter provider segments must contain the whole model prefix to match
MIN_PARTIAL_MATCH_CHARS = 8
MIN_SEGMENT_CHARS = 2


def has_enough_text(text: str) -> bool:
    """Return True when *text* has at least ``MIN_SEGMENT_CHARS`` non-space characters."""
    return len("".join(text.split())) >= MIN_SEGMENT_CHARS


def _find_match(text: str, timed: list[TimedSegment], cursor: int) -> int | None:
    prefix = normalize_for_match(text)[:PREFIX_MATCH_CHARS]
    if not prefix:
        return None
    for index in range(cursor, len(timed)):
        candidate = normalize_for_match(timed[index].text)
        if not candidate:
            continue
        if candidate.startswith(prefix):
            return index
        if len(candidate) >= MIN_PARTIAL_MATCH_CHARS and prefix.startswith(candidate):
            return index
    return None


def align_segments(
    segments: list[TranscriptSegment],
    timed: list[TimedSegment] | None = None,
) -> list[TranscriptSegment]:
    """Drop near-empty segments and fill missing timestamps from provider segments.

    Args:
        segments: Segments proposed by the model.
        timed: Provider segments with exact timestamps (may be empty).

    Returns:
        The surviving segments, with timestamps reconciled where possible.

    Raises:
        NoSpeechDetectedError: No segment with enough text remains.
    """
    kept = [seg for seg in segments if has_enough_text(seg.text)]
    if not kept:
        raise NoSpeechDetectedError()
    if not timed:
        return kept

    # First pass: find the provider segment each untimed model segment starts at
    matches: list[int | None] = []
    cursor = 0
    for seg in kept:
        if seg.start is not None and seg.end is not None:
            matches.append(None)
            continue
        index = _find_match(seg.text, timed, cursor)
        matches.append(index)
        if index is not None:
            cursor = index + 1

    # Second pass: a match ends right before the next matched provider segment
    aligned: list[TranscriptSegment] = []
    for position, (seg, index) in enumerate(zip(kept, matches)):
        if index is None:
            aligned.append(seg)
            continue
        next_index = next(
            (m for m in matches[position + 1:] if m is not None),
            len(timed),
        )
        last = timed[max(next_index - 1, index)]
        aligned.append(
            seg.model_copy(update={"start": timed[index].start, "end": last.end})
        )

    unmatched = sum(
        1 for seg, index in zip(kept, matches) if index is None and seg.end is None
    )
    if unmatched:
        logger.debug("%d of %d transcript segments left without timestamps", unmatched, len(kept))
    return aligned
