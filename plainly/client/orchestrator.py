"""
Client-side recording lifecycle orchestrator.

Drives a recording from capture to completed outputs:

1. ``create_recording`` persists a new recording in ``processing``.
2. ``process`` transcribes, then generates outputs; any failure moves the
   recording to ``failed`` with a user-facing message.
3. On success the outputs are stored and a title is requested in the
   background.
4. ``retry`` re-enters the flow from ``failed`` with the same audio.
"""

import asyncio
import logging

from plainly.client.api_client import APIClient, APIError
from plainly.client.flags import FRESH_START, FlagStore
from plainly.client.player import AudioPlayer
from plainly.client.store import RecordingStore
from plainly.core.exceptions import (
    InvalidTransitionError,
    PlainlyError,
    RecordingBusyError,
    RecordingNotFoundError,
)
from plainly.core.models import Recording, RecordingOutputs, RecordingStatus
from plainly.core.structured import OutputKind, parse_stored_output

logger = logging.getLogger(__name__)

DEFAULT_RECORDING_TITLE = "New recording"
GENERIC_FAILURE_MESSAGE = "Failed to generate output. Please try again."


def friendly_error_message(exc: Exception) -> str:
    """Map a processing failure to the message shown on the recording."""
    message = exc.message if isinstance(exc, APIError) else str(exc)
    category = exc.category if isinstance(exc, APIError) else None

    if category == "connection" or "Network" in message or "connect" in message:
        return (
            "Unable to connect to server. Please check your internet connection "
            "and make sure the backend is running."
        )
    if "No speech detected" in message:
        return "No speech was detected in the recording. Please try recording again."
    if "Rate limit" in message:
        return "Too many requests. Please wait a moment and try again."
    if "too short" in message:
        return "Recording is too short. Please record for at least a few seconds."
    return message or GENERIC_FAILURE_MESSAGE


class RecordingOrchestrator:
    """Owns the recording lifecycle on the client.

    Args:
        store: Persistent recording store.
        api: HTTP client for the processing service.
        flags: App flag store.
        player: The single owned audio player, if playback is available.
    """

    def __init__(
        self,
        store: RecordingStore,
        api: APIClient,
        flags: FlagStore,
        player: AudioPlayer | None = None,
    ) -> None:
        self._store = store
        self._api = api
        self._flags = flags
        self._player = player
        self._in_flight: set[str] = set()
        self._background: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def create_recording(
        self,
        audio_path: str,
        duration_sec: float,
        title: str = DEFAULT_RECORDING_TITLE,
    ) -> Recording:
        """Persist a freshly captured recording in the ``processing`` state."""
        recording = Recording(
            title=title,
            audio_blob_url=audio_path,
            duration_sec=duration_sec,
            status=RecordingStatus.processing,
        )
        await self._store.add(recording)
        await self._safe_clear_flag(FRESH_START)
        logger.info("Created recording %s (%.1fs)", recording.id, duration_sec)
        return recording

    def is_in_flight(self, recording_id: str) -> bool:
        return recording_id in self._in_flight

    async def process(self, recording_id: str) -> Recording | None:
        """Run transcription then generation for a ``processing`` recording.

        Returns:
            The final stored recording, or None if it was deleted meanwhile.

        Raises:
            RecordingBusyError: The recording is already being processed.
            RecordingNotFoundError: No recording with this ID exists.
            InvalidTransitionError: The recording is not in ``processing``.
        """
        return await self._guarded_run(recording_id, RecordingStatus.processing)

    async def retry(self, recording_id: str) -> Recording | None:
        """Re-process a ``failed`` recording with its stored audio.

        The record stays ``failed`` until the new attempt finishes, then
        moves straight to ``completed`` or stays ``failed`` with a new message.
        """
        logger.info("Retrying recording %s", recording_id)
        return await self._guarded_run(recording_id, RecordingStatus.failed)

    async def _guarded_run(self, recording_id: str, expected: RecordingStatus) -> Recording | None:
        if recording_id in self._in_flight:
            raise RecordingBusyError(recording_id)

        self._in_flight.add(recording_id)
        try:
            recording = await self._store.get_by_id(recording_id)
            if recording is None:
                raise RecordingNotFoundError(recording_id)
            if recording.status != expected:
                raise InvalidTransitionError(recording.status, expected)
            return await self._run(recording)
        finally:
            self._in_flight.discard(recording_id)

    async def _run(self, recording: Recording) -> Recording | None:
        # Stage 1: transcription
        try:
            transcription = await self._api.transcribe(recording.audio_blob_url)
        except (APIError, PlainlyError) as exc:
            logger.warning("Transcription failed for %s: %s", recording.id, exc)
            return await self._fail(recording.id, exc)

        # Stage 3: structured outputs
        try:
            generated = await self._api.generate_outputs(
                transcription.transcript, transcription.segments
            )
        except (APIError, PlainlyError) as exc:
            logger.warning("Output generation failed for %s: %s", recording.id, exc)
            return await self._fail(recording.id, exc)

        outputs = RecordingOutputs(
            summary=parse_stored_output(generated.summary, OutputKind.summary),
            transcript=parse_stored_output(generated.structured_transcript, OutputKind.transcript),
        )
        updated = await self._safe_update(
            recording.id,
            {
                "status": RecordingStatus.completed,
                "outputs": outputs,
                "processing_error": None,
            },
        )
        logger.info("Recording %s completed", recording.id)

        if updated is not None and updated.title == DEFAULT_RECORDING_TITLE:
            self._spawn_title_task(recording.id, transcription.transcript, generated.summary)
        return updated

    async def _fail(self, recording_id: str, exc: Exception) -> Recording | None:
        return await self._safe_update(
            recording_id,
            {
                "status": RecordingStatus.failed,
                "processing_error": friendly_error_message(exc),
                "outputs": None,
            },
        )

    # ------------------------------------------------------------------
    # Background titles
    # ------------------------------------------------------------------

    def _spawn_title_task(self, recording_id: str, transcript: str, summary: str | None) -> None:
        task = asyncio.create_task(self._generate_title(recording_id, transcript, summary))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _generate_title(
        self, recording_id: str, transcript: str, summary: str | None
    ) -> None:
        try:
            title = await self._api.generate_title(transcript=transcript, summary=summary)
            if title:
                await self._store.update(recording_id, {"title": title})
                logger.debug("Titled recording %s: %r", recording_id, title)
        except (APIError, PlainlyError, ValueError) as exc:
            logger.debug("Title generation failed for %s: %s", recording_id, exc)

    async def wait_for_background(self) -> None:
        """Wait for all outstanding title requests to finish."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    # ------------------------------------------------------------------
    # Library actions
    # ------------------------------------------------------------------

    async def rename(self, recording_id: str, title: str) -> bool:
        """Set a user-chosen title. Returns False on empty title or failure."""
        title = title.strip()
        if not title:
            return False
        return await self._safe_update(recording_id, {"title": title}) is not None

    async def set_last_viewed_format(self, recording_id: str, kind: OutputKind) -> None:
        await self._safe_update(recording_id, {"last_viewed_format": OutputKind(kind)})

    async def delete_recording(self, recording_id: str) -> None:
        """Delete a recording, stopping its playback first.

        Marks ``fresh_start`` once the library is empty. Deleting a missing
        recording is a no-op.
        """
        if self._player is not None and self._player.is_active(recording_id):
            self._player.close()
        try:
            await self._store.delete(recording_id)
            if await self._store.count() == 0:
                await self._flags.set(FRESH_START, "true")
        except PlainlyError as exc:
            logger.exception("Failed to delete recording %s: %s", recording_id, exc)
            return
        logger.info("Deleted recording %s", recording_id)

    async def list_recordings(self) -> list[Recording]:
        """All recordings newest first; empty if the store cannot be read."""
        try:
            return await self._store.get_all()
        except PlainlyError as exc:
            logger.exception("Failed to load recordings: %s", exc)
            return []

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _safe_update(self, recording_id: str, patch: dict) -> Recording | None:
        try:
            return await self._store.update(recording_id, patch)
        except PlainlyError as exc:
            logger.exception("Failed to update recording %s: %s", recording_id, exc)
            return None

    async def _safe_clear_flag(self, key: str) -> None:
        try:
            await self._flags.clear(key)
        except PlainlyError as exc:
            logger.exception("Failed to clear flag %s: %s", key, exc)
