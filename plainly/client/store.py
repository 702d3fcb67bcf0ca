"""
Persistent recording store backed by SQLite.

``RecordingStore`` converts between the ``Recording`` domain model and
``RecordingRow``. Each public method runs in its own session scope so a
failed write never leaves a half-applied change behind.
"""

import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from plainly.client.database import get_session
from plainly.client.models_db import RecordingRow
from plainly.core.exceptions import InvalidTransitionError, StorageError
from plainly.core.models import IMMUTABLE_RECORDING_FIELDS, Recording

logger = logging.getLogger(__name__)

SessionScope = Callable[[], AbstractAsyncContextManager[AsyncSession]]


def _to_row(recording: Recording) -> RecordingRow:
    return RecordingRow(**recording.model_dump(mode="json"))


def _to_model(row: RecordingRow) -> Recording:
    return Recording.model_validate(
        {
            "id": row.id,
            "title": row.title,
            "audio_blob_url": row.audio_blob_url,
            "duration_sec": row.duration_sec,
            "created_at": row.created_at,
            "status": row.status,
            "processing_error": row.processing_error,
            "outputs": row.outputs,
            "last_viewed_format": row.last_viewed_format,
        }
    )


class RecordingStore:
    """CRUD access to recordings, newest first.

    Args:
        session_scope: Factory for a transactional session context manager.
            Defaults to :func:`plainly.client.database.get_session`.
    """

    def __init__(self, session_scope: SessionScope = get_session) -> None:
        self._session_scope = session_scope

    async def get_all(self) -> list[Recording]:
        """Return every recording ordered by ``created_at`` descending."""
        try:
            async with self._session_scope() as session:
                stmt = select(RecordingRow).order_by(RecordingRow.created_at.desc())
                result = await session.execute(stmt)
                return [_to_model(row) for row in result.scalars().all()]
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to load recordings: {exc}") from exc

    async def get_by_id(self, recording_id: str) -> Recording | None:
        try:
            async with self._session_scope() as session:
                row = await session.get(RecordingRow, recording_id)
                return _to_model(row) if row is not None else None
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to load recording {recording_id}: {exc}") from exc

    async def add(self, recording: Recording) -> Recording:
        """Persist a new recording and return it."""
        try:
            async with self._session_scope() as session:
                session.add(_to_row(recording))
                await session.flush()
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to save recording {recording.id}: {exc}") from exc
        logger.debug("Added recording %s", recording.id)
        return recording

    async def update(self, recording_id: str, patch: dict[str, Any]) -> Recording | None:
        """Merge *patch* into an existing recording.

        Only the given fields change. An unknown ID is a no-op returning None.

        Raises:
            ValueError: *patch* touches an immutable field or breaks the
                status/outputs invariants.
            InvalidTransitionError: *patch* moves the status along a path
                ``RecordingStatus`` does not allow.
            StorageError: The database write failed.
        """
        forbidden = IMMUTABLE_RECORDING_FIELDS & patch.keys()
        if forbidden:
            raise ValueError(f"Immutable recording fields: {sorted(forbidden)}")

        try:
            async with self._session_scope() as session:
                row = await session.get(RecordingRow, recording_id)
                if row is None:
                    logger.debug("Update skipped, recording %s not found", recording_id)
                    return None
                current = _to_model(row)
                merged = current.model_dump()
                merged.update(patch)
                updated = Recording.model_validate(merged)
                if updated.status != current.status and not current.status.can_transition_to(
                    updated.status
                ):
                    raise InvalidTransitionError(current.status, updated.status)

                for field, value in updated.model_dump(mode="json").items():
                    if field not in IMMUTABLE_RECORDING_FIELDS:
                        setattr(row, field, value)
                await session.flush()
                return updated
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to update recording {recording_id}: {exc}") from exc

    async def delete(self, recording_id: str) -> None:
        """Remove a recording; deleting a missing ID is a no-op."""
        try:
            async with self._session_scope() as session:
                await session.execute(delete(RecordingRow).where(RecordingRow.id == recording_id))
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to delete recording {recording_id}: {exc}") from exc

    async def count(self) -> int:
        try:
            async with self._session_scope() as session:
                result = await session.execute(select(func.count()).select_from(RecordingRow))
                return int(result.scalar_one())
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to count recordings: {exc}") from exc
