"""Key-value app flags (first-run hints, milestones, fresh-start marker)."""

import logging

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError

from plainly.client.database import get_session
from plainly.client.models_db import FlagRow
from plainly.client.store import SessionScope
from plainly.core.exceptions import StorageError

logger = logging.getLogger(__name__)

FRESH_START = "fresh_start"
RECORDING_TOOLTIP_SEEN = "recording_tooltip_seen"

SEEN_VALUE = "true"


def milestone_key(count: int) -> str:
    """Flag key recording that the *count*-recordings milestone was shown."""
    return f"milestone_{count}_seen"


class FlagStore:
    """Explicit replacement for ambient app-wide flags.

    Args:
        session_scope: Factory for a transactional session context manager.
    """

    def __init__(self, session_scope: SessionScope = get_session) -> None:
        self._session_scope = session_scope

    async def get(self, key: str) -> str | None:
        try:
            async with self._session_scope() as session:
                row = await session.get(FlagRow, key)
                return row.value if row is not None else None
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to read flag {key}: {exc}") from exc

    async def set(self, key: str, value: str) -> None:
        try:
            async with self._session_scope() as session:
                row = await session.get(FlagRow, key)
                if row is None:
                    session.add(FlagRow(key=key, value=value))
                else:
                    row.value = value
                await session.flush()
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to write flag {key}: {exc}") from exc

    async def is_seen(self, key: str) -> bool:
        return await self.get(key) == SEEN_VALUE

    async def mark_seen(self, key: str) -> bool:
        """Set *key* to seen. Returns True only if this call changed it."""
        if await self.is_seen(key):
            return False
        await self.set(key, SEEN_VALUE)
        logger.debug("Flag %s marked seen", key)
        return True

    async def clear(self, key: str) -> None:
        try:
            async with self._session_scope() as session:
                await session.execute(delete(FlagRow).where(FlagRow.key == key))
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to clear flag {key}: {exc}") from exc
