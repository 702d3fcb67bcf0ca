"""
SQLAlchemy ORM models for the on-device store.

Tables: ``recordings``, ``flags``.
"""

from sqlalchemy import BigInteger, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from plainly.client.database import Base


class RecordingRow(Base):
    """A persisted recording; ``outputs`` holds structured objects or raw strings."""

    __tablename__ = "recordings"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), default="New recording")
    audio_blob_url: Mapped[str] = mapped_column(String(1024))
    duration_sec: Mapped[float] = mapped_column(Float, default=0.0)
    created_at: Mapped[int] = mapped_column(BigInteger, index=True)
    status: Mapped[str] = mapped_column(String(20), default="processing", index=True)
    processing_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    outputs: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    last_viewed_format: Mapped[str | None] = mapped_column(String(20), nullable=True)

    def __repr__(self) -> str:
        return f"<RecordingRow id={self.id!r} status={self.status!r}>"


class FlagRow(Base):
    """A single key-value app flag."""

    __tablename__ = "flags"

    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    value: Mapped[str] = mapped_column(Text, default="")

    def __repr__(self) -> str:
        return f"<FlagRow key={self.key!r}>"
