"""
SQLAlchemy ORM models.

Tables: ``episodes``, ``transcript_nodes``, ``inbox_messages``.
"""

from datetime import UTC, datetime

from sqlalchemy import Boolean, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from stoop.services.storage.database import Base


class Episode(Base):
    """A podcast episode: metadata plus pointers into object storage."""

    __tablename__ = "episodes"
    __table_args__ = (Index("ix_episodes_published", "is_published", "published_at"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255))
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    audio_url: Mapped[str] = mapped_column(String(1024))
    audio_key: Mapped[str | None] = mapped_column(String(512), nullable=True)
    cover_image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    cover_image_key: Mapped[str | None] = mapped_column(String(512), nullable=True)
    duration_seconds: Mapped[int] = mapped_column(default=0)
    audio_size_bytes: Mapped[int | None] = mapped_column(nullable=True)
    audio_format: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_published: Mapped[bool] = mapped_column(Boolean, default=False)
    published_at: Mapped[datetime | None] = mapped_column(nullable=True)
    transcription_status: Mapped[str] = mapped_column(String(20), default="not_started")
    transcription_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC), index=True)

    def __repr__(self) -> str:
        return f"<Episode id={self.id} published={self.is_published}>"


class TranscriptNode(Base):
    """One timestamped transcript segment, optionally linked to a reference."""

    __tablename__ = "transcript_nodes"
    __table_args__ = (
        Index("ux_transcript_nodes_episode_order", "episode_id", "display_order", unique=True),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    episode_id: Mapped[int] = mapped_column(ForeignKey("episodes.id", ondelete="CASCADE"))
    content: Mapped[str] = mapped_column(Text, default="")
    display_order: Mapped[int] = mapped_column()
    start_time: Mapped[float | None] = mapped_column(nullable=True)
    end_time: Mapped[float | None] = mapped_column(nullable=True)
    reference_link: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    reference_title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))

    def __repr__(self) -> str:
        return f"<TranscriptNode id={self.id} episode={self.episode_id} order={self.display_order}>"


class InboxMessage(Base):
    """A message left by a listener."""

    __tablename__ = "inbox_messages"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    message: Mapped[str] = mapped_column(Text)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))

    def __repr__(self) -> str:
        return f"<InboxMessage id={self.id} read={self.is_read}>"
