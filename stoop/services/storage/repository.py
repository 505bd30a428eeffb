"""
CRUD repositories for episodes, transcript nodes, and inbox messages.

Repositories receive an ``AsyncSession`` and call ``flush()`` rather than
``commit()`` so that transaction boundaries are controlled by the caller
(typically :meth:`Database.session`).
"""

import logging
from datetime import UTC, datetime

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from stoop.core.exceptions import (
    EpisodeAlreadyPublishedError,
    EpisodeNotFoundError,
    InboxMessageNotFoundError,
    TranscriptNodeNotFoundError,
)
from stoop.core.models import TranscriptionSegment, TranscriptionStatus
from stoop.services.storage.models_db import Episode, InboxMessage, TranscriptNode

logger = logging.getLogger(__name__)

_EPISODE_FIELDS = {"title", "summary", "transcription_status", "transcription_error"}
_NODE_FIELDS = {"content", "reference_link", "reference_title"}


class EpisodeRepository:
    """Data-access layer for episodes and their transcript nodes.

    Args:
        session: An active SQLAlchemy ``AsyncSession``.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Episodes
    # ------------------------------------------------------------------

    async def create_episode(
        self,
        title: str,
        audio_url: str,
        summary: str | None = None,
        audio_key: str | None = None,
        cover_image_url: str | None = None,
        cover_image_key: str | None = None,
        duration_seconds: int = 0,
        audio_size_bytes: int | None = None,
        audio_format: str | None = None,
    ) -> Episode:
        """Create and return a new, unpublished episode."""
        episode = Episode(
            title=title,
            summary=summary,
            audio_url=audio_url,
            audio_key=audio_key,
            cover_image_url=cover_image_url,
            cover_image_key=cover_image_key,
            duration_seconds=duration_seconds,
            audio_size_bytes=audio_size_bytes,
            audio_format=audio_format,
            is_published=False,
            transcription_status=TranscriptionStatus.not_started.value,
        )
        self._session.add(episode)
        await self._session.flush()
        return episode

    async def get_episode(self, episode_id: int) -> Episode:
        """Return an episode by ID or raise :class:`EpisodeNotFoundError`."""
        episode = await self._session.get(Episode, episode_id)
        if episode is None:
            raise EpisodeNotFoundError(episode_id)
        return episode

    async def list_episodes(self, limit: int = 50, offset: int = 0) -> list[Episode]:
        """Return episodes newest first (operator dashboard order)."""
        stmt = (
            select(Episode)
            .order_by(Episode.created_at.desc(), Episode.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def list_published(self) -> list[Episode]:
        """Return publicly visible episodes, most recently published first."""
        stmt = (
            select(Episode)
            .where(Episode.is_published.is_(True), Episode.published_at.isnot(None))
            .order_by(Episode.published_at.desc(), Episode.id.desc())
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def update_episode(self, episode_id: int, **fields: object) -> Episode:
        """Update editable episode fields and return the updated row.

        Publishing is deliberately not reachable from here; use
        :meth:`publish_episode`.
        """
        unknown = set(fields) - _EPISODE_FIELDS
        if unknown:
            raise ValueError(f"Fields not updatable: {sorted(unknown)}")
        episode = await self.get_episode(episode_id)
        for key, value in fields.items():
            setattr(episode, key, value)
        await self._session.flush()
        return episode

    async def set_transcription_status(
        self,
        episode_id: int,
        status: TranscriptionStatus,
        error: str | None = None,
    ) -> Episode:
        """Set the transcription status (and clear or record the error)."""
        return await self.update_episode(
            episode_id,
            transcription_status=status.value,
            transcription_error=error,
        )

    async def publish_episode(self, episode_id: int) -> Episode:
        """Flip the publish flag and stamp ``published_at`` with the current time."""
        episode = await self.get_episode(episode_id)
        if episode.is_published:
            raise EpisodeAlreadyPublishedError(episode_id)
        episode.is_published = True
        episode.published_at = datetime.now(UTC)
        await self._session.flush()
        return episode

    async def delete_episode(self, episode_id: int) -> tuple[Episode, int]:
        """Delete an episode and all of its transcript nodes.

        Returns:
            The deleted episode (detached, for media cleanup) and the number
            of nodes removed.
        """
        episode = await self.get_episode(episode_id)
        result = await self._session.execute(
            delete(TranscriptNode).where(TranscriptNode.episode_id == episode_id)
        )
        await self._session.delete(episode)
        await self._session.flush()
        return episode, result.rowcount or 0

    # ------------------------------------------------------------------
    # Transcript nodes
    # ------------------------------------------------------------------

    async def list_nodes(self, episode_id: int) -> list[TranscriptNode]:
        """Return an episode's nodes in reading order (``display_order`` asc)."""
        stmt = (
            select(TranscriptNode)
            .where(TranscriptNode.episode_id == episode_id)
            .order_by(TranscriptNode.display_order)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def _next_display_order(self, episode_id: int) -> int:
        stmt = select(func.max(TranscriptNode.display_order)).where(
            TranscriptNode.episode_id == episode_id
        )
        current = (await self._session.execute(stmt)).scalar_one_or_none()
        return 0 if current is None else current + 1

    async def replace_nodes(
        self,
        episode_id: int,
        segments: list[TranscriptionSegment],
        replace: bool = True,
    ) -> list[TranscriptNode]:
        """Swap in a new batch of nodes built from *segments*, in order.

        With ``replace`` the episode's existing nodes are deleted first, so
        the new batch starts at ``display_order`` 0; otherwise it is appended
        after the current highest order. Runs inside the caller's transaction.
        """
        if replace:
            await self._session.execute(
                delete(TranscriptNode).where(TranscriptNode.episode_id == episode_id)
            )
            start = 0
        else:
            start = await self._next_display_order(episode_id)

        nodes = [
            TranscriptNode(
                episode_id=episode_id,
                content=segment.text.strip(),
                display_order=start + index,
                start_time=segment.start,
                end_time=segment.end,
            )
            for index, segment in enumerate(segments)
        ]
        self._session.add_all(nodes)
        await self._session.flush()
        return nodes

    async def create_node(
        self,
        episode_id: int,
        content: str,
        reference_link: str | None = None,
        reference_title: str | None = None,
    ) -> TranscriptNode:
        """Append a manual node without timestamps at the end of the transcript."""
        await self.get_episode(episode_id)
        node = TranscriptNode(
            episode_id=episode_id,
            content=content,
            display_order=await self._next_display_order(episode_id),
            reference_link=reference_link,
            reference_title=reference_title,
        )
        self._session.add(node)
        await self._session.flush()
        return node

    async def get_node(self, node_id: int) -> TranscriptNode:
        """Return a node by ID or raise :class:`TranscriptNodeNotFoundError`."""
        node = await self._session.get(TranscriptNode, node_id)
        if node is None:
            raise TranscriptNodeNotFoundError(node_id)
        return node

    async def update_node(self, node_id: int, **fields: object) -> TranscriptNode:
        """Write the given editable fields (content / reference link / title)."""
        unknown = set(fields) - _NODE_FIELDS
        if unknown:
            raise ValueError(f"Fields not updatable: {sorted(unknown)}")
        node = await self.get_node(node_id)
        for key, value in fields.items():
            setattr(node, key, value)
        await self._session.flush()
        return node

    async def delete_node(self, node_id: int) -> None:
        node = await self.get_node(node_id)
        await self._session.delete(node)
        await self._session.flush()


class InboxRepository:
    """Data-access layer for listener inbox messages."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_message(self, message: str) -> InboxMessage:
        inbox_message = InboxMessage(message=message)
        self._session.add(inbox_message)
        await self._session.flush()
        return inbox_message

    async def get_message(self, message_id: int) -> InboxMessage:
        """Return a message by ID or raise :class:`InboxMessageNotFoundError`."""
        inbox_message = await self._session.get(InboxMessage, message_id)
        if inbox_message is None:
            raise InboxMessageNotFoundError(message_id)
        return inbox_message

    async def list_messages(self, unread_only: bool = False, limit: int = 100) -> list[InboxMessage]:
        """Return messages newest first, optionally only the unread ones."""
        stmt = (
            select(InboxMessage)
            .order_by(InboxMessage.created_at.desc(), InboxMessage.id.desc())
            .limit(limit)
        )
        if unread_only:
            stmt = stmt.where(InboxMessage.is_read.is_(False))
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def update_message(
        self,
        message_id: int,
        is_read: bool | None = None,
        admin_notes: str | None = None,
    ) -> InboxMessage:
        inbox_message = await self.get_message(message_id)
        if is_read is not None:
            inbox_message.is_read = is_read
        if admin_notes is not None:
            inbox_message.admin_notes = admin_notes or None
        await self._session.flush()
        return inbox_message

    async def delete_message(self, message_id: int) -> None:
        inbox_message = await self.get_message(message_id)
        await self._session.delete(inbox_message)
        await self._session.flush()
