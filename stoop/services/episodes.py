"""Episode save and delete workflows.

Creating an episode touches object storage and the database, which cannot
share a transaction. The save sequence uploads first and, if the record
cannot be written, deletes the uploaded objects before re-raising.
"""

import logging
from dataclasses import dataclass

from stoop.core.exceptions import PayloadTooLargeError, StoopError, ValidationError
from stoop.core.models import (
    DeleteEpisodeResponse,
    EpisodeCreateResponse,
    EpisodeResponse,
    TranscriptionStatus,
)
from stoop.services.audio.capture import CapturedAudio
from stoop.services.orchestrator import TranscriptionOrchestrator
from stoop.services.storage.database import Database
from stoop.services.storage.media import MediaUploader
from stoop.services.storage.repository import EpisodeRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CoverImage:
    """Optional cover image submitted alongside an episode."""

    data: bytes
    content_type: str | None = None
    filename: str | None = None


class EpisodeService:
    """Creates and deletes episodes across storage and the database."""

    def __init__(
        self,
        database: Database,
        media: MediaUploader,
        orchestrator: TranscriptionOrchestrator,
    ) -> None:
        self._db = database
        self._media = media
        self._orchestrator = orchestrator

    async def create_episode(
        self,
        title: str,
        audio: CapturedAudio,
        summary: str | None = None,
        cover: CoverImage | None = None,
        transcribe: bool = True,
    ) -> EpisodeCreateResponse:
        """Upload media, create the record, then optionally transcribe.

        A transcription failure does not undo the episode: it is recorded on
        the episode and returned in ``transcription_error``.

        Raises:
            ValidationError: Missing title or audio.
            UploadError: The audio could not be stored.
        """
        title = (title or "").strip()
        if not title:
            raise ValidationError("Title is required")
        if not audio.data:
            raise ValidationError("Audio is required")

        stored_audio = await self._media.upload_audio(audio.data, audio.content_type, audio.filename)
        stored_cover = None
        if cover is not None:
            stored_cover = await self._media.upload_cover(cover.data, cover.content_type, cover.filename)

        try:
            async with self._db.session() as session:
                episode = await EpisodeRepository(session).create_episode(
                    title=title,
                    summary=(summary or "").strip() or None,
                    audio_url=stored_audio.url,
                    audio_key=stored_audio.key,
                    cover_image_url=stored_cover.url if stored_cover else None,
                    cover_image_key=stored_cover.key if stored_cover else None,
                    duration_seconds=audio.duration_seconds,
                    audio_size_bytes=audio.size,
                    audio_format=audio.content_type,
                )
                episode_id = episode.id
        except Exception:
            logger.warning("Episode record creation failed; removing uploaded media")
            await self._media.delete(stored_audio.key)
            if stored_cover is not None:
                await self._media.delete(stored_cover.key)
            raise

        logger.info("Created episode %s (%r)", episode_id, title)

        transcription = None
        transcription_error = None
        if transcribe:
            try:
                transcription = await self._orchestrator.transcribe(episode_id, audio)
            except PayloadTooLargeError as exc:
                # Rejected before submission; record it so the status does not stay unset.
                transcription_error = exc.detail
                async with self._db.session() as session:
                    await EpisodeRepository(session).set_transcription_status(
                        episode_id, TranscriptionStatus.failed, error=exc.detail
                    )
            except StoopError as exc:
                transcription_error = exc.detail
            except Exception as exc:
                logger.exception("Unexpected transcription failure for episode %s", episode_id)
                transcription_error = f"Transcription failed: {exc}"

        async with self._db.session() as session:
            episode = await EpisodeRepository(session).get_episode(episode_id)
            response = EpisodeResponse.model_validate(episode)

        return EpisodeCreateResponse(
            episode=response,
            transcription=transcription,
            transcription_error=transcription_error,
        )

    async def delete_episode(self, episode_id: int) -> DeleteEpisodeResponse:
        """Delete the episode and its nodes, then best-effort remove its media."""
        async with self._db.session() as session:
            episode, nodes_deleted = await EpisodeRepository(session).delete_episode(episode_id)
            keys = [episode.audio_key, episode.cover_image_key]

        media_deleted = 0
        for key in keys:
            if await self._media.delete(key):
                media_deleted += 1

        logger.info("Deleted episode %s (%d nodes, %d media objects)", episode_id, nodes_deleted, media_deleted)
        return DeleteEpisodeResponse(
            episode_id=episode_id,
            nodes_deleted=nodes_deleted,
            media_deleted=media_deleted,
        )
