"""Transcription orchestrator.

Runs one speech-to-text pass for an episode and persists the segments as
transcript nodes. Every path that transcribes (episode creation and the
dashboard's re-generate action) goes through :meth:`transcribe`, so the
episode's ``transcription_status`` always ends at ``completed`` or ``failed``.

Existing nodes are only removed in the same transaction that inserts the
new batch; a failed run leaves the previous transcript untouched.

Usage::

    orchestrator = TranscriptionOrchestrator(database, stt, max_bytes=25 * MB)
    response = await orchestrator.transcribe(episode_id, captured_audio)
"""

import logging
from pathlib import PurePosixPath

from stoop.core.exceptions import PayloadTooLargeError, StoopError, ValidationError
from stoop.core.models import TranscribeResponse, TranscriptionStatus
from stoop.services.audio.capture import CapturedAudio
from stoop.services.storage.database import Database
from stoop.services.storage.media import MediaUploader
from stoop.services.storage.repository import EpisodeRepository
from stoop.services.transcription.base import BaseSTT

logger = logging.getLogger(__name__)


class TranscriptionOrchestrator:
    """Coordinates STT submission, node persistence and status tracking.

    Args:
        database: Database the episode and its nodes live in.
        stt: Speech-to-text provider.
        max_bytes: Largest payload the provider accepts.
        media: Upload client, needed to re-read stored audio.
    """

    def __init__(
        self,
        database: Database,
        stt: BaseSTT,
        max_bytes: int,
        media: MediaUploader | None = None,
    ) -> None:
        self._db = database
        self._stt = stt
        self._max_bytes = max_bytes
        self._media = media

    def check_size(self, audio: CapturedAudio) -> None:
        """Raise :class:`PayloadTooLargeError` if *audio* exceeds the provider limit."""
        if audio.size > self._max_bytes:
            raise PayloadTooLargeError(audio.size, self._max_bytes)

    async def transcribe(
        self,
        episode_id: int,
        audio: CapturedAudio,
        replace: bool = True,
    ) -> TranscribeResponse:
        """Transcribe *audio* and store its segments as the episode's nodes.

        Args:
            episode_id: Episode to attach the nodes to.
            audio: Encoded audio to submit.
            replace: Replace existing nodes (default) or append after them.

        Raises:
            PayloadTooLargeError: Before any network call; nothing changes.
            EpisodeNotFoundError: The episode does not exist.
            TranscriptionError: The provider failed (status set to failed).
        """
        self.check_size(audio)

        async with self._db.session() as session:
            await EpisodeRepository(session).set_transcription_status(
                episode_id, TranscriptionStatus.processing
            )

        try:
            result = await self._stt.transcribe(audio)
            async with self._db.session() as session:
                repo = EpisodeRepository(session)
                nodes = await repo.replace_nodes(episode_id, result.segments, replace=replace)
                await repo.set_transcription_status(episode_id, TranscriptionStatus.completed)
        except Exception as exc:
            await self._mark_failed(episode_id, exc)
            raise

        logger.info("Episode %s transcribed: %d nodes", episode_id, len(nodes))
        return TranscribeResponse(node_count=len(nodes), full_text=result.text)

    async def transcribe_stored(self, episode_id: int, replace: bool = True) -> TranscribeResponse:
        """Re-run transcription from the episode's stored audio object."""
        if self._media is None:
            raise RuntimeError("TranscriptionOrchestrator needs a MediaUploader to read stored audio")

        async with self._db.session() as session:
            episode = await EpisodeRepository(session).get_episode(episode_id)
            audio_key, audio_format = episode.audio_key, episode.audio_format

        if not audio_key:
            raise ValidationError(f"Episode {episode_id} has no stored audio to transcribe")

        data = await self._media.fetch(audio_key)
        audio = CapturedAudio(
            data=data,
            content_type=audio_format or "application/octet-stream",
            filename=PurePosixPath(audio_key).name,
        )
        return await self.transcribe(episode_id, audio, replace=replace)

    async def _mark_failed(self, episode_id: int, exc: Exception) -> None:
        message = exc.detail if isinstance(exc, StoopError) else str(exc) or type(exc).__name__
        logger.warning("Transcription failed for episode %s: %s", episode_id, message)
        try:
            async with self._db.session() as session:
                await EpisodeRepository(session).set_transcription_status(
                    episode_id, TranscriptionStatus.failed, error=message
                )
        except Exception:
            logger.exception("Could not record failed status for episode %s", episode_id)
