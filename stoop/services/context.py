"""Application context: the service graph built once per process.

``build_context(settings)`` wires the database, object storage, STT provider
and the services that depend on them. The FastAPI app keeps the result on
``app.state.context``; tests build their own context around fakes.
"""

import logging
from dataclasses import dataclass

from stoop.core.config import Settings
from stoop.services.audio.intake import AudioIntake
from stoop.services.episodes import EpisodeService
from stoop.services.orchestrator import TranscriptionOrchestrator
from stoop.services.storage.database import Database
from stoop.services.storage.media import LocalObjectStorage, MediaUploader, ObjectStorage
from stoop.services.transcription import create_stt
from stoop.services.transcription.base import BaseSTT

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    database: Database
    storage: ObjectStorage
    media: MediaUploader
    stt: BaseSTT
    intake: AudioIntake
    orchestrator: TranscriptionOrchestrator
    episodes: EpisodeService

    async def close(self) -> None:
        await self.stt.close()
        await self.database.close()


def build_context(
    settings: Settings,
    database: Database | None = None,
    storage: ObjectStorage | None = None,
    stt: BaseSTT | None = None,
) -> AppContext:
    """Build the service graph; any component may be supplied pre-built."""
    database = database or Database(settings.database_url)
    storage = storage or LocalObjectStorage(settings.media_dir, settings.public_base_url)
    stt = stt or create_stt(settings.whisper_provider, settings=settings)
    media = MediaUploader(storage)
    orchestrator = TranscriptionOrchestrator(
        database, stt, max_bytes=settings.transcription_max_bytes, media=media
    )
    logger.debug("Application context built (stt=%s)", type(stt).__name__)
    return AppContext(
        settings=settings,
        database=database,
        storage=storage,
        media=media,
        stt=stt,
        intake=AudioIntake(settings.max_upload_bytes),
        orchestrator=orchestrator,
        episodes=EpisodeService(database, media, orchestrator),
    )
