"""Tests for EpisodeService create/delete workflows."""

from unittest.mock import AsyncMock, patch

import pytest

from stoop.core.config import MB
from stoop.core.exceptions import TranscriptionError, UploadError, ValidationError
from stoop.core.models import TranscriptionStatus
from stoop.services.audio.capture import CapturedAudio
from stoop.services.episodes import CoverImage, EpisodeService
from stoop.services.orchestrator import TranscriptionOrchestrator
from stoop.services.storage.repository import EpisodeRepository


@pytest.fixture
def orchestrator(database, mock_stt, media):
    return TranscriptionOrchestrator(database, mock_stt, max_bytes=25 * MB, media=media)


@pytest.fixture
def service(database, media, orchestrator):
    return EpisodeService(database, media, orchestrator)


def _stored_files(storage):
    return sorted(p.relative_to(storage.root).as_posix() for p in storage.root.rglob("*") if p.is_file())


class TestCreateEpisode:
    async def test_create_and_transcribe(self, service, captured_audio, storage):
        cover = CoverImage(data=b"\x89PNG", content_type="image/png", filename="art.png")

        result = await service.create_episode(
            "  Block Party  ", captured_audio, summary="Zoning talk", cover=cover
        )

        episode = result.episode
        assert episode.title == "Block Party"
        assert episode.summary == "Zoning talk"
        assert episode.audio_url.startswith("http://test/media/audio/")
        assert episode.cover_image_url.startswith("http://test/media/covers/")
        assert episode.duration_seconds == 1
        assert episode.audio_size_bytes == captured_audio.size
        assert episode.is_published is False
        assert episode.transcription_status == TranscriptionStatus.completed
        assert result.transcription.node_count == 3
        assert result.transcription_error is None
        assert len(_stored_files(storage)) == 2

    async def test_skip_transcription(self, service, captured_audio, mock_stt):
        result = await service.create_episode("Quiet", captured_audio, transcribe=False)
        assert result.episode.transcription_status == TranscriptionStatus.not_started
        assert result.transcription is None
        mock_stt.transcribe.assert_not_awaited()

    @pytest.mark.parametrize("title", ["", "   "])
    async def test_title_required(self, service, captured_audio, title):
        with pytest.raises(ValidationError):
            await service.create_episode(title, captured_audio)

    async def test_audio_required(self, service):
        with pytest.raises(ValidationError):
            await service.create_episode("No audio", CapturedAudio(data=b""))

    async def test_upload_failure_creates_nothing(self, database, orchestrator, captured_audio):
        media = AsyncMock()
        media.upload_audio.side_effect = UploadError("Upload failed: bucket offline")
        service = EpisodeService(database, media, orchestrator)

        with pytest.raises(UploadError):
            await service.create_episode("Ep", captured_audio)

        async with database.session() as session:
            assert await EpisodeRepository(session).list_episodes() == []

    async def test_record_failure_removes_uploads(self, service, captured_audio, storage):
        with patch.object(EpisodeRepository, "create_episode", side_effect=RuntimeError("db down")):
            with pytest.raises(RuntimeError):
                await service.create_episode(
                    "Ep", captured_audio, cover=CoverImage(data=b"img", filename="c.jpg")
                )
        assert _stored_files(storage) == []

    async def test_transcription_failure_keeps_episode(self, service, captured_audio, mock_stt):
        mock_stt.transcribe.side_effect = TranscriptionError(
            "Invalid OpenAI API key. Please check your configuration.",
            "TRANSCRIPTION_INVALID_CREDENTIAL",
        )

        result = await service.create_episode("Ep", captured_audio)

        assert result.episode.id is not None
        assert result.episode.transcription_status == TranscriptionStatus.failed
        assert result.transcription_error == "Invalid OpenAI API key. Please check your configuration."

    async def test_oversize_for_transcription_marks_failed(self, database, media, mock_stt, captured_audio):
        orchestrator = TranscriptionOrchestrator(database, mock_stt, max_bytes=10, media=media)
        service = EpisodeService(database, media, orchestrator)

        result = await service.create_episode("Long", captured_audio)

        assert result.episode.transcription_status == TranscriptionStatus.failed
        assert "too large" in result.transcription_error
        mock_stt.transcribe.assert_not_awaited()


class TestDeleteEpisode:
    async def test_delete_removes_nodes_and_media(self, service, captured_audio, storage, database):
        created = await service.create_episode(
            "Ep", captured_audio, cover=CoverImage(data=b"img", content_type="image/jpeg")
        )
        episode_id = created.episode.id

        result = await service.delete_episode(episode_id)

        assert result.nodes_deleted == 3
        assert result.media_deleted == 2
        assert _stored_files(storage) == []
        async with database.session() as session:
            assert await EpisodeRepository(session).list_nodes(episode_id) == []
