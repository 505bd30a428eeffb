"""Tests for TranscriptionOrchestrator.

Uses the in-memory ``database`` fixture and a mocked STT provider to check
the precondition, the node swap, and the status lifecycle.
"""

import pytest

from stoop.core.exceptions import (
    EpisodeNotFoundError,
    PayloadTooLargeError,
    TranscriptionError,
    ValidationError,
)
from stoop.core.models import TranscriptionSegment, TranscriptionStatus
from stoop.services.audio.capture import CapturedAudio
from stoop.services.orchestrator import TranscriptionOrchestrator
from stoop.services.storage.repository import EpisodeRepository

MB = 1024 * 1024


@pytest.fixture
def orchestrator(database, mock_stt, media):
    return TranscriptionOrchestrator(database, mock_stt, max_bytes=25 * MB, media=media)


async def _make_episode(database, audio_key: str | None = None) -> int:
    async with database.session() as session:
        episode = await EpisodeRepository(session).create_episode(
            title="Episode", audio_url="http://test/a.wav", audio_key=audio_key, audio_format="audio/wav"
        )
        return episode.id


async def _state(database, episode_id: int):
    async with database.session() as session:
        repo = EpisodeRepository(session)
        episode = await repo.get_episode(episode_id)
        nodes = await repo.list_nodes(episode_id)
        return episode, nodes


class TestTranscribe:
    async def test_success_creates_ordered_nodes(
        self, orchestrator, database, captured_audio, mock_stt
    ) -> None:
        episode_id = await _make_episode(database)

        response = await orchestrator.transcribe(episode_id, captured_audio)

        assert response.success is True
        assert response.node_count == 3
        assert response.full_text.startswith("Welcome to the stoop.")
        mock_stt.transcribe.assert_awaited_once_with(captured_audio)

        episode, nodes = await _state(database, episode_id)
        assert episode.transcription_status == TranscriptionStatus.completed
        assert [n.display_order for n in nodes] == [0, 1, 2]
        assert [n.content for n in nodes] == [
            "Welcome to the stoop.",
            "Today we talk zoning.",
            "Thanks for listening.",
        ]
        assert [(n.start_time, n.end_time) for n in nodes] == [(0.0, 3.5), (3.5, 8.0), (8.0, 12.0)]

    async def test_wire_shape(self, orchestrator, database, captured_audio) -> None:
        episode_id = await _make_episode(database)
        response = await orchestrator.transcribe(episode_id, captured_audio)
        body = response.model_dump(by_alias=True)
        assert set(body) == {"success", "nodeCount", "fullText"}

    async def test_rerun_fully_replaces(
        self, orchestrator, database, captured_audio, mock_stt, stt_result
    ) -> None:
        episode_id = await _make_episode(database)
        await orchestrator.transcribe(episode_id, captured_audio)

        mock_stt.transcribe.return_value = stt_result.model_copy(
            update={"segments": [TranscriptionSegment(text="Only one now.", start=0.0, end=2.0)]}
        )
        response = await orchestrator.transcribe(episode_id, captured_audio)

        assert response.node_count == 1
        _, nodes = await _state(database, episode_id)
        assert [n.content for n in nodes] == ["Only one now."]
        assert nodes[0].display_order == 0

    async def test_append_mode(self, orchestrator, database, captured_audio) -> None:
        episode_id = await _make_episode(database)
        await orchestrator.transcribe(episode_id, captured_audio)
        await orchestrator.transcribe(episode_id, captured_audio, replace=False)

        _, nodes = await _state(database, episode_id)
        assert [n.display_order for n in nodes] == list(range(6))

    async def test_empty_transcript_completes(
        self, orchestrator, database, captured_audio, mock_stt, stt_result
    ) -> None:
        mock_stt.transcribe.return_value = stt_result.model_copy(update={"segments": [], "text": ""})
        episode_id = await _make_episode(database)
        response = await orchestrator.transcribe(episode_id, captured_audio)
        assert response.node_count == 0
        episode, _ = await _state(database, episode_id)
        assert episode.transcription_status == TranscriptionStatus.completed


class TestPrecondition:
    async def test_oversize_rejected_before_network(self, orchestrator, database, mock_stt) -> None:
        episode_id = await _make_episode(database)
        big = CapturedAudio(data=b"\x00" * (30 * MB), content_type="audio/wav", filename="big.wav")

        with pytest.raises(PayloadTooLargeError):
            await orchestrator.transcribe(episode_id, big)

        mock_stt.transcribe.assert_not_awaited()
        episode, nodes = await _state(database, episode_id)
        assert nodes == []
        assert episode.transcription_status == TranscriptionStatus.not_started

    async def test_missing_episode(self, orchestrator, captured_audio, mock_stt) -> None:
        with pytest.raises(EpisodeNotFoundError):
            await orchestrator.transcribe(999, captured_audio)
        mock_stt.transcribe.assert_not_awaited()


class TestFailure:
    async def test_failure_sets_failed_and_keeps_previous_nodes(
        self, orchestrator, database, captured_audio, mock_stt
    ) -> None:
        episode_id = await _make_episode(database)
        await orchestrator.transcribe(episode_id, captured_audio)

        mock_stt.transcribe.side_effect = TranscriptionError(
            "OpenAI API quota exceeded. Please check your billing.", "TRANSCRIPTION_QUOTA_EXCEEDED"
        )
        with pytest.raises(TranscriptionError):
            await orchestrator.transcribe(episode_id, captured_audio)

        episode, nodes = await _state(database, episode_id)
        assert episode.transcription_status == TranscriptionStatus.failed
        assert episode.transcription_error == "OpenAI API quota exceeded. Please check your billing."
        assert len(nodes) == 3

    async def test_unexpected_error_also_marks_failed(
        self, orchestrator, database, captured_audio, mock_stt
    ) -> None:
        episode_id = await _make_episode(database)
        mock_stt.transcribe.side_effect = RuntimeError("socket closed")

        with pytest.raises(RuntimeError):
            await orchestrator.transcribe(episode_id, captured_audio)

        episode, _ = await _state(database, episode_id)
        assert episode.transcription_status == TranscriptionStatus.failed
        assert episode.transcription_error == "socket closed"


class TestTranscribeStored:
    async def test_reads_stored_audio(
        self, orchestrator, database, media, sample_wav_bytes, mock_stt
    ) -> None:
        stored = await media.upload_audio(sample_wav_bytes, "audio/wav", "take.wav")
        episode_id = await _make_episode(database, audio_key=stored.key)

        response = await orchestrator.transcribe_stored(episode_id)

        assert response.node_count == 3
        submitted = mock_stt.transcribe.await_args.args[0]
        assert submitted.data == sample_wav_bytes
        assert submitted.content_type == "audio/wav"

    async def test_no_stored_audio(self, orchestrator, database) -> None:
        episode_id = await _make_episode(database)
        with pytest.raises(ValidationError):
            await orchestrator.transcribe_stored(episode_id)
