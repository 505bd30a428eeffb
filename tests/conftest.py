"""Shared pytest fixtures for the Stoop Politics test suite.

Provides mock STT providers, generated audio, an in-memory SQLite database
and a temporary media bucket used across unit and integration tests.
"""

import io
import math
import struct
import wave
from unittest.mock import AsyncMock

import pytest

from stoop.core.config import Settings
from stoop.core.models import TranscriptionResult, TranscriptionSegment

# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from any local .env, with a temporary media dir."""
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite:///:memory:",
        media_dir=str(tmp_path / "media"),
        public_base_url="http://test",
        openai_api_key="sk-test",
        admin_api_key="",
    )


# ---------------------------------------------------------------------------
# STT Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def stt_result():
    """A three-segment transcription in temporal order."""
    return TranscriptionResult(
        text="Welcome to the stoop. Today we talk zoning. Thanks for listening.",
        language="en",
        duration=12.0,
        segments=[
            TranscriptionSegment(text=" Welcome to the stoop. ", start=0.0, end=3.5),
            TranscriptionSegment(text="Today we talk zoning.", start=3.5, end=8.0),
            TranscriptionSegment(text=" Thanks for listening.", start=8.0, end=12.0),
        ],
    )


@pytest.fixture
def mock_stt(stt_result):
    """Create a mock STT provider returning ``stt_result``."""
    from stoop.services.transcription.base import BaseSTT

    stt = AsyncMock(spec=BaseSTT)
    stt.transcribe.return_value = stt_result
    return stt


# ---------------------------------------------------------------------------
# Audio Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_pcm_bytes():
    """Generate 1 second of 440Hz sine-wave PCM audio (16kHz, 16-bit, mono)."""
    sample_rate = 16000
    amplitude = 16000  # ~50% of max int16
    return b"".join(
        struct.pack("<h", int(amplitude * math.sin(2 * math.pi * 440.0 * i / sample_rate)))
        for i in range(sample_rate)
    )


@pytest.fixture
def sample_wav_bytes(sample_pcm_bytes):
    """The sample PCM wrapped in an in-memory WAV container."""
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(16000)
        wf.writeframes(sample_pcm_bytes)
    return buffer.getvalue()


@pytest.fixture
def captured_audio(sample_wav_bytes):
    from stoop.services.audio.capture import CapturedAudio

    return CapturedAudio(
        data=sample_wav_bytes,
        content_type="audio/wav",
        filename="take.wav",
        duration_seconds=1,
    )


# ---------------------------------------------------------------------------
# Database Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine with tables, dispose after test."""
    from sqlalchemy import event
    from sqlalchemy.ext.asyncio import create_async_engine
    from sqlalchemy.pool import StaticPool

    from stoop.services.storage.database import Base, _enable_sqlite_foreign_keys

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool
    )
    event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def database(db_engine):
    """A ``Database`` wrapping the in-memory test engine."""
    from stoop.services.storage.database import Database

    return Database(engine=db_engine)


@pytest.fixture
async def db_session(db_engine):
    """Yield an AsyncSession bound to the test engine; rolls back after test."""
    from sqlalchemy.ext.asyncio import async_sessionmaker

    factory = async_sessionmaker(db_engine, expire_on_commit=False)
    async with factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def repository(db_session):
    """Return an EpisodeRepository bound to the test session."""
    from stoop.services.storage.repository import EpisodeRepository

    return EpisodeRepository(db_session)


@pytest.fixture
def inbox_repository(db_session):
    from stoop.services.storage.repository import InboxRepository

    return InboxRepository(db_session)


# ---------------------------------------------------------------------------
# Media Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def storage(tmp_path):
    from stoop.services.storage.media import LocalObjectStorage

    return LocalObjectStorage(tmp_path / "media", "http://test")


@pytest.fixture
def media(storage):
    from stoop.services.storage.media import MediaUploader

    return MediaUploader(storage)
