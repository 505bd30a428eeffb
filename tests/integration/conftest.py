"""Integration test fixtures for Stoop Politics.

Provides an async HTTP client for an app wired to the in-memory SQLite
engine, a temporary media bucket and the mocked STT provider.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from stoop.api.app import create_app
from stoop.services.context import build_context


@pytest.fixture
def context(settings, database, storage, mock_stt):
    return build_context(settings, database=database, storage=storage, stt=mock_stt)


@pytest.fixture
def app(context):
    """Create a fresh FastAPI application around the test context."""
    return create_app(context=context)


@pytest.fixture
async def async_client(app):
    """AsyncClient speaking to the app in-process.

    Tables already exist on the shared in-memory engine, so the lifespan
    hook is not needed.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def create_episode(async_client, sample_wav_bytes):
    """Return a coroutine that uploads an episode through the API."""

    async def _create(title: str = "Block Party", transcribe: bool = True, **form) -> dict:
        resp = await async_client.post(
            "/api/v1/episodes",
            data={"title": title, "transcribe": str(transcribe).lower(), **form},
            files={"audio": ("take.wav", sample_wav_bytes, "audio/wav")},
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create
