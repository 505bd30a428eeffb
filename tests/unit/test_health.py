"""Tests for health checks, CORS headers and the error envelope.

Exercises the FastAPI app through an async HTTP client backed by the
in-memory test database.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from stoop import __version__
from stoop.api.app import create_app
from stoop.services.context import build_context


@pytest.fixture
def app(settings, database, storage, mock_stt):
    context = build_context(settings, database=database, storage=storage, stt=mock_stt)
    return create_app(context=context)


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


class TestHealth:
    @pytest.mark.parametrize("path", ["/health", "/api/v1/health"])
    async def test_health(self, client, path):
        resp = await client.get(path)
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert body["version"] == __version__
        assert "timestamp" in body


class TestCors:
    async def test_allowed_origin(self, client):
        resp = await client.get("/health", headers={"Origin": "http://localhost:8501"})
        assert resp.headers["access-control-allow-origin"] == "http://localhost:8501"

    async def test_disallowed_origin(self, client):
        resp = await client.get("/health", headers={"Origin": "http://evil.example"})
        assert "access-control-allow-origin" not in resp.headers


class TestErrorEnvelope:
    async def test_wrong_method(self, client):
        resp = await client.get("/api/v1/nodes/1234")
        # GET on a PATCH/DELETE-only route
        assert resp.status_code == 405

    async def test_domain_error_shape(self, client):
        resp = await client.get("/api/v1/episodes/1234")
        assert resp.status_code == 404
        body = resp.json()
        assert set(body) == {"error", "detail", "code", "timestamp"}
        assert body["code"] == "EPISODE_NOT_FOUND"

    async def test_validation_error(self, client):
        resp = await client.get("/api/v1/episodes", params={"limit": 0})
        assert resp.status_code == 422
        assert resp.json()["code"] == "VALIDATION_ERROR"
