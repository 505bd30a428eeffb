"""Unit tests for the Streamlit-side APIClient.

Validates request construction for the episode, node and inbox endpoints
and the translation of httpx failures into categorized ``APIError``s.
"""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from stoop.ui.api_client import APIClient, APIError


@pytest.fixture
def client():
    """Create an APIClient with a mocked httpx.Client."""
    with patch("stoop.ui.api_client.httpx.Client") as mock_cls:
        mock_http = MagicMock()
        mock_cls.return_value = mock_http
        api = APIClient(base_url="http://test:8000", api_key="k")
        api._mock_http = mock_http  # expose for assertions
        api._mock_cls = mock_cls
        yield api


def _ok(payload):
    resp = MagicMock()
    resp.json.return_value = payload
    return resp


def _status_error(status: int, body: dict):
    request = httpx.Request("GET", "http://test:8000/api/v1/episodes")
    response = httpx.Response(status, request=request, json=body)
    return httpx.HTTPStatusError("boom", request=request, response=response)


class TestConstruction:
    def test_bearer_header(self, client):
        kwargs = client._mock_cls.call_args.kwargs
        assert kwargs["headers"] == {"Authorization": "Bearer k"}
        assert kwargs["base_url"] == "http://test:8000"

    def test_no_key_no_header(self):
        with patch("stoop.ui.api_client.httpx.Client") as mock_cls:
            APIClient(base_url="http://test:8000/")
        assert mock_cls.call_args.kwargs["headers"] == {}
        assert mock_cls.call_args.kwargs["base_url"] == "http://test:8000"


class TestEpisodes:
    def test_create_episode_multipart(self, client):
        client._mock_http.post.return_value = _ok({"episode": {"id": 1}})

        result = client.create_episode(
            title="Ep 1",
            audio=b"wav",
            audio_filename="take.wav",
            audio_content_type="audio/wav",
            summary="About zoning",
            cover=b"png",
            cover_filename="c.png",
            cover_content_type="image/png",
            duration_seconds=42,
        )

        args, kwargs = client._mock_http.post.call_args
        assert args == ("/api/v1/episodes",)
        assert kwargs["data"] == {
            "title": "Ep 1",
            "transcribe": "true",
            "summary": "About zoning",
            "duration_seconds": "42",
        }
        assert kwargs["files"]["audio"] == ("take.wav", b"wav", "audio/wav")
        assert kwargs["files"]["cover"] == ("c.png", b"png", "image/png")
        assert result["episode"]["id"] == 1

    def test_create_episode_without_optional_parts(self, client):
        client._mock_http.post.return_value = _ok({})
        client.create_episode("Ep", b"a", "a.webm", "audio/webm", transcribe=False)
        kwargs = client._mock_http.post.call_args.kwargs
        assert kwargs["data"] == {"title": "Ep", "transcribe": "false"}
        assert set(kwargs["files"]) == {"audio"}

    def test_publish(self, client):
        client._mock_http.post.return_value = _ok({"id": 3, "is_published": True})
        client.publish_episode(3)
        client._mock_http.post.assert_called_once_with("/api/v1/episodes/3/publish")

    def test_transcribe_uses_episode_id_alias(self, client):
        client._mock_http.post.return_value = _ok({"success": True, "nodeCount": 2})
        result = client.transcribe(5, b"wav", "take.wav", "audio/wav")
        kwargs = client._mock_http.post.call_args.kwargs
        assert kwargs["data"] == {"episodeId": "5"}
        assert result["nodeCount"] == 2


class TestNodesAndInbox:
    def test_update_node_sends_single_field(self, client):
        client._mock_http.patch.return_value = _ok({"id": 9, "reference_link": None})
        client.update_node(9, reference_link=None)
        client._mock_http.patch.assert_called_once_with(
            "/api/v1/nodes/9", json={"reference_link": None}
        )

    def test_list_messages_filter(self, client):
        client._mock_http.get.return_value = _ok([])
        client.list_messages(unread_only=True)
        client._mock_http.get.assert_called_once_with(
            "/api/v1/inbox", params={"unread_only": "true"}
        )

    def test_update_message_omits_unset(self, client):
        client._mock_http.patch.return_value = _ok({})
        client.update_message(4, is_read=True)
        assert client._mock_http.patch.call_args.kwargs["json"] == {"is_read": True}


class TestErrors:
    def test_connection_error(self, client):
        client._mock_http.get.side_effect = httpx.ConnectError("refused")
        with pytest.raises(APIError) as exc_info:
            client.list_episodes()
        assert exc_info.value.category == "connection"

    def test_timeout(self, client):
        client._mock_http.post.side_effect = httpx.ReadTimeout("slow")
        with pytest.raises(APIError) as exc_info:
            client.retranscribe_episode(1)
        assert exc_info.value.category == "timeout"

    def test_http_error_uses_error_field(self, client):
        resp = MagicMock()
        resp.raise_for_status.side_effect = _status_error(
            413, {"error": "Audio file too large.", "code": "PAYLOAD_TOO_LARGE"}
        )
        client._mock_http.post.return_value = resp
        with pytest.raises(APIError) as exc_info:
            client.transcribe(1, b"x", "a.wav", "audio/wav")
        assert exc_info.value.message == "Audio file too large."
        assert exc_info.value.status_code == 413
        assert exc_info.value.category == "http"

    def test_unauthorized_is_auth_category(self, client):
        resp = MagicMock()
        resp.raise_for_status.side_effect = _status_error(401, {"detail": "Invalid API key"})
        client._mock_http.get.return_value = resp
        with pytest.raises(APIError) as exc_info:
            client.verify_session()
        assert exc_info.value.category == "auth"

    def test_check_connection_reports_failure(self, client):
        client._mock_http.get.side_effect = httpx.ConnectError("refused")
        ok, message = client.check_connection()
        assert ok is False
        assert "not running" in message
