"""
Synchronous HTTP client for the Stoop Politics backend API.

Uses ``httpx.Client`` (sync) because Streamlit scripts run synchronously.
"""

import logging

import httpx
import streamlit as st

logger = logging.getLogger(__name__)


class APIError(Exception):
    """User-friendly API error with categorized message.

    Categories: "auth", "connection", "timeout", "http", "network", "unknown".
    Used by the UI to display appropriate error messages.
    """

    def __init__(self, message: str, category: str = "unknown", status_code: int | None = None) -> None:
        self.message = message
        self.category = category
        self.status_code = status_code
        super().__init__(message)


class APIClient:
    """Thin synchronous wrapper around httpx for calling the FastAPI backend.

    All methods return parsed JSON or raise ``APIError`` with messages that
    can be shown directly with ``st.error``.

    Args:
        base_url: Base URL of the backend.
        api_key: Admin key sent as ``Authorization: Bearer <key>``.
    """

    def __init__(self, base_url: str = "http://localhost:8000", api_key: str = "") -> None:
        self._base_url = base_url.rstrip("/")
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        self._client = httpx.Client(base_url=self._base_url, timeout=30.0, headers=headers)

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Execute an HTTP request with user-friendly error handling.

        Raises:
            APIError: On connection, timeout, HTTP status, or network errors.
        """
        try:
            resp = getattr(self._client, method)(path, **kwargs)
            resp.raise_for_status()
            return resp
        except httpx.ConnectError:
            raise APIError(
                "Backend server is not running. "
                "Start it with: `uvicorn stoop.api.app:create_app --factory --port 8000`",
                category="connection",
            ) from None
        except httpx.TimeoutException:
            raise APIError(
                "Request timed out. The server may be overloaded.",
                category="timeout",
            ) from None
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            try:
                body = exc.response.json()
                detail = body.get("error") or body.get("detail") or exc.response.text
            except ValueError:
                detail = exc.response.text or str(exc)
            category = "auth" if status == 401 else "http"
            raise APIError(str(detail), category=category, status_code=status) from None
        except httpx.HTTPError as exc:
            raise APIError(f"Network error: {exc}", category="network") from None

    # -- health / auth --

    def health_check(self) -> dict:
        return self._request("get", "/health").json()

    def check_connection(self) -> tuple[bool, str]:
        """Check if the backend is reachable. Returns (ok, message)."""
        try:
            self.health_check()
            return True, "Connected"
        except APIError as exc:
            return False, exc.message

    def verify_session(self) -> dict:
        """Confirm the configured admin key is accepted."""
        return self._request("get", "/api/v1/auth/session").json()

    # -- episodes --

    def create_episode(
        self,
        title: str,
        audio: bytes,
        audio_filename: str,
        audio_content_type: str,
        summary: str | None = None,
        cover: bytes | None = None,
        cover_filename: str | None = None,
        cover_content_type: str | None = None,
        duration_seconds: int | None = None,
        transcribe: bool = True,
    ) -> dict:
        """Upload a new episode; transcription runs before the response returns."""
        data: dict = {"title": title, "transcribe": str(transcribe).lower()}
        if summary:
            data["summary"] = summary
        if duration_seconds is not None:
            data["duration_seconds"] = str(duration_seconds)
        files: dict = {"audio": (audio_filename, audio, audio_content_type)}
        if cover:
            files["cover"] = (cover_filename or "cover.jpg", cover, cover_content_type or "image/jpeg")
        return self._request("post", "/api/v1/episodes", data=data, files=files, timeout=180.0).json()

    def list_episodes(self, limit: int = 50, offset: int = 0) -> list[dict]:
        return self._request("get", "/api/v1/episodes", params={"limit": limit, "offset": offset}).json()

    def get_episode(self, episode_id: int) -> dict:
        return self._request("get", f"/api/v1/episodes/{episode_id}").json()

    def update_episode(self, episode_id: int, **fields) -> dict:
        return self._request("patch", f"/api/v1/episodes/{episode_id}", json=fields).json()

    def publish_episode(self, episode_id: int) -> dict:
        return self._request("post", f"/api/v1/episodes/{episode_id}/publish").json()

    def delete_episode(self, episode_id: int) -> dict:
        return self._request("delete", f"/api/v1/episodes/{episode_id}").json()

    def retranscribe_episode(self, episode_id: int) -> dict:
        """Re-generate the transcript from the stored audio (replaces nodes)."""
        return self._request(
            "post", f"/api/v1/episodes/{episode_id}/transcribe", timeout=180.0
        ).json()

    def transcribe(self, episode_id: int, audio: bytes, filename: str, content_type: str) -> dict:
        """Submit audio to ``/api/v1/transcribe`` for an existing episode."""
        return self._request(
            "post",
            "/api/v1/transcribe",
            data={"episodeId": str(episode_id)},
            files={"audio": (filename, audio, content_type)},
            timeout=180.0,
        ).json()

    # -- transcript nodes --

    def list_nodes(self, episode_id: int) -> list[dict]:
        return self._request("get", f"/api/v1/episodes/{episode_id}/nodes").json()

    def create_node(self, episode_id: int, content: str = "Transcript pending...") -> dict:
        return self._request(
            "post", f"/api/v1/episodes/{episode_id}/nodes", json={"content": content}
        ).json()

    def update_node(self, node_id: int, **fields) -> dict:
        return self._request("patch", f"/api/v1/nodes/{node_id}", json=fields).json()

    def delete_node(self, node_id: int) -> None:
        self._request("delete", f"/api/v1/nodes/{node_id}")

    # -- inbox --

    def list_messages(self, unread_only: bool = False) -> list[dict]:
        return self._request(
            "get", "/api/v1/inbox", params={"unread_only": str(unread_only).lower()}
        ).json()

    def update_message(
        self, message_id: int, is_read: bool | None = None, admin_notes: str | None = None
    ) -> dict:
        body: dict = {}
        if is_read is not None:
            body["is_read"] = is_read
        if admin_notes is not None:
            body["admin_notes"] = admin_notes
        return self._request("patch", f"/api/v1/inbox/{message_id}", json=body).json()

    def delete_message(self, message_id: int) -> None:
        self._request("delete", f"/api/v1/inbox/{message_id}")


@st.cache_resource
def get_api_client(base_url: str = "http://localhost:8000", api_key: str = "") -> APIClient:
    """Return a cached APIClient, keyed by base_url and key.

    Uses Streamlit's ``cache_resource`` to persist the client across reruns;
    changing the URL or key creates a new client.
    """
    return APIClient(base_url=base_url, api_key=api_key)
