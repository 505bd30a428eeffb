"""Client-side state for the transcript editor.

``TranscriptEditSession`` holds optimistic local copies of an episode's
nodes. Keystrokes only change local state; ``commit`` persists one field
when its input loses focus. A failed commit restores the last persisted
value and returns the error so the page can show it.
"""

import logging
import time
from collections.abc import Callable
from typing import Protocol

from stoop.ui.api_client import APIError

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("content", "reference_link", "reference_title")
SAVED_INDICATOR_SECONDS = 2.0


class NodeWriter(Protocol):
    def update_node(self, node_id: int, **fields) -> dict: ...


class TranscriptEditSession:
    """Optimistic editing session over one episode's transcript nodes.

    Args:
        client: Anything with ``update_node(node_id, **fields)`` (the APIClient).
        nodes: Nodes as returned by ``GET /episodes/{id}/nodes``.
        clock: Monotonic time source in seconds.
        episode_id: Episode the nodes belong to.
    """

    def __init__(
        self,
        client: NodeWriter,
        nodes: list[dict],
        clock: Callable[[], float] = time.monotonic,
        episode_id: int | None = None,
    ) -> None:
        self.episode_id = episode_id
        self._client = client
        self._clock = clock
        ordered = sorted(nodes, key=lambda n: n["display_order"])
        self._order = [n["id"] for n in ordered]
        self._local = {n["id"]: dict(n) for n in ordered}
        self._persisted = {n["id"]: dict(n) for n in ordered}
        self._saving = False
        self._saved_at: float | None = None
        self.active_node_id: int | None = None
        self.last_error: str | None = None

    @property
    def nodes(self) -> list[dict]:
        """Local node state in display order."""
        return [self._local[node_id] for node_id in self._order]

    def node(self, node_id: int) -> dict:
        return self._local[node_id]

    @property
    def save_status(self) -> str:
        """``saving`` during a round trip, ``saved`` for 2 s after, else ``idle``."""
        if self._saving:
            return "saving"
        if self._saved_at is not None and self._clock() - self._saved_at < SAVED_INDICATOR_SECONDS:
            return "saved"
        return "idle"

    def edit(self, node_id: int, field: str, value: str) -> None:
        """Change local state only; nothing is sent to the server."""
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"Field not editable: {field}")
        self._local[node_id][field] = value

    def is_dirty(self, node_id: int, field: str) -> bool:
        return self._local[node_id].get(field) != self._persisted[node_id].get(field)

    def commit(self, node_id: int, field: str) -> str | None:
        """Persist one field of one node.

        Returns:
            None on success (or when nothing changed), otherwise the error
            message; the field is rolled back to its last persisted value.
        """
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"Field not editable: {field}")
        if not self.is_dirty(node_id, field):
            return None

        value = self._local[node_id][field]
        if field != "content":
            value = (value or "").strip() or None

        self._saving = True
        try:
            saved = self._client.update_node(node_id, **{field: value})
        except APIError as exc:
            logger.warning("Saving %s of node %s failed: %s", field, node_id, exc.message)
            self._local[node_id][field] = self._persisted[node_id].get(field)
            self.last_error = f"Could not save change: {exc.message}"
            return self.last_error
        finally:
            self._saving = False

        persisted_value = saved.get(field, value)
        self._persisted[node_id][field] = persisted_value
        self._local[node_id][field] = persisted_value
        self._saved_at = self._clock()
        self.last_error = None
        return None

    def play(self, node_id: int) -> float:
        """Mark *node_id* as the single active node; return its start offset."""
        self.active_node_id = node_id
        return float(self._local[node_id].get("start_time") or 0.0)

    def stop(self) -> None:
        self.active_node_id = None
