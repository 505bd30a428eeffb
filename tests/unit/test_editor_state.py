"""Tests for TranscriptEditSession: optimistic edits, blur commits, rollback."""

from unittest.mock import MagicMock

import pytest

from stoop.ui.api_client import APIError
from stoop.ui.editor_state import TranscriptEditSession


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _node(node_id, order, content, start=None):
    return {
        "id": node_id,
        "episode_id": 1,
        "content": content,
        "display_order": order,
        "start_time": start,
        "end_time": None,
        "reference_link": None,
        "reference_title": None,
    }


@pytest.fixture
def client():
    api = MagicMock()
    api.update_node.side_effect = lambda node_id, **fields: {"id": node_id, **fields}
    return api


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session(client, clock):
    nodes = [_node(2, 1, "Second", 4.0), _node(1, 0, "First", 0.0)]
    return TranscriptEditSession(client, nodes, clock=clock, episode_id=1)


class TestEditing:
    def test_nodes_in_display_order(self, session):
        assert [n["content"] for n in session.nodes] == ["First", "Second"]

    def test_edit_is_local_only(self, session, client):
        session.edit(1, "content", "First, revised")
        assert session.node(1)["content"] == "First, revised"
        assert session.is_dirty(1, "content")
        client.update_node.assert_not_called()

    def test_rejects_unknown_field(self, session):
        with pytest.raises(ValueError):
            session.edit(1, "display_order", 5)


class TestCommit:
    def test_commit_sends_only_changed_field(self, session, client):
        session.edit(1, "content", "First, revised")
        assert session.commit(1, "content") is None
        client.update_node.assert_called_once_with(1, content="First, revised")
        assert not session.is_dirty(1, "content")

    def test_commit_without_change_is_noop(self, session, client):
        assert session.commit(1, "content") is None
        client.update_node.assert_not_called()

    def test_blank_link_clears(self, session, client):
        session.edit(1, "reference_link", "https://example.org")
        session.commit(1, "reference_link")
        session.edit(1, "reference_link", "   ")
        session.commit(1, "reference_link")
        assert client.update_node.call_args.kwargs == {"reference_link": None}
        assert session.node(1)["reference_link"] is None

    def test_failure_rolls_back(self, session, client):
        client.update_node.side_effect = APIError("Database error: locked", category="http", status_code=500)
        session.edit(2, "content", "Lost edit")

        error = session.commit(2, "content")

        assert error == "Could not save change: Database error: locked"
        assert session.node(2)["content"] == "Second"
        assert session.last_error == error
        assert session.save_status == "idle"


class TestSaveIndicator:
    def test_saved_for_two_seconds(self, session, clock):
        session.edit(1, "content", "Edited")
        session.commit(1, "content")
        assert session.save_status == "saved"
        clock.now += 1.9
        assert session.save_status == "saved"
        clock.now += 0.2
        assert session.save_status == "idle"

    def test_saving_during_round_trip(self, session, client):
        seen = []

        def record(node_id, **fields):
            seen.append(session.save_status)
            return {"id": node_id, **fields}

        client.update_node.side_effect = record
        session.edit(1, "content", "Edited")
        session.commit(1, "content")
        assert seen == ["saving"]


class TestPlayback:
    def test_single_active_node(self, session):
        assert session.play(2) == 4.0
        assert session.play(1) == 0.0
        assert session.active_node_id == 1
        session.stop()
        assert session.active_node_id is None

    def test_missing_start_time_plays_from_zero(self, client):
        session = TranscriptEditSession(client, [_node(7, 0, "Manual")])
        assert session.play(7) == 0.0
