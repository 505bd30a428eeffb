"""
Episodes dashboard - list episodes, publish, re-transcribe, delete.
"""

# Ensure project root is on sys.path (Streamlit page files need this).
import sys as _sys; from pathlib import Path as _Path; _r = str(_Path(__file__).resolve().parents[3]); _r in _sys.path or _sys.path.insert(0, _r)  # noqa: E702,I001

import streamlit as st  # noqa: E402

from stoop.core.utils import format_duration  # noqa: E402
from stoop.ui.api_client import APIError, get_api_client  # noqa: E402

client = get_api_client(st.session_state.api_base_url, st.session_state.api_key)

_STATUS_BADGES = {
    "not_started": ":gray[not transcribed]",
    "processing": ":orange[transcribing]",
    "completed": ":green[transcribed]",
    "failed": ":red[transcription failed]",
}


@st.dialog("Delete episode?")
def _confirm_delete(episode: dict) -> None:
    st.write(
        f"**{episode['title']}** and its transcript will be deleted permanently. "
        "This cannot be undone."
    )
    col1, col2 = st.columns(2)
    with col1:
        if st.button("Delete", type="primary", use_container_width=True):
            try:
                client.delete_episode(episode["id"])
            except APIError as exc:
                st.error(exc.message)
                return
            if st.session_state.editing_episode_id == episode["id"]:
                st.session_state.editing_episode_id = None
                st.session_state.editor_session = None
            st.session_state._episodes_toast = f"Deleted “{episode['title']}”."
            st.rerun()
    with col2:
        if st.button("Cancel", use_container_width=True):
            st.rerun()


@st.dialog("Publish episode?")
def _confirm_publish(episode: dict) -> None:
    st.write(f"**{episode['title']}** will become the episode shown on the public page.")
    if st.button("Publish", type="primary"):
        try:
            client.publish_episode(episode["id"])
        except APIError as exc:
            st.error(exc.message)
            return
        st.session_state._episodes_toast = f"Published “{episode['title']}”."
        st.rerun()


st.header("Episodes")

if "_episodes_toast" in st.session_state:
    st.success(st.session_state.pop("_episodes_toast"))

try:
    episodes = client.list_episodes()
except APIError as exc:
    st.error(f"Could not fetch episodes: {exc.message}")
    episodes = []

if not episodes:
    st.info("No episodes yet. Record one on the New Episode page.")

for episode in episodes:
    with st.container(border=True):
        col_info, col_actions = st.columns([3, 2])
        with col_info:
            st.subheader(episode["title"])
            published = "Published" if episode["is_published"] else "Draft"
            st.markdown(
                f"{published} · {format_duration(episode['duration_seconds'])} · "
                f"{_STATUS_BADGES.get(episode['transcription_status'], episode['transcription_status'])}"
            )
            if episode.get("transcription_error"):
                st.caption(episode["transcription_error"])
            if episode.get("summary"):
                st.write(episode["summary"])
        with col_actions:
            if st.button("Edit transcript", key=f"edit_{episode['id']}", use_container_width=True):
                st.session_state.editing_episode_id = episode["id"]
                st.session_state.editor_session = None
                st.switch_page("pages/03_editor.py")
            if st.button("Re-generate transcript", key=f"wand_{episode['id']}", use_container_width=True):
                with st.spinner("Transcribing..."):
                    try:
                        result = client.retranscribe_episode(episode["id"])
                        st.session_state._episodes_toast = (
                            f"Transcript regenerated: {result['nodeCount']} segments."
                        )
                    except APIError as exc:
                        st.error(f"Transcription failed: {exc.message}")
                    else:
                        if st.session_state.editing_episode_id == episode["id"]:
                            st.session_state.editor_session = None
                        st.rerun()
            if not episode["is_published"]:
                if st.button("Publish", key=f"publish_{episode['id']}", use_container_width=True):
                    _confirm_publish(episode)
            if st.button("Delete", key=f"delete_{episode['id']}", use_container_width=True):
                _confirm_delete(episode)
