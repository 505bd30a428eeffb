"""
Transcript editor page - edit node text and reference links, then publish.

Every field saves when it loses focus; there is no save button.
"""

# Ensure project root is on sys.path (Streamlit page files need this).
import sys as _sys; from pathlib import Path as _Path; _r = str(_Path(__file__).resolve().parents[3]); _r in _sys.path or _sys.path.insert(0, _r)  # noqa: E702,I001

import streamlit as st  # noqa: E402

from stoop.ui.api_client import APIError, get_api_client  # noqa: E402
from stoop.ui.components.transcript_editor import render_transcript_editor  # noqa: E402
from stoop.ui.editor_state import TranscriptEditSession  # noqa: E402

client = get_api_client(st.session_state.api_base_url, st.session_state.api_key)

st.header("Transcript Editor")

episode_id = st.session_state.editing_episode_id
if episode_id is None:
    st.info("Pick an episode on the Episodes page first.")
    st.stop()

try:
    episode = client.get_episode(episode_id)
except APIError as exc:
    st.error(exc.message)
    st.session_state.editing_episode_id = None
    st.stop()

session: TranscriptEditSession | None = st.session_state.editor_session
if session is None or session.episode_id != episode_id:
    try:
        nodes = client.list_nodes(episode_id)
    except APIError as exc:
        st.error(f"Could not load transcript: {exc.message}")
        st.stop()
    session = TranscriptEditSession(client, nodes, episode_id=episode_id)
    st.session_state.editor_session = session

col_title, col_publish = st.columns([4, 1])
with col_title:
    st.subheader(episode["title"])
    st.caption(f"Transcription: {episode['transcription_status']}")
with col_publish:
    if episode["is_published"]:
        st.success("Published")
    elif st.button("Publish", type="primary", use_container_width=True):
        try:
            client.publish_episode(episode_id)
        except APIError as exc:
            st.error(exc.message)
        else:
            st.rerun()

render_transcript_editor(session, episode.get("audio_url"))

if st.button("Add node"):
    try:
        client.create_node(episode_id)
    except APIError as exc:
        st.error(exc.message)
    else:
        st.session_state.editor_session = None
        st.rerun()
