"""
Transcript editor component.

Each node gets a text area and a reference link/title pair. Streamlit fires
``on_change`` when a widget loses focus after an edit, which is where the
field is committed through ``TranscriptEditSession``.
"""

import streamlit as st

from stoop.core.utils import format_timestamp
from stoop.ui.editor_state import TranscriptEditSession


def _widget_key(node_id: int, field: str) -> str:
    return f"node_{node_id}_{field}"


def _on_blur(session: TranscriptEditSession, node_id: int, field: str) -> None:
    session.edit(node_id, field, st.session_state[_widget_key(node_id, field)])
    error = session.commit(node_id, field)
    if error:
        # Put the rolled-back value back into the widget
        st.session_state[_widget_key(node_id, field)] = session.node(node_id).get(field) or ""
        st.session_state.editor_error = error


def render_save_indicator(session: TranscriptEditSession) -> None:
    status = session.save_status
    if status == "saving":
        st.caption("Saving...")
    elif status == "saved":
        st.caption(":green[Saved]")


def render_transcript_editor(session: TranscriptEditSession, audio_url: str | None) -> None:
    """Render all nodes for editing plus a seekable player."""
    error = st.session_state.pop("editor_error", None)
    if error:
        st.error(error)

    if audio_url:
        start = 0.0
        if session.active_node_id is not None:
            start = session.play(session.active_node_id)
        st.audio(audio_url, start_time=int(start))

    render_save_indicator(session)

    if not session.nodes:
        st.info("No transcript yet.")
        return

    for node in session.nodes:
        node_id = node["id"]
        for field in ("content", "reference_link", "reference_title"):
            st.session_state.setdefault(_widget_key(node_id, field), node.get(field) or "")
        active = session.active_node_id == node_id
        with st.container(border=True):
            col_time, col_text = st.columns([1, 8])
            with col_time:
                label = format_timestamp(node.get("start_time"))
                if st.button(
                    f"{'■' if active else '▶'} {label}",
                    key=f"play_{node_id}",
                ):
                    if active:
                        session.stop()
                    else:
                        session.play(node_id)
                    st.rerun()
            with col_text:
                st.text_area(
                    "Content",
                    key=_widget_key(node_id, "content"),
                    label_visibility="collapsed",
                    on_change=_on_blur,
                    args=(session, node_id, "content"),
                )
                col_link, col_title = st.columns(2)
                with col_link:
                    st.text_input(
                        "Reference link",
                        key=_widget_key(node_id, "reference_link"),
                        placeholder="https://...",
                        on_change=_on_blur,
                        args=(session, node_id, "reference_link"),
                    )
                with col_title:
                    st.text_input(
                        "Link title",
                        key=_widget_key(node_id, "reference_title"),
                        placeholder="View Source",
                        on_change=_on_blur,
                        args=(session, node_id, "reference_title"),
                    )
