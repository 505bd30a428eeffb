"""
New episode page - record or upload audio, add details, save.

Saving uploads the media, creates the episode and transcribes it before
the backend responds; a transcription failure still keeps the episode.
"""

# Ensure project root is on sys.path (Streamlit page files need this).
import sys as _sys; from pathlib import Path as _Path; _r = str(_Path(__file__).resolve().parents[3]); _r in _sys.path or _sys.path.insert(0, _r)  # noqa: E702,I001

import streamlit as st  # noqa: E402

from stoop.ui.api_client import APIError, get_api_client  # noqa: E402
from stoop.ui.components.recorder import (  # noqa: E402
    release_capture,
    render_file_intake,
    render_recorder,
)

client = get_api_client(st.session_state.api_base_url, st.session_state.api_key)

st.header("New Episode")

if "_episode_saved" in st.session_state:
    st.success(st.session_state.pop("_episode_saved"))
if "_transcription_warning" in st.session_state:
    st.warning(st.session_state.pop("_transcription_warning"))

tab_record, tab_upload = st.tabs(["Record", "Upload file"])
with tab_record:
    recorded = render_recorder()
with tab_upload:
    uploaded = render_file_intake()

audio = recorded or uploaded

st.divider()
title = st.text_input("Title", max_chars=255)
summary = st.text_area("Summary (optional)")
cover = st.file_uploader("Cover image (optional)", type=["jpg", "jpeg", "png", "webp", "gif"])
transcribe = st.checkbox("Transcribe after saving", value=True)

can_save = bool(title.strip()) and audio is not None
if st.button("Save Episode", type="primary", disabled=not can_save):
    with st.spinner("Uploading and transcribing..."):
        try:
            result = client.create_episode(
                title=title.strip(),
                summary=summary.strip() or None,
                audio=audio.data,
                audio_filename=audio.filename,
                audio_content_type=audio.content_type,
                duration_seconds=audio.duration_seconds or None,
                cover=cover.getvalue() if cover else None,
                cover_filename=cover.name if cover else None,
                cover_content_type=cover.type if cover else None,
                transcribe=transcribe,
            )
        except APIError as exc:
            st.error(f"Could not save episode: {exc.message}")
        else:
            episode = result["episode"]
            release_capture()
            st.session_state.editing_episode_id = episode["id"]
            st.session_state._episode_saved = f"Saved “{episode['title']}”."
            if result.get("transcription_error"):
                st.session_state._transcription_warning = (
                    f"Episode saved, but transcription failed: {result['transcription_error']}"
                )
            elif result.get("transcription"):
                st.session_state._episode_saved += (
                    f" {result['transcription']['nodeCount']} transcript segments created."
                )
            st.rerun()

if not can_save:
    st.caption("A title and a recording or audio file are required.")
