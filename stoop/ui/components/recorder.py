"""
Recorder component: browser recording and file intake for new episodes.

Recording states: idle -> recording <-> paused -> stopped
The browser owns the microphone prompt; every take captured with
``st.audio_input`` is converted to 16 kHz mono PCM and fed into the
``AudioCapture`` kept in session state, so pausing simply means takes are
not fed until the operator resumes.
"""

import logging

import soundfile as sf
import streamlit as st

from stoop.core.config import get_settings
from stoop.core.exceptions import StoopError
from stoop.core.utils import format_duration
from stoop.services.audio.capture import AudioCapture, BrowserMicrophone, CapturedAudio, CaptureState
from stoop.services.audio.intake import ACCEPTED_EXTENSIONS, validate_audio_file
from stoop.services.audio.processor import AudioProcessor

logger = logging.getLogger(__name__)

_processor = AudioProcessor()


def _get_capture() -> AudioCapture:
    if st.session_state.get("capture") is None:
        st.session_state.capture = AudioCapture(BrowserMicrophone())
    return st.session_state.capture


def release_capture() -> None:
    """Release the microphone; called when leaving the page or after saving."""
    capture = st.session_state.get("capture")
    if capture is not None:
        capture.stop()
        st.session_state.capture = None
    st.session_state.pop("_last_take_id", None)


@st.fragment(run_every=1)
def _render_timer(capture: AudioCapture) -> None:
    """Elapsed-time readout, refreshed every second while recording."""
    st.metric("Elapsed", format_duration(capture.elapsed_seconds))


def _feed_take(capture: AudioCapture, take) -> None:
    """Convert a browser take to PCM and append it to the capture."""
    take_id = getattr(take, "file_id", None) or hash(take.getvalue())
    if st.session_state.get("_last_take_id") == take_id:
        return
    st.session_state._last_take_id = take_id
    try:
        capture.feed(_processor.to_pcm(take.getvalue()))
    except (sf.LibsndfileError, RuntimeError, ValueError) as exc:
        st.error(f"Could not read the recorded audio: {exc}")


def render_recorder() -> CapturedAudio | None:
    """Render the record/pause/resume/stop controls.

    Returns:
        The finished recording once stopped, else None.
    """
    capture = _get_capture()
    state = capture.state

    col_timer, col_state = st.columns([1, 3])
    with col_timer:
        if state is CaptureState.recording:
            _render_timer(capture)
        else:
            st.metric("Elapsed", format_duration(capture.elapsed_seconds))
    with col_state:
        st.caption(f"Status: **{state.value}**")

    try:
        if state is CaptureState.idle:
            if st.button("Start Recording", type="primary", key="rec_start"):
                capture.start()
                st.rerun()

        elif state in (CaptureState.recording, CaptureState.paused):
            if state is CaptureState.recording:
                take = st.audio_input("Speak, then press the stop icon to add the take")
                if take is not None:
                    _feed_take(capture, take)
            else:
                st.info("Paused. Resume to keep recording.")

            col1, col2 = st.columns(2)
            with col1:
                if state is CaptureState.recording:
                    if st.button("Pause", key="rec_pause", use_container_width=True):
                        capture.pause()
                        st.rerun()
                elif st.button("Resume", key="rec_resume", use_container_width=True):
                    capture.resume()
                    st.rerun()
            with col2:
                if st.button("Stop", type="primary", key="rec_stop", use_container_width=True):
                    capture.stop()
                    st.rerun()

        elif state is CaptureState.stopped:
            result = capture.result
            if result is None or not result.data:
                st.warning("Nothing was recorded.")
            else:
                st.audio(result.data, format=result.content_type)
            if st.button("Discard and record again", key="rec_discard"):
                capture.discard()
                st.session_state.pop("_last_take_id", None)
                st.rerun()
            if result is not None and result.data:
                return result

    except StoopError as exc:
        st.error(exc.detail)

    return None


def render_file_intake() -> CapturedAudio | None:
    """Render the upload drop zone (drag-and-drop or file picker).

    Returns:
        The selected file if it passes validation, else None.
    """
    settings = get_settings()
    uploaded = st.file_uploader(
        "Drop an audio file here or browse",
        type=sorted(ext.lstrip(".") for ext in ACCEPTED_EXTENSIONS),
        key="audio_upload",
    )
    if uploaded is None:
        return None

    data = uploaded.getvalue()
    try:
        validate_audio_file(uploaded.name, uploaded.type, len(data), settings.max_upload_bytes)
    except StoopError as exc:
        st.error(exc.detail)
        return None

    st.audio(data, format=uploaded.type or "audio/mpeg")
    st.caption(f"{uploaded.name} ({len(data) / 1024 / 1024:.1f} MB)")
    return CapturedAudio(
        data=data,
        content_type=uploaded.type or "application/octet-stream",
        filename=uploaded.name,
    )
