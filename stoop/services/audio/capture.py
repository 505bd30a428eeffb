"""In-browser recording adapter.

``AudioCapture`` is the recording state machine used by the admin UI:

    idle -> recording <-> paused -> stopped -> idle (discard)

PCM is accumulated only while recording; ``stop()`` finalizes it into one
in-memory WAV object. The microphone is an injected ``CaptureDevice`` so the
state machine runs the same way against the browser input and in tests.
"""

import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from stoop.core.exceptions import InvalidStateError, PermissionDeniedError
from stoop.services.audio.processor import AudioProcessor

logger = logging.getLogger(__name__)


class CaptureState(StrEnum):
    idle = "idle"
    recording = "recording"
    paused = "paused"
    stopped = "stopped"


class CaptureDevice(Protocol):
    """A microphone handle. ``acquire`` may raise ``PermissionError``."""

    def acquire(self) -> None: ...

    def release(self) -> None: ...


@dataclass(frozen=True)
class CapturedAudio:
    """A finished recording ready for upload."""

    data: bytes
    content_type: str = "audio/wav"
    filename: str = "recording.wav"
    duration_seconds: int = 0

    @property
    def size(self) -> int:
        return len(self.data)


class BrowserMicrophone:
    """Capture device backed by the browser's microphone.

    The browser shows the permission prompt itself; the UI reports the
    outcome through ``allowed`` before the adapter acquires the device.
    """

    def __init__(self, allowed: bool = True) -> None:
        self.allowed = allowed
        self.active = False

    def acquire(self) -> None:
        if not self.allowed:
            raise PermissionError("Microphone access was denied by the browser")
        self.active = True

    def release(self) -> None:
        self.active = False


class AudioCapture:
    """Recording state machine with pause/resume and an elapsed-time counter.

    Args:
        device: Microphone to acquire on ``start`` and release on ``stop``.
        sample_rate: Sample rate of the PCM passed to :meth:`feed`.
        clock: Monotonic time source in seconds.
    """

    def __init__(
        self,
        device: CaptureDevice,
        sample_rate: int = 16000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._device = device
        self._processor = AudioProcessor(sample_rate=sample_rate)
        self._clock = clock
        self._state = CaptureState.idle
        self._pcm = bytearray()
        self._accumulated = 0.0
        self._segment_started: float | None = None
        self._result: CapturedAudio | None = None

    @property
    def state(self) -> CaptureState:
        return self._state

    @property
    def result(self) -> CapturedAudio | None:
        """The finalized recording, available once stopped."""
        return self._result

    @property
    def elapsed_seconds(self) -> int:
        """Whole seconds spent in the recording state (paused time excluded)."""
        total = self._accumulated
        if self._segment_started is not None:
            total += self._clock() - self._segment_started
        return math.floor(total)

    def _require(self, action: str, *allowed: CaptureState) -> None:
        if self._state not in allowed:
            raise InvalidStateError(action, self._state.value)

    def _close_segment(self) -> None:
        if self._segment_started is not None:
            self._accumulated += self._clock() - self._segment_started
            self._segment_started = None

    def start(self) -> None:
        self._require("start", CaptureState.idle)
        try:
            self._device.acquire()
        except PermissionError as exc:
            raise PermissionDeniedError() from exc
        self._pcm.clear()
        self._accumulated = 0.0
        self._result = None
        self._segment_started = self._clock()
        self._state = CaptureState.recording
        logger.debug("Capture started")

    def pause(self) -> None:
        self._require("pause", CaptureState.recording)
        self._close_segment()
        self._state = CaptureState.paused

    def resume(self) -> None:
        self._require("resume", CaptureState.paused)
        self._segment_started = self._clock()
        self._state = CaptureState.recording

    def feed(self, pcm: bytes) -> None:
        """Append PCM captured by the device; ignored unless recording."""
        if self._state is CaptureState.recording:
            self._pcm.extend(pcm)

    def stop(self) -> CapturedAudio | None:
        """Finalize the take and release the device.

        The device is released from every state, so calling ``stop`` on an
        idle or already stopped capture is a safe cleanup call.
        """
        try:
            if self._state in (CaptureState.recording, CaptureState.paused):
                self._close_segment()
                data = self._processor.pcm_to_wav_bytes(bytes(self._pcm)) if self._pcm else b""
                self._result = CapturedAudio(data=data, duration_seconds=self.elapsed_seconds)
                self._state = CaptureState.stopped
                logger.info(
                    "Capture stopped: %ds, %d bytes", self._result.duration_seconds, len(data)
                )
            return self._result
        finally:
            self._device.release()

    def discard(self) -> None:
        """Drop the finished take and return to idle."""
        self._require("discard", CaptureState.stopped)
        self._pcm.clear()
        self._result = None
        self._accumulated = 0.0
        self._state = CaptureState.idle

    def __enter__(self) -> "AudioCapture":
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()
