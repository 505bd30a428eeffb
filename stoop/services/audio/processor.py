"""Audio processing utilities for PCM data and encoded audio files.

Wraps raw PCM bytes in in-memory WAV objects, resamples browser takes to
16 kHz mono, and measures the duration of uploaded files.
"""

import io
import logging
import wave

import numpy as np
import soundfile as sf
from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError

logger = logging.getLogger(__name__)


class AudioProcessor:
    """Converts between encoded audio and 16-bit PCM.

    Args:
        sample_rate: Audio sample rate in Hz (default: 16 kHz).
        sample_width: Bytes per sample (2 = 16-bit signed PCM).
        channels: Number of audio channels (1 = mono).
    """

    def __init__(
        self,
        sample_rate: int = 16000,
        sample_width: int = 2,
        channels: int = 1,
    ) -> None:
        self.sample_rate = sample_rate
        self.sample_width = sample_width
        self.channels = channels

    def pcm_to_wav_bytes(self, pcm_data: bytes) -> bytes:
        """Wrap raw PCM bytes in a WAV container held in memory.

        Raises:
            ValueError: If pcm_data is empty.
        """
        if not pcm_data:
            raise ValueError("Cannot encode empty PCM data to WAV")
        buffer = io.BytesIO()
        with wave.open(buffer, "wb") as wf:
            wf.setnchannels(self.channels)
            wf.setsampwidth(self.sample_width)
            wf.setframerate(self.sample_rate)
            wf.writeframes(pcm_data)
        return buffer.getvalue()

    def to_pcm(self, audio_bytes: bytes) -> bytes:
        """Decode an audio file and resample it to this processor's PCM format."""
        data, source_rate = sf.read(io.BytesIO(audio_bytes), dtype="float32")

        if data.ndim > 1:
            data = data.mean(axis=1)

        if source_rate != self.sample_rate and len(data):
            num_samples = int(len(data) / source_rate * self.sample_rate)
            indices = np.linspace(0, len(data) - 1, num_samples)
            data = np.interp(indices, np.arange(len(data)), data)

        pcm = (data * 32767).clip(-32768, 32767).astype(np.int16)
        return pcm.tobytes()


def measure_duration(data: bytes, fmt: str | None = None) -> float:
    """Return the duration of an encoded audio file in seconds, 0.0 if unknown.

    ``soundfile`` handles WAV/FLAC/OGG natively; compressed containers such
    as MP3, M4A and WebM fall back to ``pydub`` (ffmpeg).
    """
    try:
        info = sf.info(io.BytesIO(data))
        if info.samplerate:
            return info.frames / info.samplerate
    except (sf.LibsndfileError, RuntimeError, TypeError):
        pass

    try:
        segment = AudioSegment.from_file(io.BytesIO(data), format=fmt)
        return len(segment) / 1000.0
    except (CouldntDecodeError, OSError, IndexError, ValueError):
        logger.info("Could not determine audio duration (format=%s)", fmt)
        return 0.0
