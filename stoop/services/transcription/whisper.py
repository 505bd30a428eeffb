"""Local Whisper STT implementation using faster-whisper.

Used when ``WHISPER_PROVIDER=local`` for offline transcription. The
WhisperModel is loaded lazily and cached at module level to avoid repeated
initialization overhead.
"""

import asyncio
import io
import logging

from faster_whisper import WhisperModel

from stoop.core.config import Settings, get_settings
from stoop.core.exceptions import TranscriptionError
from stoop.core.models import TranscriptionResult, TranscriptionSegment
from stoop.services.audio.capture import CapturedAudio
from stoop.services.transcription.base import BaseSTT

logger = logging.getLogger(__name__)

_model_cache: WhisperModel | None = None


class WhisperSTT(BaseSTT):
    """Speech-to-text provider using faster-whisper (CTranslate2).

    Args:
        model_size: Whisper model size (tiny, base, small, medium, large-v3).
        device: Computation device ("cpu" or "cuda").
        compute_type: CTranslate2 compute type ("int8", "float16", etc.).
        settings: Optional Settings instance (defaults to get_settings()).
    """

    def __init__(
        self,
        model_size: str | None = None,
        device: str = "cpu",
        compute_type: str = "int8",
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._model_size = model_size or self._settings.whisper_model
        self._device = device
        self._compute_type = compute_type

    def _get_model(self) -> WhisperModel:
        """Return the cached WhisperModel, loading it on first use."""
        global _model_cache  # noqa: PLW0603
        if _model_cache is None:
            logger.info(
                "Loading Whisper model: %s (device=%s, compute=%s)",
                self._model_size,
                self._device,
                self._compute_type,
            )
            _model_cache = WhisperModel(
                self._model_size,
                device=self._device,
                compute_type=self._compute_type,
            )
        return _model_cache

    def _run_transcription(self, data: bytes, language: str | None) -> tuple:
        """Run synchronous transcription (CPU-bound); call via asyncio.to_thread().

        The segment generator is materialized in this thread to avoid
        CTranslate2 cross-thread issues.
        """
        model = self._get_model()
        segments_iter, info = model.transcribe(
            io.BytesIO(data),
            language=language,
            beam_size=5,
            vad_filter=True,
        )
        return list(segments_iter), info

    async def transcribe(self, audio: CapturedAudio, language: str | None = None) -> TranscriptionResult:
        language = language or self._settings.whisper_default_language or None
        try:
            segments, info = await asyncio.to_thread(self._run_transcription, audio.data, language)
        except Exception as exc:
            raise TranscriptionError(detail=f"Whisper transcription failed: {exc}") from exc

        segment_models = [
            TranscriptionSegment(text=seg.text, start=seg.start, end=seg.end)
            for seg in segments
            if seg.text.strip()
        ]
        return TranscriptionResult(
            text=" ".join(seg.text.strip() for seg in segment_models),
            language=info.language or "unknown",
            duration=info.duration,
            segments=segment_models,
        )
