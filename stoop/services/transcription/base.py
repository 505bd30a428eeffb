"""
Abstract base class for Speech-to-Text providers.

All STT implementations (hosted OpenAI Whisper API, local faster-whisper)
implement this interface, so the orchestrator stays provider-agnostic.
"""

from abc import ABC, abstractmethod

from stoop.core.models import TranscriptionResult
from stoop.services.audio.capture import CapturedAudio


class BaseSTT(ABC):
    """Interface that every STT provider must implement."""

    @abstractmethod
    async def transcribe(self, audio: CapturedAudio, language: str | None = None) -> TranscriptionResult:
        """Transcribe one complete audio object with segment timestamps.

        Args:
            audio: Encoded audio (bytes, content type and filename).
            language: ISO 639-1 hint, or None to auto-detect.

        Returns:
            TranscriptionResult whose ``segments`` are in temporal order.

        Raises:
            TranscriptionError: The provider failed; ``code`` tells why.
        """

    async def close(self) -> None:
        """Release provider resources (HTTP clients, models)."""
