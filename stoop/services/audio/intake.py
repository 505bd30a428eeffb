"""Audio file intake: format and size validation plus duration measuring."""

import asyncio
import logging
from pathlib import PurePosixPath

from stoop.core.exceptions import InvalidFormatError, TooLargeError
from stoop.services.audio.capture import CapturedAudio
from stoop.services.audio.processor import measure_duration

logger = logging.getLogger(__name__)

ACCEPTED_CONTENT_TYPES = frozenset(
    {
        "audio/mpeg",
        "audio/mp3",
        "audio/wav",
        "audio/x-wav",
        "audio/wave",
        "audio/webm",
        "audio/ogg",
        "audio/mp4",
        "audio/x-m4a",
        "audio/m4a",
        "audio/aac",
        "audio/flac",
    }
)
ACCEPTED_EXTENSIONS = frozenset({".mp3", ".wav", ".webm", ".ogg", ".m4a", ".mp4", ".aac", ".flac"})


def _base_type(content_type: str | None) -> str:
    return (content_type or "").split(";", 1)[0].strip().lower()


def validate_audio_file(
    filename: str | None,
    content_type: str | None,
    size: int,
    max_bytes: int,
) -> None:
    """Reject files that are not audio or exceed *max_bytes*.

    A file is accepted when either its declared type or its extension is a
    known audio format.

    Raises:
        InvalidFormatError: Neither the type nor the extension is audio.
        TooLargeError: ``size`` is above ``max_bytes``.
    """
    extension = PurePosixPath(filename or "").suffix.lower()
    if _base_type(content_type) not in ACCEPTED_CONTENT_TYPES and extension not in ACCEPTED_EXTENSIONS:
        raise InvalidFormatError(filename or "<unnamed>", content_type)
    if size > max_bytes:
        raise TooLargeError(size, max_bytes)


class AudioIntake:
    """Accepts user-selected audio files (picker or drag-and-drop).

    Args:
        max_bytes: Intake ceiling, normally ``settings.max_upload_bytes``.
    """

    def __init__(self, max_bytes: int) -> None:
        self._max_bytes = max_bytes

    async def accept(
        self, filename: str | None, content_type: str | None, data: bytes
    ) -> CapturedAudio:
        """Validate *data* and return it with its measured duration.

        Duration is 0 when the file cannot be decoded locally.
        """
        validate_audio_file(filename, content_type, len(data), self._max_bytes)
        fmt = PurePosixPath(filename or "").suffix.lower().lstrip(".") or None
        duration = await asyncio.to_thread(measure_duration, data, fmt)
        logger.debug("Accepted %s: %d bytes, %.1fs", filename, len(data), duration)
        return CapturedAudio(
            data=data,
            content_type=_base_type(content_type) or "application/octet-stream",
            filename=filename or "upload",
            duration_seconds=int(round(duration)),
        )
