"""Shared utility functions for Stoop Politics."""

import time
from pathlib import PurePosixPath
from uuid import uuid4

_EXTENSIONS_BY_TYPE = {
    "audio/webm": "webm",
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "audio/wave": "wav",
    "audio/mpeg": "mp3",
    "audio/mp3": "mp3",
    "audio/mp4": "m4a",
    "audio/x-m4a": "m4a",
    "audio/m4a": "m4a",
    "audio/aac": "aac",
    "audio/ogg": "ogg",
    "audio/flac": "flac",
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}


def extension_for(filename: str | None, content_type: str | None, default: str = "bin") -> str:
    """Return a lowercase extension (no dot), preferring the filename's own."""
    if filename:
        suffix = PurePosixPath(filename).suffix.lower().lstrip(".")
        if suffix:
            return suffix
    if content_type:
        base = content_type.split(";", 1)[0].strip().lower()
        if base in _EXTENSIONS_BY_TYPE:
            return _EXTENSIONS_BY_TYPE[base]
    return default


def timestamped_key(prefix: str, label: str, ext: str) -> str:
    """Build an object key like ``audio/1718000000000-3f9a1c2e-audio.webm``.

    The random segment keeps keys distinct when two uploads land in the same
    millisecond.
    """
    return f"{prefix.strip('/')}/{int(time.time() * 1000)}-{uuid4().hex[:8]}-{label}.{ext}"


def format_duration(seconds: float | None) -> str:
    """Format seconds as zero-padded ``MM:SS`` (recording timer style)."""
    total = int(seconds or 0)
    return f"{total // 60:02d}:{total % 60:02d}"


def format_timestamp(seconds: float | None) -> str:
    """Format seconds as ``M:SS`` (transcript time marker style)."""
    if not seconds:
        return "0:00"
    total = int(seconds)
    return f"{total // 60}:{total % 60:02d}"
