"""Object storage for episode audio and cover images.

``LocalObjectStorage`` keeps objects under ``settings.media_dir``; the FastAPI
app mounts that directory at ``/media`` so every stored key has a public URL.
``MediaUploader`` applies the bucket layout (``audio/`` and ``covers/``
prefixes, epoch-ms names) and the fatal / non-fatal upload rules.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from stoop.core.exceptions import UploadError
from stoop.core.utils import extension_for, timestamped_key

logger = logging.getLogger(__name__)

AUDIO_PREFIX = "audio"
COVER_PREFIX = "covers"


@dataclass(frozen=True)
class StoredObject:
    """A durably stored object and its public URL."""

    key: str
    url: str


class ObjectStorage(ABC):
    """Minimal bucket interface used by the upload client."""

    @abstractmethod
    async def put(self, key: str, data: bytes, content_type: str | None = None) -> None:
        """Store *data* under *key*, overwriting nothing (keys are unique)."""

    @abstractmethod
    async def get(self, key: str) -> bytes:
        """Return the bytes stored under *key*."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove *key*; return False if it did not exist."""

    @abstractmethod
    def public_url(self, key: str) -> str:
        """Return the publicly readable URL for *key*."""


class LocalObjectStorage(ObjectStorage):
    """Filesystem-backed bucket.

    Args:
        root: Directory holding the objects.
        base_url: Public URL prefix the directory is served under.
    """

    def __init__(self, root: str | Path, base_url: str) -> None:
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        self._base_url = base_url.rstrip("/")

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if not path.is_relative_to(self.root):
            raise ValueError(f"Object key escapes the bucket: {key}")
        return path

    async def put(self, key: str, data: bytes, content_type: str | None = None) -> None:
        path = self._path(key)
        if path.exists():
            raise FileExistsError(f"Object already exists: {key}")

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        await asyncio.to_thread(_write)

    async def get(self, key: str) -> bytes:
        return await asyncio.to_thread(self._path(key).read_bytes)

    async def delete(self, key: str) -> bool:
        path = self._path(key)
        if not path.exists():
            return False
        await asyncio.to_thread(path.unlink)
        return True

    def public_url(self, key: str) -> str:
        return f"{self._base_url}/media/{key}"


class MediaUploader:
    """Uploads episode media with the bucket's naming scheme.

    Audio failures are fatal (:class:`UploadError`); cover failures are
    logged and reported as ``None`` so the episode can still be saved.
    """

    def __init__(self, storage: ObjectStorage) -> None:
        self._storage = storage

    async def _upload(
        self, prefix: str, label: str, data: bytes, content_type: str | None, filename: str | None
    ) -> StoredObject:
        ext = extension_for(filename, content_type, default="webm" if label == "audio" else "jpg")
        key = timestamped_key(prefix, label, ext)
        await self._storage.put(key, data, content_type)
        logger.info("Stored %s (%d bytes)", key, len(data))
        return StoredObject(key=key, url=self._storage.public_url(key))

    async def upload_audio(
        self, data: bytes, content_type: str | None = None, filename: str | None = None
    ) -> StoredObject:
        """Store episode audio under ``audio/<epoch-ms>-<rand>-audio.<ext>``.

        Raises:
            UploadError: The bucket rejected the object.
        """
        if not data:
            raise UploadError("Cannot upload empty audio")
        try:
            return await self._upload(AUDIO_PREFIX, "audio", data, content_type, filename)
        except (OSError, ValueError) as exc:
            raise UploadError(f"Audio upload failed: {exc}") from exc

    async def upload_cover(
        self, data: bytes, content_type: str | None = None, filename: str | None = None
    ) -> StoredObject | None:
        """Store a cover image under ``covers/<epoch-ms>-<rand>-cover.<ext>``, or return None."""
        if not data:
            return None
        try:
            return await self._upload(COVER_PREFIX, "cover", data, content_type, filename)
        except (OSError, ValueError):
            logger.warning("Cover image upload failed; continuing without cover", exc_info=True)
            return None

    async def fetch(self, key: str) -> bytes:
        """Read a stored object back (used to re-run transcription)."""
        try:
            return await self._storage.get(key)
        except (OSError, ValueError) as exc:
            raise UploadError(f"Could not read stored object {key}: {exc}") from exc

    async def delete(self, key: str | None) -> bool:
        """Best-effort removal; failures are logged, never raised."""
        if not key:
            return False
        try:
            return await self._storage.delete(key)
        except (OSError, ValueError):
            logger.warning("Failed to delete stored object %s", key, exc_info=True)
            return False
