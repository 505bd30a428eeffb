"""
Storage module - Database persistence and media object storage.
"""

from .database import Base, Database
from .media import LocalObjectStorage, MediaUploader, ObjectStorage, StoredObject
from .repository import EpisodeRepository, InboxRepository

__all__ = [
    "Base",
    "Database",
    "EpisodeRepository",
    "InboxRepository",
    "LocalObjectStorage",
    "MediaUploader",
    "ObjectStorage",
    "StoredObject",
]
