"""
Pydantic v2 request / response models used across the API layer.

Episode, TranscriptNode, Transcription, Inbox, Error
"""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """GET /health response."""

    status: str = "ok"
    version: str = "0.1.0"
    timestamp: datetime


# ---------------------------------------------------------------------------
# Episode
# ---------------------------------------------------------------------------


class TranscriptionStatus(StrEnum):
    """Progress of the speech-to-text run for an episode."""

    not_started = "not_started"
    processing = "processing"
    completed = "completed"
    failed = "failed"


class EpisodeResponse(BaseModel):
    """Standard episode representation returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    summary: str | None = None
    audio_url: str
    cover_image_url: str | None = None
    duration_seconds: int = 0
    audio_size_bytes: int | None = None
    audio_format: str | None = None
    is_published: bool = False
    published_at: datetime | None = None
    transcription_status: TranscriptionStatus = TranscriptionStatus.not_started
    transcription_error: str | None = None
    created_at: datetime


class EpisodeUpdate(BaseModel):
    """PATCH /episodes/{id} request body. Publishing has its own endpoint."""

    title: str | None = Field(default=None, max_length=255)
    summary: str | None = None
    transcription_status: TranscriptionStatus | None = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        if not value:
            raise ValueError("Title is required")
        return value


class DeleteEpisodeResponse(BaseModel):
    """Response from DELETE /episodes/{id}."""

    episode_id: int
    db_deleted: bool = True
    nodes_deleted: int = 0
    media_deleted: int = 0


# ---------------------------------------------------------------------------
# Transcript nodes
# ---------------------------------------------------------------------------


class TranscriptNodeResponse(BaseModel):
    """A single transcript segment as stored."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    episode_id: int
    content: str
    display_order: int
    start_time: float | None = None
    end_time: float | None = None
    reference_link: str | None = None
    reference_title: str | None = None


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class TranscriptNodeUpdate(BaseModel):
    """PATCH /nodes/{id} request body; only the fields sent are written.

    A blank reference link or title clears it.
    """

    content: str | None = None
    reference_link: str | None = None
    reference_title: str | None = None

    @field_validator("reference_link", "reference_title")
    @classmethod
    def clear_blank(cls, value: str | None) -> str | None:
        return _blank_to_none(value)


class TranscriptNodeCreate(BaseModel):
    """POST /episodes/{id}/nodes request body (manual placeholder node)."""

    content: str = "Transcript pending..."
    reference_link: str | None = None
    reference_title: str | None = None

    @field_validator("reference_link", "reference_title")
    @classmethod
    def clear_blank(cls, value: str | None) -> str | None:
        return _blank_to_none(value)


# ---------------------------------------------------------------------------
# Transcription
# ---------------------------------------------------------------------------


class TranscriptionSegment(BaseModel):
    """A single transcription segment with timestamps."""

    text: str
    start: float
    end: float


class TranscriptionResult(BaseModel):
    """Complete transcription result for one audio object."""

    text: str
    language: str = "unknown"
    duration: float = 0.0
    segments: list[TranscriptionSegment] = Field(default_factory=list)


class TranscribeResponse(BaseModel):
    """Success body of the transcription endpoints (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    node_count: int = Field(default=0, alias="nodeCount")
    full_text: str = Field(default="", alias="fullText")


class EpisodeCreateResponse(BaseModel):
    """Response from POST /episodes.

    ``transcription`` is set when transcription ran and succeeded;
    ``transcription_error`` carries the message when it ran and failed.
    """

    episode: EpisodeResponse
    transcription: TranscribeResponse | None = None
    transcription_error: str | None = None


# ---------------------------------------------------------------------------
# Inbox
# ---------------------------------------------------------------------------


class InboxMessageResponse(BaseModel):
    """A listener message as seen by the operator."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    message: str
    is_read: bool = False
    admin_notes: str | None = None
    created_at: datetime


class InboxMessageUpdate(BaseModel):
    """PATCH /inbox/{id} request body."""

    is_read: bool | None = None
    admin_notes: str | None = None


# ---------------------------------------------------------------------------
# Error
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Standard error envelope returned by the API."""

    error: str
    detail: str
    code: str
    timestamp: str
