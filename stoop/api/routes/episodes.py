"""
Episode REST endpoints.

Create (multipart upload), list, read, update, publish and delete episodes.
The create and delete workflows live in ``EpisodeService``; the rest
delegate to ``EpisodeRepository``.
"""

import dataclasses
import logging

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from stoop.api.dependencies import get_context
from stoop.core.exceptions import TooLargeError, ValidationError
from stoop.core.models import (
    DeleteEpisodeResponse,
    EpisodeCreateResponse,
    EpisodeResponse,
    EpisodeUpdate,
    TranscribeResponse,
)
from stoop.services.context import AppContext
from stoop.services.episodes import CoverImage
from stoop.services.storage.repository import EpisodeRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/episodes", tags=["episodes"])


@router.post("", response_model=EpisodeCreateResponse, status_code=201)
async def create_episode(
    title: str = Form(""),
    summary: str | None = Form(None),
    duration_seconds: int | None = Form(None, ge=0),
    transcribe: bool = Form(True),
    audio: UploadFile | None = File(None),
    cover: UploadFile | None = File(None),
    ctx: AppContext = Depends(get_context),
):
    """Save a new episode from a recorded take or an uploaded audio file.

    ``duration_seconds`` is the recorder's elapsed counter; it is used when
    the duration cannot be measured from the file itself.
    """
    if audio is None:
        raise ValidationError("Audio is required")

    data = await audio.read()
    captured = await ctx.intake.accept(audio.filename, audio.content_type, data)
    if not captured.duration_seconds and duration_seconds:
        captured = dataclasses.replace(captured, duration_seconds=duration_seconds)

    cover_image = None
    if cover is not None and cover.filename:
        cover_data = await cover.read()
        if len(cover_data) > ctx.settings.max_cover_bytes:
            raise TooLargeError(len(cover_data), ctx.settings.max_cover_bytes)
        cover_image = CoverImage(cover_data, cover.content_type, cover.filename)

    return await ctx.episodes.create_episode(
        title=title,
        summary=summary,
        audio=captured,
        cover=cover_image,
        transcribe=transcribe,
    )


@router.get("", response_model=list[EpisodeResponse])
async def list_episodes(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    ctx: AppContext = Depends(get_context),
):
    """List episodes, newest first."""
    async with ctx.database.session() as session:
        episodes = await EpisodeRepository(session).list_episodes(limit=limit, offset=offset)
    return [EpisodeResponse.model_validate(ep) for ep in episodes]


@router.get("/{episode_id}", response_model=EpisodeResponse)
async def get_episode(episode_id: int, ctx: AppContext = Depends(get_context)):
    async with ctx.database.session() as session:
        episode = await EpisodeRepository(session).get_episode(episode_id)
    return EpisodeResponse.model_validate(episode)


@router.patch("/{episode_id}", response_model=EpisodeResponse)
async def update_episode(
    episode_id: int,
    body: EpisodeUpdate,
    ctx: AppContext = Depends(get_context),
):
    """Update title, summary or transcription status (only fields sent)."""
    fields = body.model_dump(exclude_unset=True)
    # title and status are non-nullable; an explicit null means "leave as is"
    for key in ("title", "transcription_status"):
        if key in fields and fields[key] is None:
            del fields[key]
    if "transcription_status" in fields:
        fields["transcription_status"] = fields["transcription_status"].value
    async with ctx.database.session() as session:
        repo = EpisodeRepository(session)
        episode = (
            await repo.update_episode(episode_id, **fields)
            if fields
            else await repo.get_episode(episode_id)
        )
    return EpisodeResponse.model_validate(episode)


@router.post("/{episode_id}/publish", response_model=EpisodeResponse)
async def publish_episode(episode_id: int, ctx: AppContext = Depends(get_context)):
    """Make the episode public. There is no unpublish."""
    async with ctx.database.session() as session:
        episode = await EpisodeRepository(session).publish_episode(episode_id)
    logger.info("Published episode %s", episode_id)
    return EpisodeResponse.model_validate(episode)


@router.post("/{episode_id}/transcribe", response_model=TranscribeResponse, response_model_by_alias=True)
async def retranscribe_episode(
    episode_id: int,
    replace: bool = Query(True),
    ctx: AppContext = Depends(get_context),
):
    """Re-generate the transcript from the episode's stored audio."""
    return await ctx.orchestrator.transcribe_stored(episode_id, replace=replace)


@router.delete("/{episode_id}", response_model=DeleteEpisodeResponse)
async def delete_episode(episode_id: int, ctx: AppContext = Depends(get_context)):
    """Delete the episode, its transcript nodes and (best-effort) its media."""
    return await ctx.episodes.delete_episode(episode_id)
