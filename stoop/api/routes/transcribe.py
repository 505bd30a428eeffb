"""
Transcription endpoint.

``POST /api/v1/transcribe`` accepts a multipart ``audio`` file plus an
``episodeId`` and replaces that episode's transcript with the STT segments.
"""

import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile

from stoop.api.dependencies import get_context
from stoop.core.exceptions import ValidationError
from stoop.core.models import TranscribeResponse
from stoop.services.audio.capture import CapturedAudio
from stoop.services.context import AppContext

logger = logging.getLogger(__name__)

router = APIRouter(tags=["transcription"])

MISSING_INPUT = "Missing audio file or episode ID"


@router.post("/transcribe", response_model=TranscribeResponse, response_model_by_alias=True)
async def transcribe(
    audio: UploadFile | None = File(None),
    episode_id: str | None = Form(None, alias="episodeId"),
    ctx: AppContext = Depends(get_context),
):
    """Transcribe an audio file into an episode's transcript nodes.

    Returns ``{"success": true, "nodeCount": n, "fullText": "..."}``.
    """
    if audio is None or not episode_id:
        raise ValidationError(MISSING_INPUT)
    try:
        target = int(episode_id)
    except ValueError as exc:
        raise ValidationError(f"Invalid episode ID: {episode_id}") from exc

    data = await audio.read()
    if not data:
        raise ValidationError(MISSING_INPUT)

    captured = CapturedAudio(
        data=data,
        content_type=audio.content_type or "application/octet-stream",
        filename=audio.filename or "audio.webm",
    )
    return await ctx.orchestrator.transcribe(target, captured)
