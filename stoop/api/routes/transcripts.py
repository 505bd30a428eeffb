"""
Transcript node endpoints used by the editor.

Nodes are read in ``display_order``; edits write only the fields sent, so
the editor can save one field at a time when it loses focus.
"""

from fastapi import APIRouter, Depends, Response

from stoop.api.dependencies import get_context
from stoop.core.models import TranscriptNodeCreate, TranscriptNodeResponse, TranscriptNodeUpdate
from stoop.services.context import AppContext
from stoop.services.storage.repository import EpisodeRepository

router = APIRouter(tags=["transcripts"])


@router.get("/episodes/{episode_id}/nodes", response_model=list[TranscriptNodeResponse])
async def list_nodes(episode_id: int, ctx: AppContext = Depends(get_context)):
    """Return the episode's transcript in reading order."""
    async with ctx.database.session() as session:
        repo = EpisodeRepository(session)
        await repo.get_episode(episode_id)
        nodes = await repo.list_nodes(episode_id)
    return [TranscriptNodeResponse.model_validate(node) for node in nodes]


@router.post(
    "/episodes/{episode_id}/nodes", response_model=TranscriptNodeResponse, status_code=201
)
async def create_node(
    episode_id: int,
    body: TranscriptNodeCreate | None = None,
    ctx: AppContext = Depends(get_context),
):
    """Append a manual node (no timestamps) to the end of the transcript."""
    body = body or TranscriptNodeCreate()
    async with ctx.database.session() as session:
        node = await EpisodeRepository(session).create_node(
            episode_id,
            content=body.content,
            reference_link=body.reference_link,
            reference_title=body.reference_title,
        )
    return TranscriptNodeResponse.model_validate(node)


@router.patch("/nodes/{node_id}", response_model=TranscriptNodeResponse)
async def update_node(
    node_id: int,
    body: TranscriptNodeUpdate,
    ctx: AppContext = Depends(get_context),
):
    """Persist the edited field(s); a blank reference link is stored as null."""
    fields = body.model_dump(exclude_unset=True)
    if fields.get("content", "") is None:
        fields["content"] = ""
    async with ctx.database.session() as session:
        repo = EpisodeRepository(session)
        node = await repo.update_node(node_id, **fields) if fields else await repo.get_node(node_id)
    return TranscriptNodeResponse.model_validate(node)


@router.delete("/nodes/{node_id}", status_code=204)
async def delete_node(node_id: int, ctx: AppContext = Depends(get_context)) -> Response:
    async with ctx.database.session() as session:
        await EpisodeRepository(session).delete_node(node_id)
    return Response(status_code=204)
