"""
Listener inbox endpoints (operator side).
"""

from fastapi import APIRouter, Depends, Query, Response

from stoop.api.dependencies import get_context
from stoop.core.models import InboxMessageResponse, InboxMessageUpdate
from stoop.services.context import AppContext
from stoop.services.storage.repository import InboxRepository

router = APIRouter(prefix="/inbox", tags=["inbox"])


@router.get("", response_model=list[InboxMessageResponse])
async def list_messages(
    unread_only: bool = Query(False),
    limit: int = Query(100, ge=1, le=500),
    ctx: AppContext = Depends(get_context),
):
    """List messages, newest first."""
    async with ctx.database.session() as session:
        messages = await InboxRepository(session).list_messages(unread_only=unread_only, limit=limit)
    return [InboxMessageResponse.model_validate(m) for m in messages]


@router.patch("/{message_id}", response_model=InboxMessageResponse)
async def update_message(
    message_id: int,
    body: InboxMessageUpdate,
    ctx: AppContext = Depends(get_context),
):
    """Mark a message read/unread or edit the operator's notes."""
    async with ctx.database.session() as session:
        message = await InboxRepository(session).update_message(
            message_id, is_read=body.is_read, admin_notes=body.admin_notes
        )
    return InboxMessageResponse.model_validate(message)


@router.delete("/{message_id}", status_code=204)
async def delete_message(message_id: int, ctx: AppContext = Depends(get_context)) -> Response:
    async with ctx.database.session() as session:
        await InboxRepository(session).delete_message(message_id)
    return Response(status_code=204)
