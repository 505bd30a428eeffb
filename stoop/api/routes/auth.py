"""
Admin session check.

The admin UI calls this with the key the operator typed in; the request only
reaches the handler if ``AdminAuthMiddleware`` accepted the key.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from stoop.api.dependencies import get_context
from stoop.services.context import AppContext

router = APIRouter(prefix="/auth", tags=["auth"])


class SessionResponse(BaseModel):
    authenticated: bool = True
    auth_required: bool
    site_name: str


@router.get("/session", response_model=SessionResponse)
async def session(ctx: AppContext = Depends(get_context)):
    return SessionResponse(
        auth_required=bool(ctx.settings.admin_api_key),
        site_name=ctx.settings.site_name,
    )
