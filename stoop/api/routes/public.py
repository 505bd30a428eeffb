"""
Public listener page.

Renders the latest published episode with its interactive transcript and
the archive of older episodes. Server-side rendering via Jinja2.
"""

from pathlib import Path

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from stoop.api.dependencies import get_context
from stoop.core.utils import format_duration, format_timestamp
from stoop.services.context import AppContext
from stoop.services.public import build_public_page
from stoop.services.storage.repository import EpisodeRepository

templates = Jinja2Templates(directory=str(Path(__file__).parent.parent / "templates"))
templates.env.globals.update({"format_timestamp": format_timestamp, "format_duration": format_duration})

router = APIRouter(tags=["public"])


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def index(
    request: Request,
    episode: int | None = Query(None),
    ctx: AppContext = Depends(get_context),
):
    async with ctx.database.session() as session:
        page = await build_public_page(EpisodeRepository(session), episode_id=episode)
    return templates.TemplateResponse(
        request,
        "index.html",
        {"page": page, "site_name": ctx.settings.site_name},
    )
