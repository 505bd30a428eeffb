"""
FastAPI application factory.

``create_app()`` assembles the application with CORS, admin auth, error
handlers, routers, the public page, the media mount and the health
endpoints. Run it with
``uvicorn stoop.api.app:create_app --factory --reload``.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from stoop import __version__
from stoop.api.middleware.admin_auth import AdminAuthMiddleware
from stoop.api.middleware.error_handler import register_error_handlers
from stoop.api.routes import auth, episodes, inbox, public, transcribe, transcripts
from stoop.core.config import Settings, get_settings
from stoop.core.models import HealthResponse
from stoop.services.context import AppContext, build_context

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create tables on startup; release the STT client and DB engine on shutdown."""
    context: AppContext = app.state.context
    await context.database.init()
    logger.info("%s backend ready", context.settings.site_name)
    yield
    await context.close()


def create_app(settings: Settings | None = None, context: AppContext | None = None) -> FastAPI:
    """Build and return a fully configured FastAPI application.

    Args:
        settings: Configuration (defaults to ``get_settings()``).
        context: Pre-built service graph; tests pass one wired to fakes.

    Returns:
        FastAPI: The configured application, ready for ``uvicorn``.
    """
    settings = settings or (context.settings if context else get_settings())
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    context = context or build_context(settings)

    app = FastAPI(
        title=settings.site_name,
        description="Podcast publishing CMS: record, transcribe, annotate and publish episodes.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.context = context

    # -- CORS --
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -- Admin auth --
    app.add_middleware(AdminAuthMiddleware, api_key=settings.admin_api_key)

    # -- Error handlers --
    register_error_handlers(app)

    # -- Health checks --
    @app.get("/health", response_model=HealthResponse, tags=["system"])
    async def health() -> HealthResponse:
        return HealthResponse(version=__version__, timestamp=datetime.now(UTC))

    @app.get("/api/v1/health", response_model=HealthResponse, tags=["system"])
    async def health_v1() -> HealthResponse:
        return HealthResponse(version=__version__, timestamp=datetime.now(UTC))

    # -- REST routes --
    app.include_router(auth.router, prefix="/api/v1")
    app.include_router(episodes.router, prefix="/api/v1")
    app.include_router(transcripts.router, prefix="/api/v1")
    app.include_router(transcribe.router, prefix="/api/v1")
    app.include_router(inbox.router, prefix="/api/v1")

    # -- Public page and media --
    app.include_router(public.router)
    media_root = getattr(context.storage, "root", settings.media_dir)
    app.mount("/media", StaticFiles(directory=str(media_root), check_dir=False), name="media")

    return app

