"""FastAPI app factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from doom_index import __version__
from doom_index.config import Settings, settings as default_settings
from doom_index.services.container import ServiceContainer, build_container

load_dotenv()

logging.basicConfig(
    level=getattr(logging, default_settings.doom_log_level.upper(), logging.INFO),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, container: ServiceContainer | None = None) -> FastAPI:
    """Build the app. A prebuilt ``container`` is used as-is (tests); otherwise one is built from settings."""
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.container = container or build_container(settings)
        logger.info("Doom Index API started (env=%s)", settings.doom_env)
        try:
            yield
        finally:
            await app.state.container.aclose()

    app = FastAPI(
        title="Doom Index",
        description="Market-cap driven generative art — one deterministic painting per minute",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from doom_index.api.router import api_router

    app.include_router(api_router)

    return app


app = create_app()
