"""Master API router — mounts all endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from doom_index.api import archive, cron, health, mc, revenue, state

api_router = APIRouter(prefix="/api")

api_router.include_router(health.router)
api_router.include_router(state.router)
api_router.include_router(mc.router)
api_router.include_router(cron.router)
api_router.include_router(revenue.router)
api_router.include_router(archive.router)
