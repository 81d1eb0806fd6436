"""Health check + meta endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from doom_index import __version__
from doom_index.engine.tokens import TOKEN_TICKERS
from doom_index.models.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        tokens_tracked=len(TOKEN_TICKERS),
    )


@router.get("/prompts")
async def prompts() -> dict[str, dict[str, str]]:
    from doom_index.prompts import get_all_templates

    return get_all_templates()
