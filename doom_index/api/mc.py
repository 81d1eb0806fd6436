"""GET /api/mc — current market signal without side effects."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from doom_index.dependencies import get_container, raise_for_error
from doom_index.models.responses import MarketSignalResponse
from doom_index.models.result import Err
from doom_index.services.container import ServiceContainer

router = APIRouter()


@router.get("/mc", response_model=MarketSignalResponse)
async def market_signal(container: ServiceContainer = Depends(get_container)) -> MarketSignalResponse:
    market = await container.market_source.get_mc_map()
    if isinstance(market, Err):
        raise_for_error(market.error)

    ctx = container.pipeline.evaluate(market.value)
    return MarketSignalResponse(
        minute_bucket=ctx.minute_bucket,
        raw=ctx.raw,
        rounded=ctx.rounded,
        normalized=ctx.normalized,
        visual_params=ctx.visual_params.as_dict(),
        fingerprint=ctx.fingerprint,
        params_hash=ctx.params_hash,
    )
