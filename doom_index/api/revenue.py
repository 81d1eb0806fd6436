"""Revenue endpoints — ad-hoc calculation and stored per-minute reports."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from doom_index.dependencies import get_container, raise_for_error
from doom_index.models.domain import RevenueReport, parse_trade_snapshots
from doom_index.models.responses import RevenueRequest
from doom_index.models.result import Err
from doom_index.services.container import ServiceContainer

router = APIRouter()


@router.post("/revenue", response_model=RevenueReport)
async def calculate_revenue(
    req: RevenueRequest,
    container: ServiceContainer = Depends(get_container),
) -> RevenueReport:
    snapshots = parse_trade_snapshots([s.model_dump() for s in req.snapshots])
    if isinstance(snapshots, Err):
        raise_for_error(snapshots.error)

    rate = req.generation_rate
    if rate is None:
        rate = container.settings.generation_rate
    return container.revenue.calculate_minute_revenue(snapshots.value, rate).value


@router.get("/revenue/{minute}", response_model=RevenueReport)
async def stored_revenue(minute: str, container: ServiceContainer = Depends(get_container)) -> RevenueReport:
    result = await container.state.read_revenue(minute)
    if isinstance(result, Err):
        raise_for_error(result.error)
    if result.value is None:
        raise HTTPException(status_code=404, detail=f"No revenue report for {minute}")
    return result.value
