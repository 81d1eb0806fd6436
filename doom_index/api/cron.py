"""POST /api/cron/evaluate — one minute evaluation, triggered by an external scheduler."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from doom_index.dependencies import get_container, raise_for_error
from doom_index.models.responses import EvaluationResponse
from doom_index.models.result import Err
from doom_index.services.container import ServiceContainer

router = APIRouter()


@router.post("/cron/evaluate", response_model=EvaluationResponse)
async def evaluate(container: ServiceContainer = Depends(get_container)) -> EvaluationResponse:
    result = await container.generation.evaluate_minute()
    if isinstance(result, Err):
        raise_for_error(result.error)
    return EvaluationResponse(**result.value.to_dict())
