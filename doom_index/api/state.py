"""GET /api/state, /api/tokens, /api/tokens/{ticker} — current global and per-token state."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from doom_index.dependencies import get_container, raise_for_error
from doom_index.engine.tokens import TOKEN_CONFIG_MAP, TOKEN_DESCRIPTIONS, TOKEN_TICKERS, is_known_ticker
from doom_index.models.domain import GlobalState, TokenState
from doom_index.models.errors import ValidationError
from doom_index.models.responses import TokenInfoResponse
from doom_index.models.result import Err
from doom_index.services.container import ServiceContainer

router = APIRouter()


@router.get("/state", response_model=GlobalState)
async def global_state(container: ServiceContainer = Depends(get_container)) -> GlobalState:
    result = await container.state.read_global_state()
    if isinstance(result, Err):
        raise_for_error(result.error)
    return result.value or GlobalState()


@router.get("/tokens", response_model=list[TokenInfoResponse])
async def token_roster() -> list[TokenInfoResponse]:
    return [
        TokenInfoResponse(
            ticker=ticker,
            address=TOKEN_CONFIG_MAP[ticker].address,
            axes=list(TOKEN_CONFIG_MAP[ticker].axes),
            title=TOKEN_DESCRIPTIONS[ticker].title,
            description=TOKEN_DESCRIPTIONS[ticker].description,
            motif=TOKEN_DESCRIPTIONS[ticker].motif,
        )
        for ticker in TOKEN_TICKERS
    ]


@router.get("/tokens/{ticker}", response_model=TokenState | None)
async def token_state(ticker: str, container: ServiceContainer = Depends(get_container)) -> TokenState | None:
    ticker = ticker.upper()
    if not is_known_ticker(ticker):
        raise_for_error(ValidationError(f"Unknown ticker: {ticker}"))

    result = await container.state.read_token_state(ticker)
    if isinstance(result, Err):
        raise_for_error(result.error)
    return result.value
