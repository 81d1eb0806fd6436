"""Domain records — persisted state, archive metadata, revenue.

Persisted records are pydantic models so they round-trip through JSON storage
with validation; ephemeral inputs are plain dataclasses.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from doom_index.engine.mapping import VISUAL_PARAM_KEYS
from doom_index.engine.tokens import TOKEN_TICKERS, is_known_ticker
from doom_index.models.errors import ValidationError
from doom_index.models.result import Err, Ok, Result


class GlobalState(BaseModel):
    prev_fingerprint: str | None = None
    last_timestamp: str | None = None
    image_url: str | None = None
    revenue_minute: str | None = None


class TokenState(BaseModel):
    ticker: str
    thumbnail_url: str
    updated_at: str


class ArchiveMetadata(BaseModel):
    """Immutable provenance record written once per successful generation."""

    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: str
    minute_bucket: str
    fingerprint: str
    params_hash: str
    seed: str
    mc_rounded: dict[str, float]
    visual_params: dict[str, float]
    image_url: str
    file_size: int = Field(ge=0)
    prompt: str
    negative: str


class RevenueReport(BaseModel):
    per_token_fee: dict[str, float]
    total_fee: float
    monthly_cost: float
    net_profit: float


@dataclass(frozen=True)
class TradeSnapshot:
    ticker: str
    trades_per_minute: float
    average_trade_usd: float


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_archive_metadata(data: Any) -> Result[ArchiveMetadata]:
    """Check a stored metadata payload: full roster and all 16 visual params."""
    try:
        metadata = ArchiveMetadata.model_validate(data)
    except PydanticValidationError as e:
        return Err(ValidationError("Invalid archive metadata structure", details=str(e)))

    missing_tickers = [
        t for t in TOKEN_TICKERS
        if not math.isfinite(metadata.mc_rounded.get(t, math.nan))
    ]
    missing_params = [
        k for k in VISUAL_PARAM_KEYS
        if not math.isfinite(metadata.visual_params.get(k, math.nan))
    ]
    if missing_tickers or missing_params:
        return Err(ValidationError(
            "Archive metadata is incomplete",
            details={"tickers": missing_tickers, "visual_params": missing_params},
        ))
    return Ok(metadata)


def parse_mc_map(payload: Any) -> Result[dict[str, float]]:
    """Validate a raw market cap payload ``{ticker: number}``.

    Unknown tickers and non-numeric values are rejected; missing roster
    tickers are allowed (they normalize to 0 downstream).
    """
    if not isinstance(payload, dict):
        return Err(ValidationError("Market cap payload must be an object", details=type(payload).__name__))

    unknown = sorted(k for k in payload if not is_known_ticker(k))
    if unknown:
        return Err(ValidationError("Unknown tickers in market cap payload", details=unknown))

    bad = sorted(k for k, v in payload.items() if not _is_number(v))
    if bad:
        return Err(ValidationError("Market cap values must be numbers", details=bad))

    return Ok({t: float(payload[t]) for t in TOKEN_TICKERS if t in payload})


def parse_trade_snapshots(payload: Any) -> Result[list[TradeSnapshot]]:
    """Validate a list of ``{ticker, trades_per_minute, average_trade_usd}`` dicts."""
    if not isinstance(payload, list):
        return Err(ValidationError("Trade snapshots must be a list", details=type(payload).__name__))

    snapshots: list[TradeSnapshot] = []
    for i, item in enumerate(payload):
        if not isinstance(item, dict):
            return Err(ValidationError(f"Snapshot {i} must be an object"))
        ticker = item.get("ticker")
        if not isinstance(ticker, str) or not is_known_ticker(ticker):
            return Err(ValidationError(f"Snapshot {i} has unknown ticker", details=ticker))
        trades = item.get("trades_per_minute", 0)
        average = item.get("average_trade_usd", 0)
        if not _is_number(trades) or not _is_number(average):
            return Err(ValidationError(f"Snapshot {i} has non-numeric fields", details=ticker))
        snapshots.append(TradeSnapshot(ticker, float(trades), float(average)))
    return Ok(snapshots)
