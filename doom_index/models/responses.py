"""API request/response models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from doom_index.models.domain import ArchiveMetadata, RevenueReport


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    tokens_tracked: int = 0


class MarketSignalResponse(BaseModel):
    minute_bucket: str
    raw: dict[str, float]
    rounded: dict[str, float]
    normalized: dict[str, float]
    visual_params: dict[str, float]
    fingerprint: str
    params_hash: str


class EvaluationResponse(BaseModel):
    status: str
    minute_bucket: str
    fingerprint: str = ""
    rounded_map: dict[str, float] = Field(default_factory=dict)
    skip_reason: str | None = None
    image_url: str | None = None
    params_hash: str | None = None
    seed: str | None = None
    archive_id: str | None = None
    revenue: RevenueReport | None = None
    inconsistencies: list[str] = Field(default_factory=list)


class TradeSnapshotIn(BaseModel):
    ticker: str
    trades_per_minute: float = 0.0
    average_trade_usd: float = 0.0


class RevenueRequest(BaseModel):
    snapshots: list[TradeSnapshotIn] = Field(default_factory=list)
    generation_rate: float | None = None


class ArchiveListResponse(BaseModel):
    items: list[ArchiveMetadata] = Field(default_factory=list)
    cursor: str | None = None
    has_more: bool = False


class TokenInfoResponse(BaseModel):
    ticker: str
    address: str
    axes: list[str]
    title: str
    description: str
    motif: str
