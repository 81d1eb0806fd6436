"""Generation coordinator — one evaluation per minute bucket.

IDLE → EVALUATING → (SKIPPED | SYNTHESIZING → ARCHIVED) → IDLE

A provider or archive failure leaves GlobalState untouched so the next tick
retries with fresh data. State writes after a successful archive are
best-effort: failures are logged and reported as inconsistencies.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from doom_index.engine.pipeline import SignalPipeline
from doom_index.engine.timebucket import bucket_from_timestamp, get_minute_bucket, minute_bucket_to_iso
from doom_index.engine.tokens import TOKEN_TICKERS
from doom_index.models.domain import ArchiveMetadata, GlobalState, RevenueReport, TokenState, TradeSnapshot
from doom_index.models.errors import AppError, ExternalApiError, InternalError, StorageError
from doom_index.models.result import Err, Ok, Result
from doom_index.providers.base import GenerationOptions, ImageProvider, ImageRequest
from doom_index.services.archive import ArchiveService
from doom_index.services.prompt import PromptService
from doom_index.services.revenue import RevenueEngine
from doom_index.services.sources import MarketDataSource, TradeActivitySource
from doom_index.services.state import GLOBAL_STATE_KEY, StateService

logger = logging.getLogger(__name__)

SKIP_IN_FLIGHT = "in_flight"
SKIP_UNCHANGED = "unchanged"
SKIP_BUCKET_DONE = "bucket_already_generated"


class GenerationState(str, Enum):
    IDLE = "idle"
    EVALUATING = "evaluating"
    SKIPPED = "skipped"
    SYNTHESIZING = "synthesizing"
    ARCHIVED = "archived"


@dataclass
class MinuteEvaluation:
    status: str  # "skipped" | "generated"
    minute_bucket: str
    fingerprint: str = ""
    rounded_map: dict[str, float] = field(default_factory=dict)
    skip_reason: str | None = None
    image_url: str | None = None
    params_hash: str | None = None
    seed: str | None = None
    archive_id: str | None = None
    revenue: RevenueReport | None = None
    inconsistencies: list[str] = field(default_factory=list)

    @property
    def generated(self) -> bool:
        return self.status == "generated"

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "minute_bucket": self.minute_bucket,
            "fingerprint": self.fingerprint,
            "rounded_map": self.rounded_map,
            "skip_reason": self.skip_reason,
            "image_url": self.image_url,
            "params_hash": self.params_hash,
            "seed": self.seed,
            "archive_id": self.archive_id,
            "revenue": self.revenue.model_dump() if self.revenue else None,
            "inconsistencies": list(self.inconsistencies),
        }


class GenerationService:
    def __init__(
        self,
        market_source: MarketDataSource,
        trade_source: TradeActivitySource,
        state: StateService,
        archive: ArchiveService,
        provider: ImageProvider,
        prompts: PromptService,
        pipeline: SignalPipeline,
        revenue: RevenueEngine | None = None,
        image_model: str | None = None,
        generation_timeout_s: float = 15.0,
        state_timeout_s: float = 10.0,
        generation_rate: float = 1.0,
    ) -> None:
        self.market_source = market_source
        self.trade_source = trade_source
        self.state = state
        self.archive = archive
        self.provider = provider
        self.prompts = prompts
        self.pipeline = pipeline
        self.revenue = revenue or RevenueEngine()
        self.image_model = image_model
        self.generation_timeout_s = generation_timeout_s
        self.state_timeout_s = state_timeout_s
        self.generation_rate = generation_rate

        self.current_state = GenerationState.IDLE
        self._lock = asyncio.Lock()

    def _transition(self, state: GenerationState, minute_bucket: str) -> None:
        logger.info("generation %s → %s [%s]", self.current_state.value, state.value, minute_bucket)
        self.current_state = state

    async def _bounded(self, awaitable: Awaitable, timeout: float, on_timeout: AppError):
        try:
            return await asyncio.wait_for(awaitable, timeout=timeout)
        except asyncio.TimeoutError:
            logger.error("Timed out after %.1fs: %s", timeout, on_timeout.message)
            return Err(on_timeout)

    async def evaluate_minute(self, now: datetime | None = None) -> Result[MinuteEvaluation]:
        """Run one evaluation for the minute containing ``now`` (default: current time)."""
        minute_bucket = get_minute_bucket(now)
        if self._lock.locked():
            logger.info("Evaluation already in flight, skipping [%s]", minute_bucket)
            return Ok(MinuteEvaluation(status="skipped", minute_bucket=minute_bucket, skip_reason=SKIP_IN_FLIGHT))

        async with self._lock:
            try:
                return await self._evaluate(minute_bucket)
            except Exception as e:
                logger.exception("Evaluation failed unexpectedly [%s]", minute_bucket)
                return Err(InternalError("Unexpected failure during evaluation", cause=e))
            finally:
                self._transition(GenerationState.IDLE, minute_bucket)

    async def _evaluate(self, minute_bucket: str) -> Result[MinuteEvaluation]:
        self._transition(GenerationState.EVALUATING, minute_bucket)

        market = await self._bounded(
            self.market_source.get_mc_map(),
            self.state_timeout_s,
            ExternalApiError(provider="market-data", message="Market data timed out"),
        )
        if isinstance(market, Err):
            return market

        ctx = self.pipeline.evaluate(market.value, minute_bucket)

        current = await self._bounded(
            self.state.read_global_state(),
            self.state_timeout_s,
            StorageError("get", GLOBAL_STATE_KEY, "Global state read timed out"),
        )
        if isinstance(current, Err):
            return current
        prev = current.value

        skip_reason = None
        if prev is not None:
            if prev.prev_fingerprint == ctx.fingerprint:
                skip_reason = SKIP_UNCHANGED
            elif bucket_from_timestamp(prev.last_timestamp) == minute_bucket:
                skip_reason = SKIP_BUCKET_DONE
        if skip_reason:
            self._transition(GenerationState.SKIPPED, minute_bucket)
            logger.info("Skipping generation: %s (fingerprint=%s)", skip_reason, ctx.fingerprint)
            return Ok(MinuteEvaluation(
                status="skipped",
                minute_bucket=minute_bucket,
                fingerprint=ctx.fingerprint,
                rounded_map=dict(ctx.rounded),
                skip_reason=skip_reason,
                image_url=prev.image_url,
                params_hash=ctx.params_hash,
            ))

        self._transition(GenerationState.SYNTHESIZING, minute_bucket)
        composed = self.prompts.compose(ctx)
        if isinstance(composed, Err):
            return composed
        composition = composed.value

        request = ImageRequest(
            prompt=composition.prompt,
            negative=composition.negative,
            width=composition.width,
            height=composition.height,
            format=composition.format,
            seed=composition.seed,
            model=self.image_model,
        )
        generated = await self._bounded(
            self.provider.generate(request, GenerationOptions(timeout_s=self.generation_timeout_s)),
            self.generation_timeout_s,
            ExternalApiError(
                provider=self.provider.name,
                message=f"Image generation timed out after {self.generation_timeout_s}s",
            ),
        )
        if isinstance(generated, Err):
            logger.error("Image generation failed: %s", generated.error.message)
            return generated

        timestamp = minute_bucket_to_iso(minute_bucket)
        metadata = ArchiveMetadata(
            id=composition.archive_id,
            timestamp=timestamp,
            minute_bucket=minute_bucket,
            fingerprint=ctx.fingerprint,
            params_hash=ctx.params_hash,
            seed=composition.seed,
            mc_rounded=dict(ctx.rounded),
            visual_params=ctx.visual_params.as_dict(),
            image_url="",
            file_size=len(generated.value.image),
            prompt=composition.prompt,
            negative=composition.negative,
        )
        stored = await self.archive.store_image_with_metadata(
            minute_bucket, composition.filename, generated.value.image, metadata
        )
        if isinstance(stored, Err):
            logger.error("Archiving failed: %s", stored.error.message)
            return stored
        image_url = stored.value.image_url
        self._transition(GenerationState.ARCHIVED, minute_bucket)

        evaluation = MinuteEvaluation(
            status="generated",
            minute_bucket=minute_bucket,
            fingerprint=ctx.fingerprint,
            rounded_map=dict(ctx.rounded),
            image_url=image_url,
            params_hash=ctx.params_hash,
            seed=composition.seed,
            archive_id=composition.archive_id,
        )
        await self._write_state(evaluation, prev, timestamp)
        return Ok(evaluation)

    async def _fetch_snapshots(self, evaluation: MinuteEvaluation) -> list[TradeSnapshot]:
        """Trade activity after archiving; a failure is recorded, never fatal."""
        try:
            result = await self._bounded(
                self.trade_source.fetch_snapshots(),
                self.state_timeout_s,
                ExternalApiError(provider="trade-activity", message="Trade activity timed out"),
            )
        except Exception as e:
            logger.exception("Trade activity failed after archiving %s", evaluation.archive_id)
            evaluation.inconsistencies.append(f"trade_activity: {e}")
            return []
        if isinstance(result, Err):
            evaluation.inconsistencies.append(f"trade_activity: {result.error.message}")
            return []
        return result

    async def _write_state(self, evaluation: MinuteEvaluation, prev: GlobalState | None, timestamp: str) -> None:
        bucket = evaluation.minute_bucket

        snapshots = await self._fetch_snapshots(evaluation)
        report = self.revenue.calculate_minute_revenue(snapshots, self.generation_rate)
        if isinstance(report, Ok):
            evaluation.revenue = report.value

        writes = [
            (
                "global_state",
                self.state.write_global_state(
                    GlobalState(
                        prev_fingerprint=evaluation.fingerprint,
                        last_timestamp=timestamp,
                        image_url=evaluation.image_url,
                        revenue_minute=bucket if evaluation.revenue else None,
                    ),
                    expected_fingerprint=prev.prev_fingerprint if prev else None,
                ),
            ),
            (
                "token_states",
                self.state.write_token_states([
                    TokenState(ticker=t, thumbnail_url=evaluation.image_url or "", updated_at=timestamp)
                    for t in TOKEN_TICKERS
                ]),
            ),
        ]
        if evaluation.revenue is not None:
            writes.append(("revenue", self.state.write_revenue(evaluation.revenue, bucket)))

        # sequential: global state first, then token states, then revenue
        for name, write in writes:
            result = await self._bounded(
                write,
                self.state_timeout_s,
                StorageError("put", name, f"{name} write timed out"),
            )
            if isinstance(result, Err):
                message = f"{name}: {result.error.message}"
                evaluation.inconsistencies.append(message)
                logger.error(
                    "State inconsistency after archiving %s: %s",
                    evaluation.archive_id,
                    message,
                )
