"""Signal pipeline — runs the pure stages in order on a SignalContext.

normalize → map → round → quantize → fingerprint → params_hash

Every stage is total (no error branches), so the pipeline never fails.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping

from doom_index.engine.config import PipelineConfig
from doom_index.engine.context import SignalContext
from doom_index.engine.hashing import compute_stable_hash, hash_visual_params
from doom_index.engine.mapping import map_to_visual_params
from doom_index.engine.normalize import normalize_mc_map
from doom_index.engine.quantize import quantize_map
from doom_index.engine.rounding import round_mc_map
from doom_index.engine.timebucket import get_minute_bucket
from doom_index.engine.tokens import roster_map

logger = logging.getLogger(__name__)

Stage = Callable[[SignalContext, PipelineConfig], None]


def _normalize(ctx: SignalContext, config: PipelineConfig) -> None:
    ctx.normalized = normalize_mc_map(ctx.raw)


def _map_visual(ctx: SignalContext, config: PipelineConfig) -> None:
    ctx.visual_params = map_to_visual_params(ctx.normalized)


def _round(ctx: SignalContext, config: PipelineConfig) -> None:
    ctx.rounded = round_mc_map(ctx.raw, config.round_decimals)


def _quantize(ctx: SignalContext, config: PipelineConfig) -> None:
    if config.change_buckets > 0:
        ctx.quantized = quantize_map(ctx.visual_params.as_dict(), config.change_buckets)


def _fingerprint(ctx: SignalContext, config: PipelineConfig) -> None:
    ctx.fingerprint = compute_stable_hash(ctx.quantized if ctx.quantized else ctx.rounded)


def _params_hash(ctx: SignalContext, config: PipelineConfig) -> None:
    ctx.params_hash = hash_visual_params(ctx.visual_params, config.params_quantize_buckets)


STAGES: tuple[tuple[str, Stage], ...] = (
    ("normalize", _normalize),
    ("map_visual", _map_visual),
    ("round", _round),
    ("quantize", _quantize),
    ("fingerprint", _fingerprint),
    ("params_hash", _params_hash),
)


class SignalPipeline:
    """Orchestrates the signal stages."""

    def __init__(self, config: PipelineConfig | None = None) -> None:
        self.config = config or PipelineConfig()

    def run(self, ctx: SignalContext) -> SignalContext:
        start = time.perf_counter()
        for name, stage in STAGES:
            t0 = time.perf_counter()
            stage(ctx, self.config)
            ctx.completed_stages.append(name)
            ctx.timings_ms[name] = round((time.perf_counter() - t0) * 1000, 3)
            logger.debug("  %s completed in %.3fms", name, ctx.timings_ms[name])

        logger.debug(
            "Signal pipeline complete: fingerprint=%s params_hash=%s in %.2fms",
            ctx.fingerprint,
            ctx.params_hash,
            (time.perf_counter() - start) * 1000,
        )
        return ctx

    def evaluate(self, raw: Mapping[str, float | None], minute_bucket: str | None = None) -> SignalContext:
        """Build a context from a raw market cap map and run every stage."""
        values = {k: (0.0 if v is None else float(v)) for k, v in roster_map(dict(raw)).items()}
        ctx = SignalContext(raw=values, minute_bucket=minute_bucket or get_minute_bucket())
        return self.run(ctx)


def create_pipeline(config: PipelineConfig | None = None) -> SignalPipeline:
    """Factory function for creating a pipeline instance."""
    return SignalPipeline(config=config)
