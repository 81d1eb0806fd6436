"""Market cap → [0, 1] normalization with square-root easing.

sqrt(ratio) spreads the low end of the window and compresses the top, so
ordinary market caps yield more visually distinct states than extreme ones.
"""

from __future__ import annotations

import math
from collections.abc import Mapping

from doom_index.engine.tokens import TOKEN_CONFIG_MAP, TOKEN_TICKERS


def clamp01(value: float) -> float:
    if not math.isfinite(value):
        return 0.0
    if value <= 0:
        return 0.0
    if value >= 1:
        return 1.0
    return float(value)


def normalize_value(raw: float, lo: float, hi: float) -> float:
    """Normalize ``raw`` within ``[lo, hi]``. Never raises; bad input → 0."""
    if not math.isfinite(raw) or not math.isfinite(lo) or not math.isfinite(hi):
        return 0.0
    # Degenerate bounds are a config error; treat as no signal
    if hi <= lo:
        return 0.0

    clamped = min(max(raw, lo), hi)
    ratio = (clamped - lo) / (hi - lo)
    return clamp01(math.sqrt(ratio))


def normalize_mc_map(raw_map: Mapping[str, float | None]) -> dict[str, float]:
    """Normalize every roster ticker with its configured window."""
    normalized: dict[str, float] = {}
    for ticker in TOKEN_TICKERS:
        lo, hi = TOKEN_CONFIG_MAP[ticker].normalization
        raw = raw_map.get(ticker)
        normalized[ticker] = normalize_value(0.0 if raw is None else float(raw), lo, hi)
    return normalized
