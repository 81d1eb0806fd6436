"""Fixed-precision rounding — keeps fingerprints stable against jitter."""

from __future__ import annotations

import math
from collections.abc import Mapping

from doom_index.engine.quantize import round_half_up
from doom_index.engine.tokens import ROUND_DECIMALS, TOKEN_TICKERS


def round_value(value: float | None, decimals: int = ROUND_DECIMALS) -> float:
    if value is None or not math.isfinite(value):
        return 0.0
    factor = 10**decimals
    scaled = value * factor
    # already integral at this precision
    if not math.isfinite(scaled):
        return value
    return round_half_up(scaled) / factor


def round_to_fixed(values: Mapping[str, float | None], decimals: int = ROUND_DECIMALS) -> dict[str, float]:
    """Round every value; key order follows ``values`` iteration order."""
    return {key: round_value(value, decimals) for key, value in values.items()}


def round_mc_map(raw_map: Mapping[str, float | None], decimals: int = ROUND_DECIMALS) -> dict[str, float]:
    """Round a market cap map over the full roster, in roster order."""
    return {ticker: round_value(raw_map.get(ticker), decimals) for ticker in TOKEN_TICKERS}
