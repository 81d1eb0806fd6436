"""Bucket quantization for change detection."""

from __future__ import annotations

import math
from collections.abc import Mapping

from doom_index.engine.normalize import clamp01


def round_half_up(value: float) -> float:
    """Round to the nearest integer, ties toward +inf (not banker's rounding)."""
    if not math.isfinite(value):
        return value
    return float(math.floor(value + 0.5))


def quantize01(value: float, buckets: float = 5) -> float:
    """Snap ``value`` to the nearest of ``buckets`` equal steps in [0, 1]."""
    if isinstance(buckets, (int, float)) and math.isfinite(buckets):
        safe_buckets = max(1, int(math.floor(buckets)))
    else:
        safe_buckets = 1
    return round_half_up(clamp01(value) * safe_buckets) / safe_buckets


def quantize_map(values: Mapping[str, float], buckets: float = 5) -> dict[str, float]:
    return {key: quantize01(value, buckets) for key, value in values.items()}
