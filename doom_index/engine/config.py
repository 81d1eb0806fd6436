"""Signal pipeline configuration — precision and change-detection knobs."""

from __future__ import annotations

from dataclasses import dataclass

from doom_index.engine.hashing import PARAMS_QUANTIZE_BUCKETS
from doom_index.engine.tokens import ROUND_DECIMALS


@dataclass
class PipelineConfig:
    """Controls how the market signal is reduced to a fingerprint."""

    # Decimal places for the rounded market cap map (display + hashing)
    round_decimals: int = ROUND_DECIMALS

    # 0: fingerprint the rounded market caps.
    # >0: fingerprint the visual params quantized to this many buckets, so
    # only visible changes trigger a new image.
    change_buckets: int = 0

    # Resolution of the visual params hash
    params_quantize_buckets: int = PARAMS_QUANTIZE_BUCKETS
