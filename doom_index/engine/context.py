"""SignalContext — the single state object flowing through all pipeline stages.

Raw inputs go in; each stage fills the next derived field.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from doom_index.engine.mapping import VisualParams


@dataclass
class SignalContext:
    """Derived signal state for one minute bucket."""

    # Raw market caps keyed by ticker (as handed over by the market source)
    raw: dict[str, float] = field(default_factory=dict)
    # Minute bucket this evaluation belongs to
    minute_bucket: str = ""

    # --- Derived (populated by stages) ---
    normalized: dict[str, float] = field(default_factory=dict)
    visual_params: VisualParams = field(default_factory=VisualParams)
    rounded: dict[str, float] = field(default_factory=dict)
    # Quantized visual params, only when change detection uses buckets
    quantized: dict[str, float] = field(default_factory=dict)
    fingerprint: str = ""
    params_hash: str = ""

    completed_stages: list[str] = field(default_factory=list)
    timings_ms: dict[str, float] = field(default_factory=dict)
