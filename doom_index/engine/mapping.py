"""Normalized token map → 16 named visual parameters.

Primary axes use ``ease`` (power < 1 saturates early); secondary axes use
``lift`` (affine into a sub-range, never reaching the extremes).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields

from doom_index.engine.normalize import clamp01


def ease(value: float, power: float) -> float:
    return clamp01(clamp01(value) ** power)


def lift(value: float, base: float, scale: float) -> float:
    return clamp01(base + clamp01(value) * scale)


@dataclass(frozen=True)
class VisualParams:
    fog_density: float = 0.0
    sky_tint: float = 0.0
    reflectivity: float = 0.0
    blue_balance: float = 0.0
    vegetation_density: float = 0.0
    organic_pattern: float = 0.0
    radiation_glow: float = 0.0
    debris_intensity: float = 0.0
    mechanical_pattern: float = 0.0
    metallic_ratio: float = 0.0
    fractal_density: float = 0.0
    bioluminescence: float = 0.0
    shadow_depth: float = 0.0
    red_highlight: float = 0.0
    light_intensity: float = 0.0
    warm_hue: float = 0.0

    def as_dict(self) -> dict[str, float]:
        return asdict(self)

    @classmethod
    def keys(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))


VISUAL_PARAM_KEYS = VisualParams.keys()


def map_to_visual_params(normalized: Mapping[str, float]) -> VisualParams:
    """Apply the per-token easing table. Missing tickers read as 0."""

    def v(ticker: str) -> float:
        value = normalized.get(ticker)
        return 0.0 if value is None else float(value)

    return VisualParams(
        fog_density=ease(v("CO2"), 0.65),
        sky_tint=lift(v("CO2"), 0.15, 0.75),
        reflectivity=ease(v("ICE"), 0.7),
        blue_balance=lift(v("ICE"), 0.4, 0.5),
        vegetation_density=ease(v("FOREST"), 0.8),
        organic_pattern=lift(v("FOREST"), 0.3, 0.6),
        radiation_glow=ease(v("NUKE"), 0.6),
        debris_intensity=lift(v("NUKE"), 0.2, 0.75),
        mechanical_pattern=clamp01(v("MACHINE")),
        metallic_ratio=lift(v("MACHINE"), 0.3, 0.6),
        fractal_density=clamp01(v("PANDEMIC")),
        bioluminescence=lift(v("PANDEMIC"), 0.2, 0.7),
        shadow_depth=ease(v("FEAR"), 0.8),
        red_highlight=lift(v("FEAR"), 0.3, 0.6),
        light_intensity=ease(v("HOPE"), 0.9),
        warm_hue=lift(v("HOPE"), 0.4, 0.5),
    )
