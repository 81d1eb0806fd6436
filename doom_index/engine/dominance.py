"""Weighted allegorical prompt — phrase weights follow market cap dominance.

Each token contributes a ``(phrase:weight)`` fragment. Weights come from the
token's market cap relative to the largest one, raised to ``exponent`` and
mapped into ``[min_weight, max_weight]``; fragments are sorted by weight.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from doom_index.engine.tokens import TOKEN_TICKERS


@dataclass(frozen=True)
class DominanceWeightConfig:
    min_weight: float = 0.1
    max_weight: float = 2.0
    exponent: float = 2.0
    tokens: tuple[str, ...] = TOKEN_TICKERS


@dataclass(frozen=True)
class WeightedFragment:
    text: str
    weight: float


DEFAULT_DOMINANCE_CONFIG = DominanceWeightConfig()

TOKEN_PHRASE = {
    "CO2": "dense toxic smog in the sky",
    "ICE": "melting glaciers submerging cities as rising oceans engulf skyscrapers and drown civilizations",
    "FOREST": (
        "endless expanses of vibrant green canopies, intertwined roots reclaiming abandoned structures, "
        "and wildlife thriving in the untouched wilderness"
    ),
    "NUKE": (
        "ashen wastelands under nuclear fallout, with radioactive winds sweeping through ruins "
        "and a towering mushroom cloud dominating the sky"
    ),
    "MACHINE": (
        "cold robotic automatons marching in formation, towering AI surveillance systems with glowing "
        "electronic eyes, automated factories with mechanical arms and assembly lines, cybernetic beings "
        "fused with technology, dystopian machinery controlling and monitoring everything"
    ),
    "PANDEMIC": (
        "masked figures wandering through unsanitary streets filled with viral clouds, bio-contaminants, "
        "and microscopic pathogens dominating the air"
    ),
    "FEAR": "oppressive darkness with many red eyes",
    "HOPE": "radiant golden divine light breaking the clouds",
}

STYLE_BASE = (
    "baroque allegorical oil painting, Caravaggio and Rubens influence, dramatic tenebrism with intense "
    "chiaroscuro, dynamic composition with diagonal movement, rich vibrant colors, emotional expression, "
    "thick impasto oil texture, theatrical lighting, detailed human figures, cohesive single landscape"
)

NEGATIVE_PROMPT = "watermark, text, logo, oversaturated colors, low detail hands, extra limbs"

HUMAN_ELEMENT = WeightedFragment(text="figures praying, trading, recording the scene", weight=1.0)


def calculate_dominance_weights(
    mc: Mapping[str, float],
    config: DominanceWeightConfig = DEFAULT_DOMINANCE_CONFIG,
) -> dict[str, float]:
    values = {t: max(float(mc.get(t) or 0.0), 0.0) for t in config.tokens}
    max_mc = max(values.values(), default=0.0)
    if max_mc == 0:
        return {t: config.min_weight for t in config.tokens}

    weights: dict[str, float] = {}
    for ticker, value in values.items():
        transformed = (value / max_mc) ** config.exponent
        weight = config.min_weight + transformed * (config.max_weight - config.min_weight)
        weights[ticker] = min(max(weight, config.min_weight), config.max_weight)
    return weights


def to_weighted_fragments(
    mc: Mapping[str, float],
    config: DominanceWeightConfig = DEFAULT_DOMINANCE_CONFIG,
) -> list[WeightedFragment]:
    weights = calculate_dominance_weights(mc, config)
    fragments = [
        WeightedFragment(text=TOKEN_PHRASE[t], weight=weights[t] or config.min_weight)
        for t in config.tokens
    ]
    # stable sort keeps roster order among ties
    fragments.sort(key=lambda f: f.weight, reverse=True)
    fragments.append(HUMAN_ELEMENT)
    return fragments


def build_weighted_prompt(mc: Mapping[str, float]) -> tuple[str, str]:
    """Return ``(prompt, negative)`` with SDXL ``(phrase:weight)`` fragments."""
    fragments = to_weighted_fragments(mc)
    weighted_lines = ",\n".join(f"({f.text}:{f.weight:.2f})" for f in fragments)

    weights = [f.weight for f in fragments]
    summary = f"weights summary: sum={sum(weights):.3f}, min={min(weights):.3f}, max={max(weights):.3f}"

    prompt = "\n".join([
        "a grand baroque allegorical oil painting of the world, all forces visible and weighted by real-time power,",
        weighted_lines + ",",
        STYLE_BASE + ",",
        summary + ",",
        f"negative prompt: {NEGATIVE_PROMPT}",
    ])
    return prompt, NEGATIVE_PROMPT
