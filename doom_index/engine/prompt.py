"""Deterministic prompt text from rounded signals and visual parameters.

Layout (joined, whitespace-collapsed):
  <base prompt>
  Data snapshot [<bucket>]: CO2=…, ICE=…, …
  Influence narrative: co2→fog_density/sky_tint=…; …
  Visual parameters: fog_density=…, …
  Deterministic controls: fingerprint=…, seed=…
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping

from doom_index.engine.mapping import VisualParams
from doom_index.engine.tokens import TOKEN_AXIS_MAP, TOKEN_TICKERS
from doom_index.prompts import PromptTemplate

_WHITESPACE = re.compile(r"\s+")


def _roster_value(values: Mapping[str, float], ticker: str) -> float:
    value = values.get(ticker)
    return 0.0 if value is None else float(value)


def format_token_snapshot(rounded: Mapping[str, float]) -> str:
    return ", ".join(f"{ticker}={_roster_value(rounded, ticker):.4f}" for ticker in TOKEN_TICKERS)


def format_influence_narrative(rounded: Mapping[str, float]) -> str:
    parts = []
    for ticker in TOKEN_TICKERS:
        primary, secondary = TOKEN_AXIS_MAP[ticker]
        parts.append(f"{ticker.lower()}→{primary}/{secondary}={_roster_value(rounded, ticker):.4f}")
    return "; ".join(parts)


def format_visual_params(params: VisualParams) -> str:
    return ", ".join(f"{key}={value:.2f}" for key, value in params.as_dict().items())


def build_prompt_text(
    template: PromptTemplate,
    rounded: Mapping[str, float],
    visual_params: VisualParams,
    fingerprint: str,
    seed: str,
    minute_bucket: str,
) -> str:
    lines = [
        template.base_prompt.strip(),
        f"Data snapshot [{minute_bucket}]: {format_token_snapshot(rounded)}.",
        f"Influence narrative: {format_influence_narrative(rounded)}.",
        f"Visual parameters: {format_visual_params(visual_params)}.",
        f"Deterministic controls: fingerprint={fingerprint}, seed={seed}.",
    ]
    return _WHITESPACE.sub(" ", " ".join(lines)).strip()


def estimate_token_count(text: str) -> tuple[int, int]:
    """(char-based, word-based) token estimate: ~4 chars or ~0.75 words per token."""
    words = len(text.split())
    return math.ceil(len(text) / 4), math.ceil(words / 0.75)
