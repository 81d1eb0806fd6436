"""Token roster — the fixed, ordered set of tracked tokens.

Roster membership and order never change at runtime. Every per-token map the
engine produces has exactly one entry per ticker, in roster order.
"""

from __future__ import annotations

from dataclasses import dataclass

ROUND_DECIMALS = 6


@dataclass(frozen=True)
class TokenConfig:
    ticker: str
    address: str
    supply: float
    # (primary, secondary) visual parameter driven by this token
    axes: tuple[str, str]
    # (min, max) market cap window for normalization
    normalization: tuple[float, float] = (0.0, 2_000_000_000.0)


@dataclass(frozen=True)
class TokenDescription:
    title: str
    description: str
    motif: str


TOKENS: tuple[TokenConfig, ...] = (
    TokenConfig("CO2", "DffFSfxSBKFp93geSsV1LvNMVyqURKVTiGkhA1DsMgcU", 1_000_000_000, ("fog_density", "sky_tint")),
    TokenConfig("ICE", "4p1eFvFLxKPYgYrrv69UD4ATZBAceaTBasoxTXW8tiYa", 1_000_000_000, ("reflectivity", "blue_balance")),
    TokenConfig(
        "FOREST", "CNAuVvVhi9pRsku7Z4UyMJUnd7ystQmR22e7N1WVtgCu", 1_000_000_000, ("vegetation_density", "organic_pattern")
    ),
    TokenConfig("NUKE", "4VSuakewWBzHQLc3Z4Lpf2sCVLEDx6B1cXhMeWyT8Uap", 1_000_000_000, ("radiation_glow", "debris_intensity")),
    TokenConfig(
        "MACHINE", "FNWaFsgdCu4jFhvsF4cwYFfz2sYcM9U1gvXbBLPvdA5Z", 1_000_000_000, ("mechanical_pattern", "metallic_ratio")
    ),
    TokenConfig(
        "PANDEMIC", "2WLeZcqGnSu69oqHxLtpubbHP9RWwagjM7ny4RBF7sbe", 1_000_000_000, ("fractal_density", "bioluminescence")
    ),
    TokenConfig("FEAR", "CmfGCD7MFFL8P5TdeCoPMc9jbu18T88XEesv7ZzR7FGX", 1_000_000_000, ("shadow_depth", "red_highlight")),
    TokenConfig("HOPE", "9CQSWPqP69h1gVnqpQVYsQBByzP9Tyo6dgNqcjyCmW18", 1_000_000_000, ("light_intensity", "warm_hue")),
)

TOKEN_TICKERS: tuple[str, ...] = tuple(t.ticker for t in TOKENS)

TOKEN_CONFIG_MAP: dict[str, TokenConfig] = {t.ticker: t for t in TOKENS}

TOKEN_AXIS_MAP: dict[str, tuple[str, str]] = {t.ticker: t.axes for t in TOKENS}

TOKEN_DESCRIPTIONS: dict[str, TokenDescription] = {
    "CO2": TokenDescription(
        "CO2 - Pollution and Heat",
        "Changes the color of the sky and the density of the haze, veiling the entire city.",
        "Toxic haze thickens across the canvas.",
    ),
    "ICE": TokenDescription(
        "ICE - Ice Sheets and Cooling",
        "Increases reflective light and cool tones, turning the world pale blue and frozen.",
        "Glacial gleam fractures the ambient light.",
    ),
    "FOREST": TokenDescription(
        "FOREST - Forests and Life",
        "Enhances organic details and green density, reviving vitality.",
        "Verdant growth threads through the ruins.",
    ),
    "NUKE": TokenDescription(
        "NUKE - Destruction and War",
        "Scatters flashes and ash particles, heightening apocalyptic tension.",
        "Nuclear ash ignites the horizon.",
    ),
    "MACHINE": TokenDescription(
        "MACHINE - Mechanical Rule",
        "Intensifies mechanical lines and structures, depicting artificial dominance.",
        "Mechanical lattice tightens its grip.",
    ),
    "PANDEMIC": TokenDescription(
        "PANDEMIC - Biological Threat",
        "Spreads particle-like glowing effects, visualizing the expansion of infection.",
        "Bioluminescent spores continue to bloom.",
    ),
    "FEAR": TokenDescription(
        "FEAR - Darkness and Surveillance",
        "Emphasizes shadows and contrast, creating a suffocating sense of tension.",
        "Oppressive shadows watch from every corner.",
    ),
    "HOPE": TokenDescription(
        "HOPE - Light and Regeneration",
        "Increases warm colors and brightness, instilling signs of rebirth amid ruin.",
        "Resilient light seeps back into the void.",
    ),
}


def is_known_ticker(ticker: str) -> bool:
    return ticker in TOKEN_CONFIG_MAP


def roster_map(values: dict[str, float] | None = None, default: float = 0.0) -> dict[str, float]:
    """Project ``values`` onto the roster: roster order, missing tickers → ``default``."""
    values = values or {}
    return {ticker: values.get(ticker, default) for ticker in TOKEN_TICKERS}
