"""Doom Index signal engine — pure, deterministic market-signal transforms."""

from doom_index.engine.context import SignalContext
from doom_index.engine.mapping import VisualParams, map_to_visual_params
from doom_index.engine.pipeline import SignalPipeline, create_pipeline
from doom_index.engine.tokens import TOKEN_TICKERS, TOKENS

__all__ = [
    "SignalContext",
    "VisualParams",
    "map_to_visual_params",
    "SignalPipeline",
    "create_pipeline",
    "TOKEN_TICKERS",
    "TOKENS",
]
