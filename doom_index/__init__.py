"""Doom Index — market-cap driven generative art engine."""

__version__ = "0.1.0"
