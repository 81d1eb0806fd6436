"""Image synthesis providers."""

from doom_index.providers.base import GenerationOptions, ImageProvider, ImageRequest, ImageResponse
from doom_index.providers.mock import MockImageProvider
from doom_index.providers.router import SmartImageProvider, resolve_provider
from doom_index.providers.runware import RunwareImageProvider

__all__ = [
    "GenerationOptions",
    "ImageProvider",
    "ImageRequest",
    "ImageResponse",
    "MockImageProvider",
    "RunwareImageProvider",
    "SmartImageProvider",
    "resolve_provider",
]
