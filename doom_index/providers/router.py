"""Provider selection — by configured name, or per request model for ``smart``."""

from __future__ import annotations

from doom_index.config import Settings
from doom_index.models.result import Result
from doom_index.providers.base import GenerationOptions, ImageProvider, ImageRequest, ImageResponse
from doom_index.providers.mock import MockImageProvider
from doom_index.providers.runware import RunwareImageProvider


def get_provider_for_model(model: str | None) -> str:
    """Runware serves AIR identifiers (``runware:100@1``) and any unknown model."""
    if model == "mock":
        return "mock"
    return "runware"


class SmartImageProvider:
    """Routes each request to the provider that serves its model."""

    name = "smart"

    def __init__(self, providers: dict[str, ImageProvider]) -> None:
        self.providers = providers

    async def generate(self, request: ImageRequest, options: GenerationOptions | None = None) -> Result[ImageResponse]:
        provider = self.providers[get_provider_for_model(request.model)]
        return await provider.generate(request, options)

    async def aclose(self) -> None:
        for provider in self.providers.values():
            await provider.aclose()


def resolve_provider(settings: Settings) -> ImageProvider:
    name = settings.image_provider
    if name == "mock":
        return MockImageProvider()
    if name == "runware":
        return RunwareImageProvider(api_key=settings.runware_api_key)
    return SmartImageProvider({
        "runware": RunwareImageProvider(api_key=settings.runware_api_key),
        "mock": MockImageProvider(),
    })
