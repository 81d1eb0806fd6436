"""Mock provider — logs the request and returns an empty image. Tests and local runs only."""

from __future__ import annotations

import logging

from doom_index.engine.prompt import estimate_token_count
from doom_index.models.result import Ok, Result
from doom_index.providers.base import GenerationOptions, ImageRequest, ImageResponse

logger = logging.getLogger(__name__)


class MockImageProvider:
    name = "mock"

    def __init__(self, image: bytes = b"") -> None:
        self.image = image
        self.requests: list[ImageRequest] = []

    async def generate(self, request: ImageRequest, options: GenerationOptions | None = None) -> Result[ImageResponse]:
        self.requests.append(request)
        chars, words = estimate_token_count(request.prompt)
        logger.info(
            "mock.generate %dx%d seed=%s model=%s tokens~%d/%d",
            request.width,
            request.height,
            request.seed,
            request.model,
            chars,
            words,
        )
        return Ok(ImageResponse(image=self.image, provider_meta={"mock": True}))

    async def aclose(self) -> None:
        return None
