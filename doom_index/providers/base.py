"""Image synthesis provider contract."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from doom_index.models.result import Result


@dataclass(frozen=True)
class ImageRequest:
    prompt: str
    negative: str
    width: int = 1024
    height: int = 1024
    format: str = "webp"
    seed: str = ""
    model: str | None = None


@dataclass
class ImageResponse:
    image: bytes
    provider_meta: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class GenerationOptions:
    timeout_s: float = 30.0


class ImageProvider(Protocol):
    name: str

    async def generate(self, request: ImageRequest, options: GenerationOptions | None = None) -> Result[ImageResponse]:
        ...

    async def aclose(self) -> None:
        ...
