"""Runware image inference over HTTP (httpx).

One ``imageInference`` task per request; the image comes back base64-encoded.
"""

from __future__ import annotations

import base64
import binascii
import logging
import uuid
from typing import Any

import httpx

from doom_index.models.errors import ExternalApiError
from doom_index.models.result import Err, Ok, Result
from doom_index.providers.base import GenerationOptions, ImageRequest, ImageResponse

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.runware.ai/v1"
DEFAULT_MODEL = "runware:100@1"


def _error(message: str, status: int | None = None) -> Err:
    return Err(ExternalApiError(provider="runware", message=message, status=status))


def _seed_to_int(seed: str) -> int | None:
    try:
        return int(seed[:8], 16) if seed else None
    except ValueError:
        return None


class RunwareImageProvider:
    name = "runware"

    def __init__(
        self,
        api_key: str,
        client: httpx.AsyncClient | None = None,
        base_url: str = API_BASE_URL,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    def _build_task(self, request: ImageRequest) -> dict[str, Any]:
        task: dict[str, Any] = {
            "taskType": "imageInference",
            "taskUUID": str(uuid.uuid4()),
            "model": request.model or DEFAULT_MODEL,
            "positivePrompt": request.prompt,
            "negativePrompt": request.negative,
            "width": request.width,
            "height": request.height,
            "numberResults": 1,
            "outputFormat": "PNG" if request.format == "png" else "WEBP",
            "outputType": ["base64Data"],
        }
        seed = _seed_to_int(request.seed)
        if seed is not None:
            task["seed"] = seed
        return task

    async def generate(self, request: ImageRequest, options: GenerationOptions | None = None) -> Result[ImageResponse]:
        if not self.api_key:
            return _error("Runware API key is not configured")

        options = options or GenerationOptions()
        task = self._build_task(request)
        logger.debug("runware.generate.start task=%s model=%s", task["taskUUID"], task["model"])

        try:
            response = await self.client.post(
                self.base_url,
                json=[task],
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=options.timeout_s,
            )
        except httpx.TimeoutException:
            return _error(f"Runware API timeout after {options.timeout_s}s")
        except httpx.HTTPError as e:
            return _error(f"Runware request failed: {e}")

        if response.status_code >= 400:
            logger.error("runware.generate.error status=%d body=%s", response.status_code, response.text[:200])
            return _error(f"Runware API error: {response.status_code}", status=response.status_code)

        try:
            payload = response.json()
        except ValueError:
            return _error("Runware returned a non-JSON response", status=response.status_code)

        if isinstance(payload, list):
            items = payload
        else:
            items = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(items, list) or not items:
            return _error("Runware response contained no image data", status=response.status_code)

        image = items[0]
        encoded = image.get("imageBase64Data") if isinstance(image, dict) else None
        if not encoded:
            return _error("Runware returned an image without base64 data", status=response.status_code)

        try:
            data = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError):
            return _error("Runware returned invalid base64 data", status=response.status_code)

        logger.info("runware.generate.success task=%s bytes=%d", image.get("taskUUID"), len(data))
        return Ok(ImageResponse(
            image=data,
            provider_meta={
                "provider": self.name,
                "taskUUID": image.get("taskUUID"),
                "model": task["model"],
                "seed": task.get("seed"),
            },
        ))

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
