"""Stable Diffusion HTTP API adapter."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from sole_api.adapters.image.base import AbstractImageGenerator
from sole_api.core.errors import ImageGenerationAppError

logger = logging.getLogger(__name__)


class StableDiffusionGenerator(AbstractImageGenerator):
    """Client for a Stable Diffusion server exposing ``POST /api/v1/txt2img``."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        *,
        timeout_seconds: float = 60.0,
        steps: int = 50,
        width: int = 512,
        height: int = 512,
        guidance_scale: float = 7.5,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("Stable Diffusion base_url is required")

        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.steps = steps
        self.width = width
        self.height = height
        self.guidance_scale = guidance_scale
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    @staticmethod
    def _extract_image_url(data: dict[str, Any]) -> str:
        # Servers disagree on the response shape
        images = data.get("images")
        if isinstance(images, list) and images:
            return str(images[0])
        return str(data.get("image_url") or "")

    async def generate_image(self, prompt: str, negative_prompt: str | None = None) -> str:
        body = {
            "prompt": prompt,
            "negative_prompt": negative_prompt or "",
            "steps": self.steps,
            "width": self.width,
            "height": self.height,
            "guidance_scale": self.guidance_scale,
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self._transport
            ) as client:
                response = await client.post(
                    f"{self.base_url}/api/v1/txt2img", json=body, headers=self._headers()
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "image.provider_error",
                extra={"provider": "stable_diffusion", "status_code": exc.response.status_code},
            )
            raise ImageGenerationAppError(
                code="image_provider_error",
                message=f"Failed to generate image: provider returned {exc.response.status_code}",
                details={"provider": "stable_diffusion", "status_code": exc.response.status_code},
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.error(
                "image.provider_unreachable",
                extra={"provider": "stable_diffusion", "error_type": type(exc).__name__},
            )
            raise ImageGenerationAppError(
                code="image_provider_unavailable",
                message=f"Failed to generate image: {exc}",
                details={"provider": "stable_diffusion"},
            ) from exc

        image_url = self._extract_image_url(data) if isinstance(data, dict) else ""
        if not image_url:
            raise ImageGenerationAppError(
                code="image_provider_empty",
                message="Failed to generate image: provider returned no image",
                details={"provider": "stable_diffusion"},
            )
        return image_url
