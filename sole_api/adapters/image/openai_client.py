"""OpenAI Images adapter."""

from openai import AsyncOpenAI

from sole_api.adapters.image.base import AbstractImageGenerator
from sole_api.core.errors import ImageGenerationAppError


class OpenAIImageGenerator(AbstractImageGenerator):
    """Client for OpenAI image generation.

    Uses the official OpenAI Python SDK with async support. The images API has
    no negative prompt, so it is appended as an "avoid" clause.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "dall-e-3",
        base_url: str | None = None,
        timeout_seconds: float = 60.0,
        size: str = "1024x1024",
    ) -> None:
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
        )
        self.model = model
        self.size = size

    async def generate_image(self, prompt: str, negative_prompt: str | None = None) -> str:
        full_prompt = f"{prompt}. Avoid: {negative_prompt}" if negative_prompt else prompt

        try:
            response = await self.client.images.generate(
                model=self.model,
                prompt=full_prompt,
                n=1,
                size=self.size,
                response_format="url",
            )
        except Exception as exc:
            raise ImageGenerationAppError(
                code="image_provider_error",
                message=f"OpenAI API error: {exc}",
                details={"provider": "openai"},
            ) from exc

        image = response.data[0] if response.data else None
        if image is not None and image.url:
            return image.url
        raise ImageGenerationAppError(
            code="image_provider_empty",
            message="Failed to generate image: provider returned no image",
            details={"provider": "openai"},
        )
