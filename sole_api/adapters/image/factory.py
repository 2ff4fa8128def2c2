"""Factory for creating image generator instances."""

from sole_api.adapters.image.base import AbstractImageGenerator
from sole_api.adapters.image.openai_client import OpenAIImageGenerator
from sole_api.adapters.image.stable_diffusion import StableDiffusionGenerator
from sole_api.core.config import ImageSettings, settings
from sole_api.core.errors import ValidationAppError


def create_image_generator(image_settings: ImageSettings | None = None) -> AbstractImageGenerator:
    """Instantiate the configured image provider.

    Returns:
        AbstractImageGenerator: Configured generator.

    Raises:
        ValidationAppError: If provider-specific requirements are not met.
    """
    cfg = image_settings or settings.image
    provider = cfg.provider.lower()

    if provider == "stable_diffusion":
        if not cfg.base_url:
            raise ValidationAppError(
                code="image_missing_base_url",
                message="Stable Diffusion provider requires IMAGE_BASE_URL environment variable",
            )
        return StableDiffusionGenerator(
            base_url=cfg.base_url,
            api_key=cfg.api_key,
            timeout_seconds=cfg.timeout_seconds,
            steps=cfg.steps,
            width=cfg.width,
            height=cfg.height,
            guidance_scale=cfg.guidance_scale,
        )

    if provider == "openai":
        if not cfg.api_key:
            raise ValidationAppError(
                code="image_missing_api_key",
                message="OpenAI provider requires IMAGE_API_KEY environment variable",
            )
        return OpenAIImageGenerator(
            api_key=cfg.api_key,
            model=cfg.model,
            base_url=cfg.base_url,
            timeout_seconds=cfg.timeout_seconds,
        )

    raise ValidationAppError(
        code="image_unknown_provider",
        message=(
            f"Unknown image provider: '{provider}'. Supported providers: stable_diffusion, openai"
        ),
    )
