"""Image generation adapter layer - abstracts over image providers."""

from sole_api.adapters.image.base import AbstractImageGenerator
from sole_api.adapters.image.factory import create_image_generator
from sole_api.adapters.image.openai_client import OpenAIImageGenerator
from sole_api.adapters.image.stable_diffusion import StableDiffusionGenerator

__all__ = [
    "AbstractImageGenerator",
    "OpenAIImageGenerator",
    "StableDiffusionGenerator",
    "create_image_generator",
]
