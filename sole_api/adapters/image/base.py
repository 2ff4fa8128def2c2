import asyncio
import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class AbstractImageGenerator(ABC):
	"""Interface for providers that turn a text prompt into an image URL."""

	@abstractmethod
	async def generate_image(self, prompt: str, negative_prompt: str | None = None) -> str:
		"""Generate one image for the prompt.

		Args:
			prompt: Positive prompt describing the image.
			negative_prompt: Optional description of what to avoid.

		Returns:
			str: Public URL (or data URL) of the generated image.

		Raises:
			ImageGenerationAppError: If the provider call fails or returns no image.
		"""
		...

	async def generate_variations(
		self,
		prompt: str,
		count: int,
		negative_prompt: str | None = None,
	) -> list[str]:
		"""Generate ``count`` images for the same prompt concurrently.

		Failed generations are dropped, so fewer than ``count`` URLs may come
		back. If every generation fails, the first failure is raised.
		"""
		results = await asyncio.gather(
			*(self.generate_image(prompt, negative_prompt) for _ in range(count)),
			return_exceptions=True,
		)
		urls = [result for result in results if isinstance(result, str)]
		failures = [result for result in results if isinstance(result, BaseException)]

		if failures:
			logger.warning(
				"image.variations_partial",
				extra={
					"requested": count,
					"succeeded": len(urls),
					"error_types": sorted({type(exc).__name__ for exc in failures}),
				},
			)
		if not urls and failures:
			raise failures[0]
		return urls
