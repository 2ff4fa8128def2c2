"""Design generation and retrieval.

Orchestrates prompt building, the image provider and persistence for sneaker
designs. Business rules:
- Inputs are converted to value objects before any provider call.
- A design is persisted only after the provider returned a valid image URL.
- Variations keep whichever generations succeeded, at least one.
- Only the owner of a design may link it to an NFT.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone

from sole_api.adapters.image.base import AbstractImageGenerator
from sole_api.adapters.repositories.base import AbstractDesignRepository, DesignFilters
from sole_api.core.errors import (
    ImageGenerationAppError,
    NotFoundAppError,
    PermissionAppError,
    ValidationAppError,
)
from sole_api.domain.designs import ColorPalette, Design, DesignStyle, ImageUrl
from sole_api.services.prompt_builder import build_negative_prompt, build_prompt

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100
MAX_BASE_PROMPT_CHARS = 500
MAX_VARIATIONS = 4


@dataclass(frozen=True)
class DesignPage:
    designs: list[Design]
    page: int
    page_size: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.page_size else 0


def _to_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class DesignService:
    def __init__(
        self,
        designs: AbstractDesignRepository,
        image_generator: AbstractImageGenerator | None = None,
    ) -> None:
        self._designs = designs
        self._image_generator = image_generator

    def _validate_request(
        self, base_prompt: str, style: str, colors: list[str]
    ) -> tuple[str, DesignStyle, ColorPalette]:
        if not base_prompt or not base_prompt.strip():
            raise ValidationAppError(code="prompt_required", message="Prompt is required")
        if len(base_prompt) > MAX_BASE_PROMPT_CHARS:
            raise ValidationAppError(
                code="prompt_too_long",
                message="Prompt too long",
                details={"field": "basePrompt", "max_value": MAX_BASE_PROMPT_CHARS},
            )

        palette = ColorPalette.of(colors)
        style_vo = DesignStyle.parse(style)

        if self._image_generator is None:
            raise ImageGenerationAppError(
                code="image_provider_not_configured",
                message="Image generation is not configured",
            )

        return build_prompt(base_prompt, style_vo, palette), style_vo, palette

    def _store(
        self,
        user_id: str,
        image_url: ImageUrl,
        palette: ColorPalette,
        style: DesignStyle,
        prompt: str,
    ) -> Design:
        design = Design.create(
            user_id=user_id,
            image_url=image_url,
            palette=palette,
            style=style,
            prompt=prompt,
        )
        if not design.is_valid():
            raise ValidationAppError(
                code="design_invalid", message="Generated design is invalid"
            )

        self._designs.save(design)
        logger.info(
            "design.generated",
            extra={"design_id": design.id, "user_id": user_id, "style": style.value},
        )
        return design

    async def generate_design(
        self,
        user_id: str,
        base_prompt: str,
        style: str,
        colors: list[str],
    ) -> Design:
        """Generate an image for the prompt and persist the resulting design.

        Raises:
            ValidationAppError: For an empty/too long prompt, unknown style or
                bad palette.
            ImageGenerationAppError: When the provider fails or returns a
                malformed URL.
        """
        prompt, style_vo, palette = self._validate_request(base_prompt, style, colors)

        raw_url = await self._image_generator.generate_image(prompt, build_negative_prompt())
        try:
            image_url = ImageUrl(raw_url)
        except ValidationAppError as exc:
            raise ImageGenerationAppError(
                code="image_provider_bad_url",
                message="Image provider returned an invalid URL",
            ) from exc

        return self._store(user_id, image_url, palette, style_vo, prompt)

    async def generate_variations(
        self,
        user_id: str,
        base_prompt: str,
        style: str,
        colors: list[str],
        count: int = 2,
    ) -> list[Design]:
        """Generate up to ``count`` designs from one prompt.

        Generations that fail, or come back with a malformed URL, are left
        out. At least one design is always returned.

        Raises:
            ValidationAppError: For the same inputs ``generate_design``
                rejects, or a ``count`` outside 1..MAX_VARIATIONS.
            ImageGenerationAppError: When no generation succeeded.
        """
        if count < 1 or count > MAX_VARIATIONS:
            raise ValidationAppError(
                code="variation_count_invalid",
                message=f"Count must be between 1 and {MAX_VARIATIONS}",
                details={"field": "count", "min_value": 1, "max_value": MAX_VARIATIONS},
            )
        prompt, style_vo, palette = self._validate_request(base_prompt, style, colors)

        raw_urls = await self._image_generator.generate_variations(
            prompt, count, build_negative_prompt()
        )
        image_urls: list[ImageUrl] = []
        for raw_url in raw_urls:
            try:
                image_urls.append(ImageUrl(raw_url))
            except ValidationAppError:
                logger.warning("design.variation_bad_url", extra={"user_id": user_id})

        if not image_urls:
            raise ImageGenerationAppError(
                code="image_provider_bad_url",
                message="Image provider returned an invalid URL",
            )

        designs = [
            self._store(user_id, image_url, palette, style_vo, prompt)
            for image_url in image_urls
        ]
        logger.info(
            "design.variations_generated",
            extra={"user_id": user_id, "requested": count, "generated": len(designs)},
        )
        return designs

    def get_design(self, design_id: str) -> Design:
        design = self._designs.find_by_id(design_id)
        if design is None:
            raise NotFoundAppError(
                code="design_not_found",
                message="Design not found",
                details={"value": design_id},
            )
        return design

    def list_user_designs(self, user_id: str) -> list[Design]:
        return self._designs.find_by_user_id(user_id)

    def list_designs(self, page: int = 1, page_size: int = 10) -> DesignPage:
        if page < 1:
            raise ValidationAppError(
                code="page_invalid",
                message="Page must be greater than 0",
                details={"field": "page", "min_value": 1},
            )
        if page_size < 1 or page_size > MAX_PAGE_SIZE:
            raise ValidationAppError(
                code="page_size_invalid",
                message=f"Page size must be between 1 and {MAX_PAGE_SIZE}",
                details={"field": "pageSize", "min_value": 1, "max_value": MAX_PAGE_SIZE},
            )

        designs, total = self._designs.find_page(page, page_size)
        return DesignPage(designs=designs, page=page, page_size=page_size, total=total)

    def search_designs(
        self,
        *,
        style: str | None = None,
        user_id: str | None = None,
        created_after: datetime | None = None,
        created_before: datetime | None = None,
    ) -> list[Design]:
        filters = DesignFilters(
            style=DesignStyle.parse(style) if style else None,
            user_id=user_id,
            created_after=_to_utc(created_after),
            created_before=_to_utc(created_before),
        )
        return self._designs.find_by_filters(filters)

    def link_nft(self, design_id: str, user_id: str, metadata_uri: str, token_id: int) -> Design:
        """Record the NFT minted for a design.

        Raises:
            NotFoundAppError: If the design doesn't exist.
            PermissionAppError: If ``user_id`` doesn't own the design.
        """
        design = self.get_design(design_id)
        if design.user_id != user_id:
            raise PermissionAppError(
                code="design_not_owned",
                message="Only the owner of a design can link it to an NFT",
            )

        design.link_nft(metadata_uri, token_id)
        self._designs.save(design)
        logger.info(
            "design.nft_linked",
            extra={"design_id": design.id, "token_id": token_id},
        )
        return design
