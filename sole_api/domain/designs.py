"""Design-generation value objects and entity."""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from urllib.parse import urlparse

from sole_api.core.errors import ValidationAppError

HEX_COLOR_PATTERN = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")
MAX_PALETTE_COLORS = 10


class DesignStyle(str, Enum):
    FUTURISTIC = "futuristic"
    RETRO = "retro"
    MINIMALIST = "minimalist"
    SPORTY = "sporty"
    LUXURY = "luxury"
    STREETWEAR = "streetwear"

    @classmethod
    def parse(cls, raw: str | None) -> "DesignStyle":
        """Case-insensitive lookup by value."""
        normalized = (raw or "").strip().lower()
        for style in cls:
            if style.value == normalized:
                return style
        allowed = [style.value for style in cls]
        raise ValidationAppError(
            code="design_style_invalid",
            message=f"Invalid design style: {raw}. Must be one of: {', '.join(allowed)}",
            details={"field": "style", "allowed": allowed},
        )


@dataclass(frozen=True)
class ColorPalette:
    """Ordered hex colours; the first one is the primary colour."""

    colors: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.colors:
            raise ValidationAppError(
                code="palette_empty",
                message="Color palette must have at least one color",
                details={"field": "colors", "min_value": 1},
            )
        if len(self.colors) > MAX_PALETTE_COLORS:
            raise ValidationAppError(
                code="palette_too_large",
                message=f"Color palette cannot have more than {MAX_PALETTE_COLORS} colors",
                details={"field": "colors", "max_value": MAX_PALETTE_COLORS},
            )
        for color in self.colors:
            if not isinstance(color, str) or not HEX_COLOR_PATTERN.match(color):
                raise ValidationAppError(
                    code="palette_color_invalid",
                    message=f"Invalid color format: {color}. Must be hex color (e.g., #FF0000)",
                    details={"field": "colors", "value": str(color)},
                )

    @classmethod
    def of(cls, colors: list[str] | tuple[str, ...]) -> "ColorPalette":
        return cls(tuple(colors))

    @property
    def primary(self) -> str:
        return self.colors[0]

    @property
    def secondary(self) -> tuple[str, ...]:
        return self.colors[1:]


@dataclass(frozen=True)
class ImageUrl:
    """Absolute http(s) URL pointing at a generated image."""

    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValidationAppError(code="image_url_empty", message="Image URL cannot be empty")

        parsed = urlparse(self.value)
        if not parsed.scheme or not parsed.netloc:
            raise ValidationAppError(
                code="image_url_invalid",
                message=f"Invalid URL format: {self.value}",
            )
        if parsed.scheme not in ("http", "https"):
            raise ValidationAppError(
                code="image_url_scheme",
                message="Image URL must use HTTP or HTTPS protocol",
            )

    def __str__(self) -> str:
        return self.value


@dataclass
class Design:
    """A generated design owned by one user.

    NFT fields stay empty until ``link_nft`` records a minted token.
    """

    id: str
    user_id: str
    image_url: ImageUrl
    palette: ColorPalette
    style: DesignStyle
    prompt: str
    metadata_uri: str | None = None
    token_id: int | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def create(
        cls,
        user_id: str,
        image_url: ImageUrl,
        palette: ColorPalette,
        style: DesignStyle,
        prompt: str,
    ) -> "Design":
        return cls(
            id=str(uuid.uuid4()),
            user_id=user_id,
            image_url=image_url,
            palette=palette,
            style=style,
            prompt=prompt,
        )

    @property
    def is_minted(self) -> bool:
        return self.token_id is not None

    def link_nft(self, metadata_uri: str, token_id: int) -> None:
        if not metadata_uri or not metadata_uri.strip():
            raise ValidationAppError(
                code="metadata_uri_empty", message="Metadata URI cannot be empty"
            )
        if token_id < 0:
            raise ValidationAppError(
                code="token_id_invalid",
                message="Token id must be a non-negative integer",
                details={"field": "tokenId", "min_value": 0},
            )
        self.metadata_uri = metadata_uri.strip()
        self.token_id = token_id

    def is_valid(self) -> bool:
        return bool(str(self.image_url)) and bool(self.prompt.strip()) and bool(self.palette.colors)
