"""Prompt construction for sneaker image generation."""

from __future__ import annotations

from sole_api.domain.designs import ColorPalette, DesignStyle

QUALITY_KEYWORDS = "high quality, detailed, professional, 4k, 8k"
SUBJECT_KEYWORDS = "sneaker, shoe, footwear"

STYLE_KEYWORDS: dict[DesignStyle, str] = {
    DesignStyle.FUTURISTIC: "futuristic, cyberpunk, sci-fi, advanced technology",
    DesignStyle.RETRO: "retro, vintage, 80s, 90s, classic",
    DesignStyle.MINIMALIST: "minimalist, clean, simple, elegant",
    DesignStyle.SPORTY: "sporty, athletic, performance, dynamic",
    DesignStyle.LUXURY: "luxury, premium, high-end, sophisticated",
    DesignStyle.STREETWEAR: "streetwear, urban, casual, trendy",
}

NEGATIVE_KEYWORDS = (
    "blurry",
    "low quality",
    "distorted",
    "deformed",
    "bad anatomy",
    "watermark",
    "text",
    "logo",
)


def color_prompt(palette: ColorPalette) -> str:
    prompt = f"primary color {palette.primary}"
    if palette.secondary:
        prompt += f", accent colors {', '.join(palette.secondary)}"
    return prompt


def build_prompt(base_prompt: str, style: DesignStyle, palette: ColorPalette) -> str:
    """Combine the user's prompt with style, colour and quality keywords.

    Empty parts are skipped so a blank base prompt doesn't leave a dangling comma.
    """
    parts = [
        base_prompt.strip(),
        STYLE_KEYWORDS.get(style, ""),
        color_prompt(palette),
        QUALITY_KEYWORDS,
        SUBJECT_KEYWORDS,
    ]
    return ", ".join(part for part in parts if part)


def build_negative_prompt() -> str:
    return ", ".join(NEGATIVE_KEYWORDS)
