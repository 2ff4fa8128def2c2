"""Pydantic schemas for design endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from sole_api.domain.designs import Design
from sole_api.schemas.common import CamelModel


class GenerateDesignRequest(CamelModel):
    """Body of ``POST /designs``. The owner comes from the access token."""

    base_prompt: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="Free-text description of the sneaker.",
    )
    style: str = Field(
        ...,
        description="One of: futuristic, retro, minimalist, sporty, luxury, streetwear.",
    )
    colors: list[str] = Field(
        ...,
        min_length=1,
        max_length=10,
        description="Hex colours; the first one is the primary colour.",
    )


class GenerateVariationsRequest(GenerateDesignRequest):
    """Body of ``POST /designs/variations``."""

    count: int = Field(2, ge=1, le=4, description="Number of designs to generate.")


class LinkNftRequest(CamelModel):
    metadata_uri: str = Field(..., min_length=1, description="Token metadata URI (e.g., ipfs://...).")
    token_id: int = Field(..., ge=0, description="On-chain token id.")


class DesignResponse(CamelModel):
    id: str
    user_id: str
    image_url: str
    style: str
    colors: list[str]
    prompt: str
    metadata_uri: str | None = None
    token_id: int | None = None
    created_at: datetime

    @classmethod
    def from_domain(cls, design: Design) -> "DesignResponse":
        return cls(
            id=design.id,
            user_id=design.user_id,
            image_url=design.image_url.value,
            style=design.style.value,
            colors=list(design.palette.colors),
            prompt=design.prompt,
            metadata_uri=design.metadata_uri,
            token_id=design.token_id,
            created_at=design.created_at,
        )


class Pagination(CamelModel):
    page: int
    page_size: int
    total: int
    total_pages: int


class DesignListResponse(CamelModel):
    """Paginated listing, or a filtered search carrying ``count`` instead."""

    data: list[DesignResponse]
    pagination: Pagination | None = None
    count: int | None = None
