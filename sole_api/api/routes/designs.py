from __future__ import annotations

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from sole_api.api.dependencies import get_design_service
from sole_api.core.auth import get_current_user_id
from sole_api.schemas.design import (
    DesignListResponse,
    DesignResponse,
    GenerateDesignRequest,
    GenerateVariationsRequest,
    LinkNftRequest,
    Pagination,
)
from sole_api.services.design_service import DesignService

router = APIRouter(prefix="/designs", tags=["Designs"])

DesignServiceDep = Annotated[DesignService, Depends(get_design_service)]
CurrentUserId = Annotated[str, Depends(get_current_user_id)]


@router.post(
    "",
    response_model=DesignResponse,
    status_code=status.HTTP_201_CREATED,
)
async def generate_design(
    body: GenerateDesignRequest,
    user_id: CurrentUserId,
    service: DesignServiceDep,
) -> DesignResponse:
    """Generate a sneaker design for the authenticated user.

    Builds an optimised prompt from the base prompt, style and palette, asks
    the configured image provider for an image and stores the result.

    Raises:
        400 for invalid style or colours, 401 without a valid token and 502
        when the image provider fails.
    """
    design = await service.generate_design(
        user_id=user_id,
        base_prompt=body.base_prompt,
        style=body.style,
        colors=body.colors,
    )
    return DesignResponse.from_domain(design)


@router.post(
    "/variations",
    response_model=list[DesignResponse],
    status_code=status.HTTP_201_CREATED,
)
async def generate_variations(
    body: GenerateVariationsRequest,
    user_id: CurrentUserId,
    service: DesignServiceDep,
) -> list[DesignResponse]:
    """Generate several designs from one prompt in parallel.

    Failed generations are skipped, so fewer than ``count`` designs may be
    returned. 502 when none succeeded.
    """
    designs = await service.generate_variations(
        user_id=user_id,
        base_prompt=body.base_prompt,
        style=body.style,
        colors=body.colors,
        count=body.count,
    )
    return [DesignResponse.from_domain(d) for d in designs]


@router.get("", response_model=DesignListResponse, response_model_exclude_none=True)
def list_designs(
    service: DesignServiceDep,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(alias="pageSize", ge=1, le=100)] = 10,
    style: str | None = None,
    user_id: Annotated[str | None, Query(alias="userId")] = None,
    created_after: Annotated[datetime | None, Query(alias="createdAfter")] = None,
    created_before: Annotated[datetime | None, Query(alias="createdBefore")] = None,
) -> DesignListResponse:
    """List designs, newest first.

    Without filters the result is paginated. With any of ``style``,
    ``userId``, ``createdAfter`` or ``createdBefore`` all matches are
    returned together with their count.
    """
    if style or user_id or created_after or created_before:
        designs = service.search_designs(
            style=style,
            user_id=user_id,
            created_after=created_after,
            created_before=created_before,
        )
        return DesignListResponse(
            data=[DesignResponse.from_domain(d) for d in designs],
            count=len(designs),
        )

    result = service.list_designs(page=page, page_size=page_size)
    return DesignListResponse(
        data=[DesignResponse.from_domain(d) for d in result.designs],
        pagination=Pagination(
            page=result.page,
            page_size=result.page_size,
            total=result.total,
            total_pages=result.total_pages,
        ),
    )


@router.get("/user/{user_id}", response_model=list[DesignResponse])
def list_user_designs(user_id: str, service: DesignServiceDep) -> list[DesignResponse]:
    return [DesignResponse.from_domain(d) for d in service.list_user_designs(user_id)]


@router.get("/{design_id}", response_model=DesignResponse)
def get_design(design_id: str, service: DesignServiceDep) -> DesignResponse:
    return DesignResponse.from_domain(service.get_design(design_id))


@router.put("/{design_id}/nft", response_model=DesignResponse)
def link_nft(
    design_id: str,
    body: LinkNftRequest,
    user_id: CurrentUserId,
    service: DesignServiceDep,
) -> DesignResponse:
    """Attach a minted NFT (metadata URI and token id) to a design you own."""
    design = service.link_nft(
        design_id=design_id,
        user_id=user_id,
        metadata_uri=body.metadata_uri,
        token_id=body.token_id,
    )
    return DesignResponse.from_domain(design)
