"""Page routes: CRUD over a city's pages with asynchronous provenance tagging.

POST returns 201 immediately. For write-myself pages the response carries
content_tag="pending"; the final tag lands on the stored page once the
background classification finishes.
"""

from uuid import UUID

from fastapi import APIRouter, Depends

from geocities.api.deps import get_page_service
from geocities.schemas.pages import (
    ContentMode,
    CreatePageRequest,
    PageResponse,
    UpdatePageRequest,
)
from geocities.services.page_service import PageService

router = APIRouter()


@router.get("/{city_id}", response_model=list[PageResponse])
async def list_pages(city_id: UUID, service: PageService = Depends(get_page_service)):
    return await service.list_pages(city_id)


@router.get("/{city_id}/{page_id}", response_model=PageResponse)
async def get_page(city_id: UUID, page_id: UUID, service: PageService = Depends(get_page_service)):
    return await service.get_page(city_id, page_id)


@router.post("/{city_id}", status_code=201, response_model=PageResponse)
async def create_page(
    city_id: UUID,
    request: CreatePageRequest,
    service: PageService = Depends(get_page_service),
):
    # The payload field depends on the mode; an unknown mode is rejected by the service
    payload = request.prompt if request.content_mode == ContentMode.AI_GENERATE else request.content
    return await service.create_page(
        city_id=city_id,
        title=request.title,
        page_type=request.type,
        content_mode=request.content_mode,
        payload=payload,
    )


@router.put("/{city_id}/{page_id}", response_model=PageResponse)
async def update_page(
    city_id: UUID,
    page_id: UUID,
    request: UpdatePageRequest,
    service: PageService = Depends(get_page_service),
):
    return await service.update_page(city_id, page_id, title=request.title, prompt=request.prompt)


@router.delete("/{city_id}/{page_id}")
async def delete_page(city_id: UUID, page_id: UUID, service: PageService = Depends(get_page_service)):
    await service.delete_page(city_id, page_id)
    return {"message": "Page deleted successfully"}
