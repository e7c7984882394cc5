"""City registry routes: list, get, create."""

from uuid import UUID

from fastapi import APIRouter, Depends

from geocities.api.deps import get_city_service
from geocities.schemas.cities import CityResponse, CreateCityRequest
from geocities.services.city_service import CityService

router = APIRouter()


@router.get("", response_model=list[CityResponse])
async def list_cities(service: CityService = Depends(get_city_service)):
    return await service.list_cities()


@router.get("/{city_id}", response_model=CityResponse)
async def get_city(city_id: UUID, service: CityService = Depends(get_city_service)):
    return await service.get_city(city_id)


@router.post("", status_code=201, response_model=CityResponse)
async def create_city(request: CreateCityRequest, service: CityService = Depends(get_city_service)):
    return await service.create_city(request.name, request.theme, request.vibe)
