"""FastAPI dependencies resolving the services built at startup.

Services live on app.state (see main.build_services); tests swap them by
assigning new instances before issuing requests.
"""

from fastapi import Request

from geocities.generation.ambient import AmbientContentService
from geocities.services.city_service import CityService
from geocities.services.page_service import PageService


def get_page_service(request: Request) -> PageService:
    return request.app.state.page_service


def get_ambient_service(request: Request) -> AmbientContentService:
    return request.app.state.ambient_service


def get_city_service(request: Request) -> CityService:
    return request.app.state.city_service
