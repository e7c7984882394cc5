from fastapi import APIRouter

from geocities.api.routes import ai, cities, content, health

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(cities.router, prefix="/cities", tags=["cities"])
api_router.include_router(content.router, prefix="/content", tags=["content"])
api_router.include_router(ai.router, prefix="/ai", tags=["ai"])
