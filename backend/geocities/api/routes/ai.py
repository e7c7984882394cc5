"""Ambient AI content routes: cached snapshot and cache-first generation."""

from uuid import UUID

from fastapi import APIRouter, Body, Depends

from geocities.api.deps import get_ambient_service
from geocities.generation.ambient import AmbientContentService
from geocities.schemas.ai import (
    ArtifactKind,
    CachedArtifactsResponse,
    GenerationContext,
    GenerationResult,
)

router = APIRouter()


@router.get("/cached/{city_id}", response_model=CachedArtifactsResponse)
async def get_cached_content(city_id: UUID, service: AmbientContentService = Depends(get_ambient_service)):
    """Current cached artifact per kind; never triggers generation."""
    return await service.get_cached_artifacts(city_id)


@router.post("/{kind}/{city_id}", response_model=GenerationResult)
async def generate_ambient_content(
    kind: ArtifactKind,
    city_id: UUID,
    context: GenerationContext | None = Body(default=None),
    service: AmbientContentService = Depends(get_ambient_service),
):
    """Serve announcement / newsletter / radio from cache, generating on a miss."""
    return await service.generate(kind, city_id, context)
