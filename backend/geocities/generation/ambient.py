"""AmbientContentService: cache-first generation of announcements, newsletters, radio blurbs.

Flow per request:
1. GenerationCache.get_cached(city, kind); a hit returns cached=True with no model call
2. On miss: load the city and (for announcement/newsletter) its newest pages
3. Build the prompt, call the model, store the result, return cached=False

A failed model call raises UpstreamGenerationError and stores nothing.
"""

from datetime import UTC, datetime
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from geocities.core.exceptions import NotFoundError
from geocities.db.models.city import City
from geocities.db.models.page import Page
from geocities.generation.cache import BACKEND_ERRORS, GenerationCache
from geocities.generation.prompts import (
    CityContext,
    PageSummary,
    build_ambient_prompt,
    page_sample_size,
)
from geocities.llm.client import LanguageModel
from geocities.schemas.ai import ArtifactKind, CachedArtifactsResponse, GenerationContext, GenerationResult

logger = structlog.get_logger(__name__)


class AmbientContentService:
    """Serves the three ambient artifact kinds through the generation cache."""

    def __init__(
        self,
        cache: GenerationCache,
        llm: LanguageModel,
        session_factory: async_sessionmaker[AsyncSession],
    ):
        self.cache = cache
        self.llm = llm
        self.session_factory = session_factory

    async def generate(
        self,
        kind: ArtifactKind,
        city_id: UUID,
        context: GenerationContext | None = None,
    ) -> GenerationResult:
        """Return the current artifact for (city, kind), generating it on a miss.

        Raises:
            NotFoundError: city does not exist (only checked on a miss)
            UpstreamGenerationError: model call failed; nothing is cached
        """
        cached = await self.cache.get_cached(city_id, kind)
        if cached is not None:
            return GenerationResult(
                city_id=city_id,
                kind=kind,
                text=cached,
                cached=True,
                generated_at=datetime.now(UTC),
            )

        city_context, recent_pages = await self._load_context(city_id, kind, context)
        prompt = build_ambient_prompt(kind, city_context, recent_pages)

        text = await self.llm.complete(prompt)

        try:
            await self.cache.store(city_id, kind, text)
        except BACKEND_ERRORS as exc:
            logger.warning(
                "generation_cache_store_failed",
                city_id=str(city_id),
                kind=kind.value,
                error=str(exc),
                error_type=type(exc).__name__,
            )

        return GenerationResult(
            city_id=city_id,
            kind=kind,
            text=text,
            cached=False,
            generated_at=datetime.now(UTC),
        )

    async def get_cached_artifacts(self, city_id: UUID) -> CachedArtifactsResponse:
        return await self.cache.get_cached_artifacts(city_id)

    async def _load_context(
        self,
        city_id: UUID,
        kind: ArtifactKind,
        overrides: GenerationContext | None,
    ) -> tuple[CityContext, list[PageSummary]]:
        async with self.session_factory() as session:
            city = await session.get(City, city_id)
            if city is None:
                raise NotFoundError("City not found")

            recent_pages: list[PageSummary] = []
            sample = page_sample_size(kind)
            if sample:
                result = await session.execute(
                    select(Page)
                    .where(Page.city_id == city_id)
                    .order_by(Page.created_at.desc())
                    .limit(sample)
                )
                recent_pages = [
                    PageSummary(title=p.title, type=p.type, content=p.content[:300])
                    for p in result.scalars().all()
                ]

        overrides = overrides or GenerationContext()
        city_context = CityContext(
            name=overrides.city_name or city.name,
            theme=overrides.theme or city.theme,
            vibe=overrides.vibe or city.vibe,
        )
        return city_context, recent_pages
