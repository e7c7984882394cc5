"""Tests for AmbientContentService cache-first generation."""
import asyncio
import uuid

import pytest
from sqlalchemy import select

from geocities.core.exceptions import NotFoundError, UpstreamGenerationError
from geocities.db.models.ai_generation import AIGeneration
from geocities.db.models.page import Page
from geocities.generation.ambient import AmbientContentService
from geocities.generation.cache import GenerationCache
from geocities.llm.fake import FakeLanguageModel
from geocities.schemas.ai import ArtifactKind, GenerationContext

pytestmark = pytest.mark.unit


@pytest.fixture
def service(cache, fake_llm, session_factory) -> AmbientContentService:
    return AmbientContentService(cache, fake_llm, session_factory)


async def _add_page(session_factory, city_id, title: str, page_type: str = "blog") -> None:
    from geocities.utils.slug import generate_slug

    async with session_factory() as session:
        session.add(
            Page(
                city_id=city_id,
                title=title,
                title_slug=generate_slug(title),
                type=page_type,
                content_mode="write-myself",
                content_tag="user-written",
                content=f"{title} is my corner of the web. " * 4,
            )
        )
        await session.commit()


class TestCacheFirst:
    async def test_first_call_generates_and_second_is_served_from_cache(self, service, fake_llm, city):
        first = await service.generate(ArtifactKind.ANNOUNCEMENT, city.id)
        second = await service.generate(ArtifactKind.ANNOUNCEMENT, city.id)

        assert first.cached is False
        assert second.cached is True
        assert second.text == first.text
        assert fake_llm.call_count == 1

    async def test_regenerates_after_window(self, service, fake_llm, city, clock):
        await service.generate(ArtifactKind.RADIO, city.id)
        clock.advance(hours=24)
        result = await service.generate(ArtifactKind.RADIO, city.id)

        assert result.cached is False
        assert fake_llm.call_count == 2

    async def test_kinds_are_cached_separately(self, service, fake_llm, city):
        for kind in ArtifactKind:
            await service.generate(kind, city.id)

        assert fake_llm.call_count == 3
        snapshot = await service.get_cached_artifacts(city.id)
        assert snapshot.announcement and snapshot.newsletter and snapshot.radio


class TestFailures:
    async def test_model_failure_caches_nothing(self, cache, session_factory, city):
        failing = FakeLanguageModel(scenario="llm_failure")
        service = AmbientContentService(cache, failing, session_factory)

        with pytest.raises(UpstreamGenerationError):
            await service.generate(ArtifactKind.NEWSLETTER, city.id)

        assert await cache.get_cached(city.id, ArtifactKind.NEWSLETTER) is None

    async def test_unknown_city(self, service, fake_llm):
        with pytest.raises(NotFoundError):
            await service.generate(ArtifactKind.RADIO, uuid.uuid4())
        assert fake_llm.call_count == 0


class TestPromptContext:
    async def test_cold_start_city_gets_grand_opening(self, service, fake_llm, city):
        await service.generate(ArtifactKind.ANNOUNCEMENT, city.id)
        assert "grand opening" in fake_llm.prompts[-1]

    async def test_steady_state_names_recent_pages(self, service, fake_llm, city, session_factory):
        await _add_page(session_factory, city.id, "Chrome Dreams")
        await _add_page(session_factory, city.id, "Synthwave Shack", "music")

        await service.generate(ArtifactKind.ANNOUNCEMENT, city.id)

        prompt = fake_llm.prompts[-1]
        assert '"Chrome Dreams" (blog)' in prompt
        assert '"Synthwave Shack" (music)' in prompt
        assert "grand opening" not in prompt

    async def test_context_overrides_stored_city(self, service, fake_llm, city):
        await service.generate(ArtifactKind.RADIO, city.id, GenerationContext(vibe="dreamy"))
        assert "dreamy vibe" in fake_llm.prompts[-1]
        assert "edgy" not in fake_llm.prompts[-1]


class TestConcurrentMisses:
    async def test_both_misses_generate_and_latest_row_wins(self, session_factory, city, clock, until_generating):
        def ticking_clock():
            clock.advance(seconds=1)
            return clock.now

        gate = asyncio.Event()
        llm = FakeLanguageModel(generation_gate=gate)
        cache = GenerationCache(session_factory, clock=ticking_clock)
        service = AmbientContentService(cache, llm, session_factory)

        first = asyncio.create_task(service.generate(ArtifactKind.NEWSLETTER, city.id))
        second = asyncio.create_task(service.generate(ArtifactKind.NEWSLETTER, city.id))
        await until_generating(llm, 2)
        gate.set()
        results = await asyncio.gather(first, second)

        assert [r.cached for r in results] == [False, False]
        assert llm.generation_calls == 2
        assert len({r.text for r in results}) == 2

        async with session_factory() as session:
            rows = (
                await session.execute(
                    select(AIGeneration).where(AIGeneration.city_id == city.id).order_by(AIGeneration.generated_at)
                )
            ).scalars().all()

        assert len(rows) == 2
        assert await cache.get_cached(city.id, ArtifactKind.NEWSLETTER) == rows[-1].content


class TestUnreachableCache:
    async def test_generates_uncached_when_cache_backend_is_down(
        self, unreachable_session_factory, session_factory, fake_llm, city, clock
    ):
        cache = GenerationCache(unreachable_session_factory, clock=clock)
        service = AmbientContentService(cache, fake_llm, session_factory)

        result = await service.generate(ArtifactKind.RADIO, city.id)

        assert result.cached is False
        assert result.text.startswith("[fake generation")
        assert fake_llm.call_count == 1
