"""GenerationCache: append-only log of generated artifacts with 24h freshness.

- store() always inserts a new row; nothing is overwritten or deleted on write
- get_cached() returns the row with the latest expires_at strictly after now
- concurrent misses may both generate and both store; the later row wins
  future reads, and either answer is equally fresh
- lookup failures (including an unreachable backend) are reported as misses
  so generation can proceed
"""

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from uuid import UUID

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from geocities.db.models.ai_generation import AIGeneration
from geocities.schemas.ai import ArtifactKind, CachedArtifactsResponse

logger = structlog.get_logger(__name__)

FRESHNESS_WINDOW = timedelta(hours=24)

# Driver connect failures (refused, DNS, timeout) surface unwrapped by SQLAlchemy
BACKEND_ERRORS: tuple[type[Exception], ...] = (SQLAlchemyError, OSError, TimeoutError)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class GenerationCache:
    """Per-(city, kind) artifact cache backed by the ai_generations table."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Callable[[], datetime] = _utcnow,
    ):
        """Initialize with session factory and an injectable clock.

        Args:
            session_factory: SQLAlchemy async session factory
            clock: Returns the current aware UTC datetime (tests pass a fake)
        """
        self.session_factory = session_factory
        self.clock = clock

    async def get_cached(self, city_id: UUID, kind: ArtifactKind) -> str | None:
        """Return the freshest non-expired artifact text, or None.

        An artifact whose expires_at equals now is expired. Backend errors
        are logged and reported as a miss.
        """
        now = self.clock()
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(AIGeneration.content)
                    .where(
                        AIGeneration.city_id == city_id,
                        AIGeneration.kind == kind.value,
                        AIGeneration.expires_at > now,
                    )
                    .order_by(AIGeneration.expires_at.desc(), AIGeneration.generated_at.desc())
                    .limit(1)
                )
                content = result.scalar_one_or_none()
        except BACKEND_ERRORS as exc:
            logger.warning(
                "generation_cache_lookup_failed",
                city_id=str(city_id),
                kind=kind.value,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return None

        if content is None:
            logger.info("generation_cache_miss", city_id=str(city_id), kind=kind.value)
            return None

        logger.info("generation_cache_hit", city_id=str(city_id), kind=kind.value)
        return content

    async def store(self, city_id: UUID, kind: ArtifactKind, text: str) -> AIGeneration:
        """Append a new artifact valid for FRESHNESS_WINDOW from now."""
        generated_at = self.clock()
        record = AIGeneration(
            city_id=city_id,
            kind=kind.value,
            content=text,
            generated_at=generated_at,
            expires_at=generated_at + FRESHNESS_WINDOW,
        )
        async with self.session_factory() as session:
            session.add(record)
            await session.commit()
            await session.refresh(record)

        logger.info(
            "generation_cached",
            city_id=str(city_id),
            kind=kind.value,
            expires_at=record.expires_at.isoformat(),
        )
        return record

    async def get_cached_artifacts(self, city_id: UUID) -> CachedArtifactsResponse:
        """Snapshot of the current artifact for every kind (None where absent)."""
        texts = await asyncio.gather(*(self.get_cached(city_id, kind) for kind in ArtifactKind))
        return CachedArtifactsResponse(
            **{kind.value: text for kind, text in zip(ArtifactKind, texts)}
        )

    async def purge_expired(self) -> int:
        """Delete artifacts whose expiry has passed. Returns rows removed.

        Optional compaction: reads filter on expiry and never depend on it.
        """
        now = self.clock()
        async with self.session_factory() as session:
            result = await session.execute(delete(AIGeneration).where(AIGeneration.expires_at <= now))
            await session.commit()

        removed = result.rowcount or 0
        logger.info("generation_cache_purged", removed=removed)
        return removed
