"""PageService: page lifecycle with asynchronous provenance tagging.

Lifecycle:
- ai-generate: prompt built from city theme/vibe + instruction, model called
  synchronously, page stored as ai-generated with no confidence
- write-myself: payload stored verbatim as pending, page returned at once,
  classification scheduled with asyncio.create_task() and never awaited by
  the request
- classification completion: conditional UPDATE on (id, content_tag=pending)
  touching only content_tag / ai_confidence_score / updated_at; a vanished
  page matches zero rows and the verdict is dropped

The pre-insert duplicate and capacity checks are not atomic with the insert,
and no database session is held while the model generates.
The (city_id, title_slug) unique constraint still catches duplicate races;
the capacity limit can be overshot under truly concurrent creates.
"""

import asyncio
from datetime import UTC, datetime
from uuid import UUID

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from geocities.core.exceptions import (
    CapacityExceededError,
    DuplicateTitleError,
    NotFoundError,
    ValidationError,
)
from geocities.db.models.city import City
from geocities.db.models.page import Page
from geocities.generation.prompts import CityContext, build_page_content_prompt
from geocities.llm.client import LanguageModel
from geocities.schemas.ai import ProvenanceVerdict
from geocities.schemas.pages import (
    CONTENT_MAX_LENGTH,
    CONTENT_MIN_LENGTH,
    MAX_PAGES_PER_CITY,
    PROMPT_MAX_LENGTH,
    PROMPT_MIN_LENGTH,
    TITLE_MAX_LENGTH,
    TITLE_MIN_LENGTH,
    ContentMode,
    ContentTag,
    PageType,
)
from geocities.services.classifier import ContentClassifier
from geocities.utils.slug import generate_slug

logger = structlog.get_logger(__name__)


def _validate_title(title: str | None) -> str:
    """Check title bounds and return its normalized key."""
    if not title or len(title) < TITLE_MIN_LENGTH or len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f"Title must be between {TITLE_MIN_LENGTH} and {TITLE_MAX_LENGTH} characters")
    slug = generate_slug(title)
    if not slug:
        raise ValidationError("Title must contain at least one letter or number")
    return slug


def _validate_prompt(prompt: str | None) -> None:
    if not prompt or len(prompt) < PROMPT_MIN_LENGTH or len(prompt) > PROMPT_MAX_LENGTH:
        raise ValidationError(f"Prompt must be between {PROMPT_MIN_LENGTH} and {PROMPT_MAX_LENGTH} characters")


def _validate_content(content: str | None) -> None:
    if not content or len(content) < CONTENT_MIN_LENGTH or len(content) > CONTENT_MAX_LENGTH:
        raise ValidationError(
            f"Content must be between {CONTENT_MIN_LENGTH} and {CONTENT_MAX_LENGTH} characters"
        )


def _parse_content_mode(content_mode: str) -> ContentMode:
    try:
        return ContentMode(content_mode)
    except ValueError:
        raise ValidationError('Invalid content mode. Must be "ai-generate" or "write-myself"') from None


def _parse_page_type(page_type: str) -> PageType:
    try:
        return PageType(page_type)
    except ValueError:
        valid = ", ".join(t.value for t in PageType)
        raise ValidationError(f"Invalid page type. Must be one of: {valid}") from None


def _city_context(city: City) -> CityContext:
    return CityContext(name=city.name, theme=city.theme, vibe=city.vibe)


class PageService:
    """Page Lifecycle Controller.

    Follows the ArtifactService pattern: constructor dependency injection
    (language model, classifier, session_factory), NotFoundError for missing
    cities/pages.
    """

    def __init__(
        self,
        llm: LanguageModel,
        classifier: ContentClassifier,
        session_factory: async_sessionmaker[AsyncSession],
    ):
        self.llm = llm
        self.classifier = classifier
        self.session_factory = session_factory
        self._background_tasks: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create_page(
        self,
        city_id: UUID,
        title: str,
        page_type: str,
        content_mode: str,
        payload: str | None,
    ) -> Page:
        """Create a page in a city.

        Args:
            city_id: Owning city
            title: 3-100 chars, unique within the city after normalization
            page_type: PageType value
            content_mode: "ai-generate" (payload = instruction, 10-500 chars)
                or "write-myself" (payload = literal content, 50-5000 chars)
            payload: Instruction or literal content depending on content_mode

        Returns:
            The stored Page. write-myself pages come back pending.

        Raises:
            ValidationError: bad input, DuplicateTitleError, CapacityExceededError
            NotFoundError: city does not exist
            UpstreamGenerationError: ai-generate model call failed (nothing stored)
        """
        if not title or not page_type or not content_mode:
            raise ValidationError("Title, type, and content mode are required")

        slug = _validate_title(title)
        mode = _parse_content_mode(content_mode)
        ptype = _parse_page_type(page_type)
        if mode == ContentMode.AI_GENERATE:
            _validate_prompt(payload)
        else:
            _validate_content(payload)

        async with self.session_factory() as session:
            city = await session.get(City, city_id)
            if city is None:
                raise NotFoundError("City not found")

            duplicate = await session.execute(
                select(Page.id).where(Page.city_id == city_id, Page.title_slug == slug).limit(1)
            )
            if duplicate.scalar_one_or_none() is not None:
                raise DuplicateTitleError(title, slug)

            page_count = await session.scalar(
                select(func.count()).select_from(Page).where(Page.city_id == city_id)
            )
            if page_count >= MAX_PAGES_PER_CITY:
                raise CapacityExceededError(MAX_PAGES_PER_CITY)

            city_context = _city_context(city)

        # No session is held across the model call; the unique constraint
        # still rejects a duplicate title inserted meanwhile.
        if mode == ContentMode.AI_GENERATE:
            prompt = build_page_content_prompt(city_context, title, ptype.value, payload)
            content = await self.llm.complete(prompt)
            content_tag = ContentTag.AI_GENERATED
            original_prompt = payload
        else:
            content = payload
            content_tag = ContentTag.PENDING
            original_prompt = None

        now = datetime.now(UTC)
        page = Page(
            city_id=city_id,
            title=title,
            title_slug=slug,
            type=ptype.value,
            content_mode=mode.value,
            content_tag=content_tag.value,
            ai_confidence_score=None,
            original_prompt=original_prompt,
            content=content,
            created_at=now,
            updated_at=now,
        )
        async with self.session_factory() as session:
            session.add(page)
            try:
                await session.commit()
            except IntegrityError as exc:
                raise DuplicateTitleError(title, slug) from exc
            await session.refresh(page)

        logger.info(
            "page_created",
            city_id=str(city_id),
            page_id=str(page.id),
            content_mode=mode.value,
            content_tag=content_tag.value,
        )

        if mode == ContentMode.WRITE_MYSELF:
            self._schedule_classification(page.id, content)

        return page

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    async def update_page(
        self,
        city_id: UUID,
        page_id: UUID,
        title: str | None = None,
        prompt: str | None = None,
    ) -> Page:
        """Rename a page and/or regenerate its AI content from a new instruction.

        Content mode never changes; a new instruction is only accepted for
        ai-generate pages and the tag stays ai-generated.

        Raises:
            ValidationError: nothing to update, bad title/prompt, prompt on a
                write-myself page, or DuplicateTitleError on rename
            NotFoundError: page (or its city) does not exist
            UpstreamGenerationError: regeneration failed (page unchanged)
        """
        if title is None and prompt is None:
            raise ValidationError("Provide a new title or prompt")

        slug = _validate_title(title) if title is not None else None
        if prompt is not None:
            _validate_prompt(prompt)

        async with self.session_factory() as session:
            page = await self._load_page(session, city_id, page_id)

            if prompt is not None and page.content_mode != ContentMode.AI_GENERATE.value:
                raise ValidationError("Only AI-generated pages can be regenerated from a prompt")

            if slug is not None and slug != page.title_slug:
                duplicate = await session.execute(
                    select(Page.id)
                    .where(Page.city_id == city_id, Page.title_slug == slug, Page.id != page_id)
                    .limit(1)
                )
                if duplicate.scalar_one_or_none() is not None:
                    raise DuplicateTitleError(title, slug)

            city_context = None
            if prompt is not None:
                city = await session.get(City, city_id)
                if city is None:
                    raise NotFoundError("City not found")
                city_context = _city_context(city)

        content = None
        if prompt is not None:
            content = await self.llm.complete(
                build_page_content_prompt(city_context, title or page.title, page.type, prompt)
            )

        async with self.session_factory() as session:
            # Reloaded: the page may have been deleted during regeneration
            page = await self._load_page(session, city_id, page_id)

            if content is not None:
                page.content = content
                page.original_prompt = prompt

            if title is not None:
                page.title = title
                page.title_slug = slug

            page.updated_at = datetime.now(UTC)
            try:
                await session.commit()
            except IntegrityError as exc:
                raise DuplicateTitleError(title, slug) from exc
            await session.refresh(page)

        logger.info(
            "page_updated",
            city_id=str(city_id),
            page_id=str(page_id),
            renamed=title is not None,
            regenerated=prompt is not None,
        )
        return page

    # ------------------------------------------------------------------
    # Reads and delete
    # ------------------------------------------------------------------

    async def get_page(self, city_id: UUID, page_id: UUID) -> Page:
        async with self.session_factory() as session:
            return await self._load_page(session, city_id, page_id)

    async def list_pages(self, city_id: UUID) -> list[Page]:
        """Newest first, at most MAX_PAGES_PER_CITY."""
        async with self.session_factory() as session:
            if await session.get(City, city_id) is None:
                raise NotFoundError("City not found")
            result = await session.execute(
                select(Page)
                .where(Page.city_id == city_id)
                .order_by(Page.created_at.desc())
                .limit(MAX_PAGES_PER_CITY)
            )
            return list(result.scalars().all())

    async def delete_page(self, city_id: UUID, page_id: UUID) -> None:
        async with self.session_factory() as session:
            page = await self._load_page(session, city_id, page_id)
            await session.delete(page)
            await session.commit()
        logger.info("page_deleted", city_id=str(city_id), page_id=str(page_id))

    async def _load_page(self, session: AsyncSession, city_id: UUID, page_id: UUID) -> Page:
        result = await session.execute(select(Page).where(Page.id == page_id, Page.city_id == city_id))
        page = result.scalar_one_or_none()
        if page is None:
            raise NotFoundError("Page not found")
        return page

    # ------------------------------------------------------------------
    # Provenance tagging
    # ------------------------------------------------------------------

    async def apply_verdict(self, page_id: UUID, verdict: ProvenanceVerdict) -> bool:
        """Move a pending page to its final tag.

        Touches only content_tag, ai_confidence_score and updated_at, and only
        while the page is still pending.

        Returns:
            True if the page was updated, False if it no longer exists or is
            no longer pending (the verdict is discarded)
        """
        async with self.session_factory() as session:
            result = await session.execute(
                update(Page)
                .where(Page.id == page_id, Page.content_tag == ContentTag.PENDING.value)
                .values(
                    content_tag=verdict.tag.value,
                    ai_confidence_score=verdict.confidence,
                    updated_at=datetime.now(UTC),
                )
            )
            await session.commit()

        if not result.rowcount:
            logger.info("page_tag_update_skipped", page_id=str(page_id), reason="page_missing_or_not_pending")
            return False

        logger.info(
            "page_tag_updated",
            page_id=str(page_id),
            content_tag=verdict.tag.value,
            confidence=verdict.confidence,
        )
        return True

    async def _classify_and_tag(self, page_id: UUID, content: str) -> None:
        """Background entry point. Called via asyncio.create_task(). Never raises."""
        try:
            verdict = await self.classifier.classify(content)
            await self.apply_verdict(page_id, verdict)
        except Exception as exc:
            logger.warning(
                "page_tagging_failed",
                page_id=str(page_id),
                error=str(exc),
                error_type=type(exc).__name__,
            )

    def _schedule_classification(self, page_id: UUID, content: str) -> None:
        task = asyncio.create_task(self._classify_and_tag(page_id, content))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    @property
    def pending_tasks(self) -> int:
        return len(self._background_tasks)

    async def drain_background_tasks(self, timeout: float | None = None) -> None:
        """Wait for in-flight classification tasks (shutdown and tests)."""
        if not self._background_tasks:
            return

        in_flight = len(self._background_tasks)
        _, still_running = await asyncio.wait(set(self._background_tasks), timeout=timeout)
        logger.info(
            "background_tasks_drained",
            completed=in_flight - len(still_running),
            abandoned=len(still_running),
        )
