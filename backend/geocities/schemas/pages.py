"""Pydantic schemas and enums for pages and their provenance tags."""

from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

# Field bounds (fixed design constants)
TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 100
PROMPT_MIN_LENGTH = 10
PROMPT_MAX_LENGTH = 500
CONTENT_MIN_LENGTH = 50
CONTENT_MAX_LENGTH = 5000
MAX_PAGES_PER_CITY = 100


class ContentMode(StrEnum):
    """How the page body is produced. Fixed at creation."""

    AI_GENERATE = "ai-generate"
    WRITE_MYSELF = "write-myself"


class ContentTag(StrEnum):
    """Provenance tag state machine.

    pending -> detected-ai | user-written  (write-myself, set by the classifier)
    ai-generated                            (ai-generate, terminal at creation)
    """

    PENDING = "pending"
    AI_GENERATED = "ai-generated"
    USER_WRITTEN = "user-written"
    DETECTED_AI = "detected-ai"


TERMINAL_TAGS = frozenset({ContentTag.AI_GENERATED, ContentTag.USER_WRITTEN, ContentTag.DETECTED_AI})


class PageType(StrEnum):
    PERSONAL = "personal"
    FAN_SITE = "fan-site"
    BUSINESS = "business"
    BLOG = "blog"
    ART_GALLERY = "art-gallery"
    MUSIC = "music"
    GAMING = "gaming"
    COMMUNITY = "community"


# ==================== REQUEST SCHEMAS ====================


class CreatePageRequest(BaseModel):
    """Request body for POST /content/{city_id}.

    Length and mode checks live in PageService so the service contract holds
    for every caller; the schema only shapes the payload.
    """

    title: str
    type: str
    content_mode: str = Field(..., alias="contentMode")
    prompt: str | None = None
    content: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class UpdatePageRequest(BaseModel):
    """Request body for PUT /content/{city_id}/{page_id}."""

    title: str | None = None
    prompt: str | None = None


# ==================== RESPONSE SCHEMAS ====================


class PageResponse(BaseModel):
    """Page as returned to the presentation layer."""

    id: UUID
    city_id: UUID
    title: str
    title_slug: str
    type: str
    content_mode: ContentMode
    content_tag: ContentTag
    ai_confidence_score: float | None
    original_prompt: str | None
    content: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
