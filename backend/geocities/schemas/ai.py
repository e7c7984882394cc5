"""Pydantic schemas for ambient AI content and provenance verdicts."""

from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from geocities.schemas.pages import ContentTag


class ArtifactKind(StrEnum):
    """The three ambient generated-content types cached per city."""

    ANNOUNCEMENT = "announcement"
    NEWSLETTER = "newsletter"
    RADIO = "radio"


class GenerationContext(BaseModel):
    """Optional overrides for the stored city context when generating."""

    city_name: str | None = Field(None, alias="cityName")
    theme: str | None = None
    vibe: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class GenerationResult(BaseModel):
    """Outcome of generate(kind, city_id, context)."""

    city_id: UUID
    kind: ArtifactKind
    text: str
    cached: bool
    generated_at: datetime


class CachedArtifactsResponse(BaseModel):
    """Read-only snapshot of the current cached artifact per kind."""

    announcement: str | None = None
    newsletter: str | None = None
    radio: str | None = None


class DetectionAnalysis(BaseModel):
    """Strict structure the classifier requires from the model's answer."""

    is_ai_generated: bool = Field(..., alias="isAiGenerated")
    confidence: float = Field(..., ge=0.0, le=1.0)
    reasoning: str

    model_config = ConfigDict(populate_by_name=True)


class ProvenanceVerdict(BaseModel):
    """classify(text) result. confidence is None when classification failed."""

    tag: ContentTag
    confidence: float | None = None
    rationale: str
