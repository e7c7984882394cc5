"""Page model: user- or AI-authored content living inside a city."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, ForeignKey, String, Text, UniqueConstraint, Uuid

from geocities.db.base import Base


class Page(Base):
    """A page with a provenance tag.

    content_tag moves pending -> detected-ai | user-written exactly once for
    write-myself pages; ai-generate pages are created as ai-generated.
    """

    __tablename__ = "pages"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    city_id = Column(Uuid(as_uuid=True), ForeignKey("cities.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(100), nullable=False)
    title_slug = Column(String(100), nullable=False)
    type = Column(String(30), nullable=False)

    # Provenance
    content_mode = Column(String(20), nullable=False)  # ContentMode value, fixed at creation
    content_tag = Column(String(20), nullable=False)  # ContentTag value
    ai_confidence_score = Column(Float, nullable=True)
    original_prompt = Column(Text, nullable=True)  # ai-generate instruction

    content = Column(Text, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (UniqueConstraint("city_id", "title_slug", name="uq_city_page_title_slug"),)
