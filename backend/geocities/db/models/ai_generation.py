"""AIGeneration model: append-only log of cached ambient content per city."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Text, Uuid

from geocities.db.base import Base


class AIGeneration(Base):
    """One generated artifact. Never updated; newer rows supersede older ones.

    The current artifact for (city_id, kind) is the row with the latest
    expires_at that is still in the future.
    """

    __tablename__ = "ai_generations"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    city_id = Column(Uuid(as_uuid=True), ForeignKey("cities.id", ondelete="CASCADE"), nullable=False, index=True)
    kind = Column(String(20), nullable=False)  # ArtifactKind value

    content = Column(Text, nullable=False)

    generated_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (Index("ix_ai_generations_lookup", "city_id", "kind", "expires_at"),)
