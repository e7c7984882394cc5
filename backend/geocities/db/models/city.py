"""City model: an isolated content namespace with its own theme and vibe."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Uuid

from geocities.db.base import Base


class City(Base):
    __tablename__ = "cities"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    name = Column(String(50), nullable=False)
    name_key = Column(String(50), nullable=False, unique=True)  # slug of name
    theme = Column(String(30), nullable=False)
    vibe = Column(String(30), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
