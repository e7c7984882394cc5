"""Pydantic schemas for the minimal city registry."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 50
THEME_MIN_LENGTH = 3
THEME_MAX_LENGTH = 30
VIBE_MIN_LENGTH = 3
VIBE_MAX_LENGTH = 30


class CreateCityRequest(BaseModel):
    name: str
    theme: str
    vibe: str


class CityResponse(BaseModel):
    id: UUID
    name: str
    name_key: str
    theme: str
    vibe: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
