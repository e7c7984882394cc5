"""CityService: minimal city registry (create, list, get) with normalized-name uniqueness."""

import re
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from geocities.core.exceptions import DuplicateError, NotFoundError, ValidationError
from geocities.db.models.city import City
from geocities.schemas.cities import (
    NAME_MAX_LENGTH,
    NAME_MIN_LENGTH,
    THEME_MAX_LENGTH,
    THEME_MIN_LENGTH,
    VIBE_MAX_LENGTH,
    VIBE_MIN_LENGTH,
)
from geocities.utils.slug import generate_slug

logger = structlog.get_logger(__name__)

_DANGEROUS_PATTERN = re.compile(r"<script|javascript:|onerror=|onclick=|onload=", re.IGNORECASE)


def validate_city_input(name: str, theme: str, vibe: str) -> list[str]:
    """Return a list of human-readable problems (empty when valid)."""
    errors: list[str] = []

    for label, value, low, high in (
        ("Name", name, NAME_MIN_LENGTH, NAME_MAX_LENGTH),
        ("Theme", theme, THEME_MIN_LENGTH, THEME_MAX_LENGTH),
        ("Vibe", vibe, VIBE_MIN_LENGTH, VIBE_MAX_LENGTH),
    ):
        if not value or not isinstance(value, str):
            errors.append(f"{label} is required")
        elif len(value) < low:
            errors.append(f"{label} must be at least {low} characters")
        elif len(value) > high:
            errors.append(f"{label} must be no more than {high} characters")

    if any(isinstance(v, str) and _DANGEROUS_PATTERN.search(v) for v in (name, theme, vibe)):
        errors.append("Invalid characters detected in input")

    return errors


class CityService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def create_city(self, name: str, theme: str, vibe: str) -> City:
        """Create a city.

        Raises:
            ValidationError: bad lengths or markup in input
            DuplicateError: another city normalizes to the same name key
        """
        errors = validate_city_input(name, theme, vibe)
        if errors:
            raise ValidationError("; ".join(errors))

        name_key = generate_slug(name)
        if not name_key:
            raise ValidationError("Name must contain at least one letter or number")

        async with self.session_factory() as session:
            result = await session.execute(select(City.id).where(City.name_key == name_key))
            if result.scalar_one_or_none() is not None:
                raise DuplicateError("A city with this name already exists")

            city = City(name=name, name_key=name_key, theme=theme, vibe=vibe)
            session.add(city)
            try:
                await session.commit()
            except IntegrityError as exc:
                raise DuplicateError("A city with this name already exists") from exc
            await session.refresh(city)

        logger.info("city_created", city_id=str(city.id), name_key=name_key)
        return city

    async def list_cities(self) -> list[City]:
        async with self.session_factory() as session:
            result = await session.execute(select(City).order_by(City.created_at))
            return list(result.scalars().all())

    async def get_city(self, city_id: UUID) -> City:
        """Raises NotFoundError when the city does not exist."""
        async with self.session_factory() as session:
            city = await session.get(City, city_id)
        if city is None:
            raise NotFoundError("City not found")
        return city
