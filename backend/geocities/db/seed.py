"""Idempotent seed data for the launch cities."""

import structlog
from sqlalchemy import select

from geocities.db.base import get_session_factory
from geocities.db.models.city import City
from geocities.utils.slug import generate_slug

logger = structlog.get_logger(__name__)

DEFAULT_CITIES = [
    {"name": "Silicon Valley", "theme": "tech", "vibe": "futuristic"},
    {"name": "Sunset Boulevard", "theme": "art", "vibe": "creative"},
    {"name": "Neon District", "theme": "cyberpunk", "vibe": "edgy"},
]


async def seed_default_cities() -> int:
    """Insert launch cities that are not present yet. Returns how many were added."""
    factory = get_session_factory()
    added = 0

    async with factory() as session:
        for city_data in DEFAULT_CITIES:
            name_key = generate_slug(city_data["name"])
            result = await session.execute(select(City).where(City.name_key == name_key))
            if result.scalar_one_or_none() is not None:
                continue
            session.add(City(name_key=name_key, **city_data))
            added += 1
        await session.commit()

    logger.info("default_cities_seeded", added=added)
    return added
