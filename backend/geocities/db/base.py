"""Declarative base plus the process-wide async engine for the GeoCities store.

The engine is created once by the app lifespan (init_db) and disposed on
shutdown (close_db). Services never open their own engines; they receive
the session factory from get_session_factory().
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from geocities.core.config import get_settings


class Base(DeclarativeBase):
    pass


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _engine_options(db_url: str, echo: bool) -> dict:
    options: dict = {"echo": echo}
    # SQLite (tests, local dev) has no server to ping
    if not db_url.startswith("sqlite"):
        options["pool_pre_ping"] = True
    return options


async def _create_tables(engine: AsyncEngine) -> None:
    # cities, pages and ai_generations register on Base.metadata at import
    import geocities.db.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_db(url: str | None = None) -> None:
    """Create the engine, the session factory and any missing tables.

    No-op when already initialized. `url` overrides settings.database_url.
    """
    global _engine, _session_factory

    if _engine is not None:
        return

    settings = get_settings()
    db_url = url or settings.database_url

    _engine = create_async_engine(db_url, **_engine_options(db_url, settings.debug))
    _session_factory = async_sessionmaker(_engine, class_=AsyncSession, expire_on_commit=False)
    await _create_tables(_engine)


async def close_db() -> None:
    global _engine, _session_factory

    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    _session_factory = None


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Raises RuntimeError before init_db() has run."""
    if _session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _session_factory
