"""Tests for logging setup and database engine lifecycle."""
import logging

import pytest
from asgi_correlation_id.context import correlation_id
from sqlalchemy import inspect

import geocities.db.base as db_mod
from geocities.core.logging import add_correlation_id, configure_structlog
from geocities.db import close_db, get_session_factory, init_db

pytestmark = pytest.mark.unit


class TestLogging:
    def test_quiet_loggers_stay_at_warning(self):
        configure_structlog(log_level="DEBUG", json_logs=True)

        assert logging.getLogger().level == logging.DEBUG
        for name in ("uvicorn.access", "httpx", "anthropic"):
            assert logging.getLogger(name).level == logging.WARNING

    def test_correlation_id_added_inside_request(self):
        token = correlation_id.set("req-123")
        try:
            assert add_correlation_id(None, "info", {"event": "page_created"})["correlation_id"] == "req-123"
        finally:
            correlation_id.reset(token)

    def test_no_correlation_id_outside_request(self):
        assert "correlation_id" not in add_correlation_id(None, "info", {"event": "startup_begin"})


class TestDatabaseLifecycle:
    @pytest.fixture(autouse=True)
    async def fresh_globals(self):
        db_mod._engine = None
        db_mod._session_factory = None
        yield
        await close_db()

    def test_factory_requires_init(self):
        with pytest.raises(RuntimeError, match="not initialized"):
            get_session_factory()

    async def test_init_creates_tables_and_close_resets(self, tmp_path):
        await init_db(f"sqlite+aiosqlite:///{tmp_path / 'lifecycle.db'}")

        async with db_mod._engine.connect() as conn:
            tables = await conn.run_sync(lambda sync_conn: set(inspect(sync_conn).get_table_names()))
        assert {"cities", "pages", "ai_generations"} <= tables
        assert get_session_factory() is db_mod._session_factory

        await close_db()
        assert db_mod._engine is None
        with pytest.raises(RuntimeError):
            get_session_factory()

    async def test_second_init_is_a_no_op(self, tmp_path):
        await init_db(f"sqlite+aiosqlite:///{tmp_path / 'first.db'}")
        engine = db_mod._engine

        await init_db(f"sqlite+aiosqlite:///{tmp_path / 'second.db'}")

        assert db_mod._engine is engine
