"""API-specific test fixtures."""

from contextlib import asynccontextmanager

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from geocities.llm.fake import FakeLanguageModel


@pytest.fixture
def make_api_client(tmp_path):
    """Build a TestClient around a given FakeLanguageModel.

    Initializes the global database via init_db inside the TestClient's
    own event loop so services and route handlers share one engine.
    """
    from geocities.api.routes import api_router
    from geocities.core.config import get_settings
    from geocities.db import close_db, init_db
    from geocities.db.seed import seed_default_cities
    from geocities.main import build_services, register_exception_handlers
    from geocities.middleware.correlation import setup_correlation_middleware

    db_url = f"sqlite+aiosqlite:///{tmp_path / 'geocities_api.db'}"
    clients: list[TestClient] = []

    def _make(llm: FakeLanguageModel | None = None) -> TestClient:
        @asynccontextmanager
        async def test_lifespan(app: FastAPI):
            """Test lifespan - initialize DB in TestClient's event loop."""
            import geocities.db.base as db_mod

            db_mod._engine = None
            db_mod._session_factory = None
            await init_db(db_url)
            await seed_default_cities()
            app.state.shutting_down = False
            build_services(app, llm or FakeLanguageModel())
            yield
            await app.state.page_service.drain_background_tasks(timeout=5)
            await close_db()

        settings = get_settings()
        app = FastAPI(title=settings.app_name, lifespan=test_lifespan)
        setup_correlation_middleware(app)
        register_exception_handlers(app)
        app.include_router(api_router, prefix="/api")

        client = TestClient(app, raise_server_exceptions=False)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def api_client(make_api_client) -> TestClient:
    return make_api_client()


@pytest.fixture
def city_id(api_client) -> str:
    """Id of the seeded Neon District city."""
    cities = api_client.get("/api/cities").json()
    return next(c["id"] for c in cities if c["name"] == "Neon District")
