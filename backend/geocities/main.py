"""GeoCities AI Backend: FastAPI application entry point."""

import signal
import uuid
from contextlib import asynccontextmanager

# CRITICAL ORDER: configure_structlog MUST be called before all other app imports
# (structlog caches the processor chain on first use).
from geocities.core.logging import configure_structlog
from geocities.core.config import get_settings as _get_settings_early

_early_settings = _get_settings_early()
configure_structlog(
    log_level="DEBUG" if _early_settings.debug else "INFO",
    json_logs=not _early_settings.debug,
)

import structlog

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from geocities.api.routes import api_router
from geocities.core.config import Settings, get_settings
from geocities.core.exceptions import (
    DuplicateError,
    GeoCitiesError,
    NotFoundError,
    UpstreamGenerationError,
    ValidationError,
)
from geocities.db import close_db, get_session_factory, init_db
from geocities.db.seed import seed_default_cities
from geocities.generation.ambient import AmbientContentService
from geocities.generation.cache import GenerationCache
from geocities.llm.client import AnthropicLanguageModel, LanguageModel
from geocities.llm.fake import FakeLanguageModel
from geocities.middleware.correlation import get_correlation_id, setup_correlation_middleware
from geocities.services.city_service import CityService
from geocities.services.classifier import ContentClassifier
from geocities.services.page_service import PageService

logger = structlog.get_logger(__name__)


def build_language_model(settings: Settings) -> LanguageModel:
    """Construct the process-wide model client once, at startup."""
    if not settings.anthropic_api_key:
        logger.warning("anthropic_api_key_missing", fallback="FakeLanguageModel")
        return FakeLanguageModel()
    return AnthropicLanguageModel.from_settings(settings)


def build_services(app: FastAPI, llm: LanguageModel) -> None:
    """Wire services onto app.state around one shared model client."""
    session_factory = get_session_factory()
    cache = GenerationCache(session_factory)

    app.state.llm = llm
    app.state.city_service = CityService(session_factory)
    app.state.ambient_service = AmbientContentService(cache, llm, session_factory)
    app.state.page_service = PageService(llm, ContentClassifier(llm), session_factory)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    app.state.shutting_down = False

    def handle_sigterm(signum, frame):
        app.state.shutting_down = True
        logger.info("sigterm_received", action="health_check_503_draining_connections")

    signal.signal(signal.SIGTERM, handle_sigterm)

    # Startup
    settings = get_settings()
    logger.info("startup_begin", app_name=settings.app_name, debug=settings.debug)

    await init_db()
    logger.info("db_initialized")

    if settings.seed_default_cities:
        await seed_default_cities()

    llm = build_language_model(settings)
    build_services(app, llm)
    logger.info("services_initialized", llm=type(llm).__name__)

    yield

    # Shutdown
    logger.info("shutdown_begin")
    await app.state.page_service.drain_background_tasks(timeout=settings.background_drain_seconds)
    await llm.aclose()
    await close_db()
    logger.info("shutdown_complete")


def _error_response(request: Request, status_code: int, detail: str, event: str, **extra) -> JSONResponse:
    debug_id = str(uuid.uuid4())
    logger.warning(
        event,
        status_code=status_code,
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        detail=detail,
        **extra,
    )
    return JSONResponse(status_code=status_code, content={"detail": detail, "debug_id": debug_id})


async def domain_exception_handler(request: Request, exc: GeoCitiesError) -> JSONResponse:
    """Map domain errors to distinguishable HTTP failures."""
    if isinstance(exc, DuplicateError):
        status_code = 409
    elif isinstance(exc, ValidationError):
        status_code = 400
    elif isinstance(exc, NotFoundError):
        status_code = 404
    elif isinstance(exc, UpstreamGenerationError):
        return _error_response(
            request, 502, "AI generation failed. Please try again.", "upstream_generation_failed", error=str(exc)
        )
    else:
        status_code = 500
    return _error_response(request, status_code, str(exc), "domain_error", error_type=type(exc).__name__)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Global exception handler for HTTPException with debug_id tracking."""
    return _error_response(request, exc.status_code, exc.detail, "http_exception")


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for unhandled errors with debug_id tracking.

    Logs full exception with traceback, returns generic 500 to client.
    """
    debug_id = str(uuid.uuid4())

    logger.error(
        "unhandled_exception",
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=True,
    )

    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "debug_id": debug_id},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.exception_handler(GeoCitiesError)(domain_exception_handler)
    app.exception_handler(HTTPException)(http_exception_handler)
    app.exception_handler(Exception)(generic_exception_handler)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="GeoCities AI - cities of user- and AI-authored pages",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url, "http://localhost:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Correlation ID middleware (runs first on incoming requests)
    setup_correlation_middleware(app)

    register_exception_handlers(app)

    app.include_router(api_router, prefix="/api")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "geocities.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
