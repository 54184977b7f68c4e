"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from vitrine import __version__
from vitrine.api.middleware import (
    ErrorHandlingMiddleware,
    RequestContextMiddleware,
    RequestLoggingMiddleware,
    request_validation_exception_handler,
)
from vitrine.api.routers import health_router, v1_router
from vitrine.config.settings import Settings, get_settings
from vitrine.core.exhibit import ExhibitService
from vitrine.core.logging import setup_logging
from vitrine.db.config import close_db, configure_engine, get_async_session, init_db
from vitrine.index.client import DocumentIndexClient

logger = structlog.get_logger("vitrine.api")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings override (useful for testing)

    Returns:
        Configured FastAPI application

    Example:
        # Testing
        app = create_app(settings=Settings(ENVIRONMENT="test", DATABASE_URL="sqlite+aiosqlite://"))

        # Run with uvicorn
        uvicorn vitrine.api.app:create_app --factory
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="Vitrine API",
        description="Exhibit curation service: saved searches, ordering and scoped typeahead",
        version=__version__,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=_lifespan,
    )

    # Store settings on app state for access in dependencies
    app.state.settings = settings

    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    _configure_middleware(app, settings)
    _configure_routers(app)

    return app


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Startup configures logging, the database engine, the default exhibit
    and the document index client; shutdown closes them.
    """
    settings: Settings = app.state.settings
    setup_logging(settings.log_level)
    logger.info("app_starting", environment=settings.ENVIRONMENT, version=__version__)

    configure_engine(settings)
    await init_db()
    logger.info("database_initialized")

    if settings.ENSURE_DEFAULT_EXHIBIT:
        await _ensure_default_exhibit(settings)

    app.state.index_client = DocumentIndexClient(settings)

    yield

    logger.info("app_stopping")
    await app.state.index_client.aclose()
    await close_db()


async def _ensure_default_exhibit(settings: Settings) -> None:
    try:
        async with get_async_session() as session:
            exhibit = await ExhibitService(session).ensure_default_exhibit(
                slug=settings.DEFAULT_EXHIBIT_SLUG,
                title=settings.DEFAULT_EXHIBIT_TITLE,
            )
            logger.info("default_exhibit_ready", slug=exhibit.slug)
    except SQLAlchemyError as e:
        logger.warning("default_exhibit_skipped", error=str(e))


def _configure_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure middleware stack.

    Middleware order (outermost to innermost execution):
    1. RequestLoggingMiddleware - Logs all requests
    2. ErrorHandlingMiddleware - Converts exceptions to HTTP responses
    3. CORSMiddleware - Handles CORS (if configured)
    4. RequestContextMiddleware - Sets ContextVar for request context

    Note: Middleware is added in reverse order because Starlette
    processes them from last-added to first-added.
    """
    app.add_middleware(RequestContextMiddleware)

    if settings.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)


def _configure_routers(app: FastAPI) -> None:
    # Health check endpoints (no prefix - at root level)
    app.include_router(health_router)
    app.include_router(v1_router)
