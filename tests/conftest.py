"""Pytest fixtures for Vitrine tests."""

import json
from collections.abc import AsyncGenerator
from typing import Any

import httpx
import pytest
import pytest_asyncio
import structlog
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from vitrine.config.settings import Settings
from vitrine.db.config import build_engine, get_db
from vitrine.db.models.base import Base
from vitrine.index.client import DocumentIndexClient

# =============================================================================
# Structlog Configuration Fixture
# =============================================================================


@pytest.fixture(scope="function", autouse=True)
def reset_structlog_after_test():
    """Reset structlog configuration after each test.

    This ensures tests that modify structlog global state
    don't affect other tests.
    """
    yield
    structlog.reset_defaults()


# =============================================================================
# Settings
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Create settings for testing: in-memory database and a fake index host."""
    return Settings(
        DATABASE_URL="sqlite+aiosqlite://",
        ENVIRONMENT="test",
        DEBUG=True,
        log_level="DEBUG",
        INDEX_URL="http://index.test/solr/blacklight-core",
        INDEX_TIMEOUT_SECONDS=1.0,
        AUTOCOMPLETE_ROWS=10,
        ENSURE_DEFAULT_EXHIBIT=False,
    )


# =============================================================================
# Database fixtures
# =============================================================================


@pytest_asyncio.fixture
async def test_engine(test_settings: Settings):
    """Create a fresh in-memory database for each test."""
    engine = build_engine(test_settings)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


# =============================================================================
# Document index fixtures
# =============================================================================


class FakeIndex:
    """In-process stand-in for the document index select endpoint.

    Set ``docs`` for a normal answer, ``status_code`` for an HTTP failure,
    ``body`` for a raw (possibly malformed) payload, or ``error`` to raise a
    transport exception.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.docs: list[dict[str, Any]] = []
        self.num_found: int | None = None
        self.status_code = 200
        self.body: bytes | None = None
        self.error: type[httpx.TransportError] | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error("simulated transport failure", request=request)
        if self.body is not None:
            return httpx.Response(self.status_code, content=self.body)
        payload = {
            "response": {
                "numFound": self.num_found if self.num_found is not None else len(self.docs),
                "docs": self.docs,
            }
        }
        return httpx.Response(self.status_code, content=json.dumps(payload).encode())

    @property
    def last_params(self) -> httpx.QueryParams:
        assert self.requests, "index was not called"
        return self.requests[-1].url.params


@pytest.fixture
def fake_index() -> FakeIndex:
    return FakeIndex()


@pytest_asyncio.fixture
async def index_client(
    test_settings: Settings, fake_index: FakeIndex
) -> AsyncGenerator[DocumentIndexClient, None]:
    client = DocumentIndexClient(test_settings, transport=httpx.MockTransport(fake_index.handler))
    yield client
    await client.aclose()


# =============================================================================
# API test fixtures
# =============================================================================


@pytest.fixture
def test_app(
    test_settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    index_client: DocumentIndexClient,
) -> FastAPI:
    """Create a FastAPI test application.

    ASGITransport does not run the lifespan, so the database session and
    index client it would set up are wired in here.
    """
    from vitrine.api.app import create_app

    app = create_app(settings=test_settings)

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.state.index_client = index_client
    return app


@pytest_asyncio.fixture
async def test_client(test_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for API testing.

    Provides an httpx.AsyncClient configured to call the test application
    directly without network overhead.
    """
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
    ) as client:
        yield client
