"""Database configuration and session management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from vitrine.config.settings import Settings, get_settings

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _on_sqlite_connect(dbapi_connection, connection_record) -> None:  # noqa: ARG001
    # The driver's implicit BEGIN breaks SAVEPOINT; transactions are begun in _on_sqlite_begin
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _on_sqlite_begin(conn) -> None:
    conn.exec_driver_sql("BEGIN")


def build_engine(settings: Settings) -> AsyncEngine:
    """Create an async engine for the configured database.

    SQLite (used in tests and local runs) gets foreign key enforcement and,
    for in-memory databases, a single shared connection.
    """
    url = make_url(settings.DATABASE_URL)

    if url.get_backend_name() == "sqlite":
        kwargs: dict = {"echo": settings.DATABASE_ECHO}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
            kwargs["connect_args"] = {"check_same_thread": False}
        engine = create_async_engine(url, **kwargs)
        event.listen(engine.sync_engine, "connect", _on_sqlite_connect)
        event.listen(engine.sync_engine, "begin", _on_sqlite_begin)
        return engine

    if settings.ENVIRONMENT == "test":
        return create_async_engine(url, echo=settings.DATABASE_ECHO, poolclass=NullPool)

    return create_async_engine(
        url,
        echo=settings.DATABASE_ECHO,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
    )


def configure_engine(settings: Settings | None = None) -> AsyncEngine:
    """Create (or replace) the process-wide engine and session factory."""
    global _engine, _session_factory
    _engine = build_engine(settings or get_settings())
    _session_factory = async_sessionmaker(
        _engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return _engine


def get_engine() -> AsyncEngine:
    """Get the process-wide engine, creating it from settings on first use."""
    if _engine is None:
        return configure_engine()
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the session factory bound to the process-wide engine."""
    if _session_factory is None:
        configure_engine()
    assert _session_factory is not None
    return _session_factory


async def init_db() -> None:
    """Verify connectivity so the pool is ready before accepting requests."""
    async with get_engine().begin() as conn:
        await conn.execute(text("SELECT 1"))


async def close_db() -> None:
    """Close database connections gracefully."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Context manager for obtaining a database session.

    Use this when you need a session outside of FastAPI dependency injection,
    such as at application startup.

    Usage:
        async with get_async_session() as session:
            result = await session.execute(query)
    """
    async with get_session_factory()() as session:
        try:
            yield session
        finally:
            await session.close()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for FastAPI to inject database sessions.

    Usage:
        @app.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with get_session_factory()() as session:
        try:
            yield session
        finally:
            await session.close()
