"""Health check endpoints."""

import time
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vitrine import __version__
from vitrine.api.schemas.health import (
    ComponentHealth,
    HealthDetailResponse,
    HealthResponse,
    HealthStatus,
)
from vitrine.db.config import get_db

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Basic health check",
    description="Returns basic liveness status.",
)
async def health_check() -> HealthResponse:
    """Liveness check; 200 whenever the process is serving requests."""
    return HealthResponse(
        status=HealthStatus.HEALTHY,
        version=__version__,
        timestamp=datetime.now(UTC),
    )


@router.get(
    "/health/db",
    response_model=HealthDetailResponse,
    summary="Database health check",
    description="Checks database connectivity. Answers 503 when the database is unreachable.",
    responses={503: {"model": HealthDetailResponse}},
)
async def health_db(
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Database readiness check with latency."""
    db_health = await _check_database(db)
    body = HealthDetailResponse(
        status=db_health.status,
        version=__version__,
        timestamp=datetime.now(UTC),
        database=db_health,
    )
    if db_health.status != HealthStatus.HEALTHY:
        return JSONResponse(status_code=503, content=body.model_dump(mode="json"))
    return body


async def _check_database(db: AsyncSession) -> ComponentHealth:
    start = time.perf_counter()
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        latency_ms = (time.perf_counter() - start) * 1000
        return ComponentHealth(
            status=HealthStatus.UNHEALTHY,
            message=f"Database connection failed: {str(e)[:100]}",
            latency_ms=round(latency_ms, 2),
        )

    latency_ms = (time.perf_counter() - start) * 1000
    return ComponentHealth(
        status=HealthStatus.HEALTHY,
        message="Database connection successful",
        latency_ms=round(latency_ms, 2),
    )
