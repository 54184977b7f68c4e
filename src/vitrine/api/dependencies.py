"""FastAPI dependencies for API endpoints."""

from typing import Annotated

from fastapi import Depends, Path, Request
from sqlalchemy.ext.asyncio import AsyncSession

from vitrine.config.settings import Settings, get_settings
from vitrine.core.exhibit import ExhibitService
from vitrine.db.config import get_db
from vitrine.db.models.exhibit import Exhibit
from vitrine.index.client import DocumentIndexClient

__all__ = [
    "get_app_settings",
    "get_db",
    "get_exhibit",
    "get_exhibit_service",
    "get_index_client",
]


def get_app_settings(request: Request) -> Settings:
    """Settings the app was created with, falling back to the global ones."""
    return getattr(request.app.state, "settings", None) or get_settings()


def get_index_client(request: Request) -> DocumentIndexClient:
    """The document index client opened in the app lifespan.

    Raises:
        RuntimeError: If the app was started without a lifespan
    """
    client = getattr(request.app.state, "index_client", None)
    if client is None:
        raise RuntimeError("Document index client is not initialized")
    return client


def get_exhibit_service(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ExhibitService:
    return ExhibitService(db)


async def get_exhibit(
    slug: Annotated[str, Path(description="Exhibit slug")],
    service: Annotated[ExhibitService, Depends(get_exhibit_service)],
) -> Exhibit:
    """Resolve the exhibit named in the path.

    Raises:
        ExhibitNotFoundError: If no exhibit has this slug
    """
    return await service.get_by_slug_or_raise(slug)
