"""Saved search collection and single-record curation."""

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from vitrine.core.exceptions import (
    FieldError,
    SavedSearchNotFoundError,
    ValidationFailedError,
    field_errors_from_pydantic,
)
from vitrine.core.logging import get_logger
from vitrine.core.reconciliation import ReconciliationEngine
from vitrine.db.models.search import SavedSearch
from vitrine.db.repositories.search import SavedSearchRepository
from vitrine.db.schemas.search import SavedSearchCreate, SavedSearchPatch

logger = get_logger(__name__)

DEFAULT_SEARCH_TITLE = "Browse All Exhibit Items"
DEFAULT_SEARCH_SHORT_DESCRIPTION = "Search results for all items in this exhibit"
DEFAULT_SEARCH_LONG_DESCRIPTION = "All items in this exhibit"


class SavedSearchCollection:
    """The ordered set of saved searches owned by one exhibit.

    Display order is ascending weight with ties broken by creation order,
    which makes repeated reads stable for equal weights.
    """

    def __init__(self, db: AsyncSession, exhibit_id: UUID):
        self.db = db
        self.exhibit_id = exhibit_id
        self.repo = SavedSearchRepository(db)

    async def ordered(self) -> list[SavedSearch]:
        """All saved searches in display order."""
        return await self.repo.list_ordered(self.exhibit_id)

    async def published(self) -> list[SavedSearch]:
        """Published saved searches in display order."""
        return await self.repo.list_published(self.exhibit_id)

    async def landing_page(self) -> list[SavedSearch]:
        """Published saved searches flagged for the exhibit's home view."""
        return await self.repo.list_published(self.exhibit_id, landing_page_only=True)

    async def has_browse_categories(self) -> bool:
        return await self.repo.any_published(self.exhibit_id)

    async def is_empty(self) -> bool:
        return await self.repo.count_for_exhibit(self.exhibit_id) == 0

    async def ensure_default(self) -> SavedSearch | None:
        """Create the "browse all" search if the collection is empty.

        Returns:
            The created search, or None when the collection already had one
        """
        if not await self.is_empty():
            return None

        search = SavedSearch(
            exhibit_id=self.exhibit_id,
            title=DEFAULT_SEARCH_TITLE,
            short_description=DEFAULT_SEARCH_SHORT_DESCRIPTION,
            long_description=DEFAULT_SEARCH_LONG_DESCRIPTION,
            query_params={},
            published=True,
        )
        await self.repo.add(search)
        logger.info(
            "default_search_created",
            exhibit_id=str(self.exhibit_id),
            search_id=search.search_id,
        )
        return search


class SavedSearchService:
    """Create, edit and delete individual saved searches of one exhibit.

    Each method is its own unit of work and commits on success.
    """

    def __init__(self, db: AsyncSession, exhibit_id: UUID):
        self.db = db
        self.exhibit_id = exhibit_id
        self.repo = SavedSearchRepository(db)
        self.collection = SavedSearchCollection(db, exhibit_id)

    async def get_or_raise(self, search_id: int) -> SavedSearch:
        """Get a saved search of this exhibit.

        Raises:
            SavedSearchNotFoundError: If missing or owned by another exhibit
        """
        search = await self.repo.get_for_exhibit(self.exhibit_id, search_id)
        if search is None:
            raise SavedSearchNotFoundError([search_id], self.exhibit_id)
        return search

    async def create(self, data: SavedSearchCreate | Mapping[str, Any]) -> SavedSearch:
        """Create a saved search from validated or raw data.

        Raises:
            ValidationFailedError: If raw data does not validate
        """
        if not isinstance(data, SavedSearchCreate):
            try:
                data = SavedSearchCreate.model_validate(data)
            except ValidationError as exc:
                raise ValidationFailedError(field_errors_from_pydantic(exc)) from exc

        search = SavedSearch(exhibit_id=self.exhibit_id, **data.model_dump())
        await self.repo.add(search)
        await self.db.commit()

        logger.info(
            "saved_search_created",
            exhibit_id=str(self.exhibit_id),
            search_id=search.search_id,
            title=search.title,
        )
        return search

    async def update(
        self, search_id: int, data: SavedSearchPatch | Mapping[str, Any]
    ) -> SavedSearch:
        """Apply a partial edit to one saved search.

        Raises:
            SavedSearchNotFoundError: If the search is not in this exhibit
            ValidationFailedError: If the edit does not validate
            ConflictError: If lock_version does not match the stored version
        """
        engine = ReconciliationEngine(self.db, self.exhibit_id)
        payload = data.model_dump(exclude_unset=True) if isinstance(data, SavedSearchPatch) else data
        try:
            await engine.reconcile({search_id: payload})
        except ValidationFailedError as exc:
            # Errors of a single edit are reported against the bare field name
            prefix = f"{search_id}."
            raise ValidationFailedError(
                FieldError(field=e.field.removeprefix(prefix), message=e.message)
                for e in exc.errors
            ) from exc
        return await self.get_or_raise(search_id)

    async def delete(self, search_id: int) -> None:
        """Delete one saved search; nothing else is affected.

        Raises:
            SavedSearchNotFoundError: If the search is not in this exhibit
        """
        search = await self.get_or_raise(search_id)
        await self.repo.delete(search)
        await self.db.commit()
        logger.info("saved_search_deleted", exhibit_id=str(self.exhibit_id), search_id=search_id)

    async def list_ordered(self) -> list[SavedSearch]:
        return await self.collection.ordered()
