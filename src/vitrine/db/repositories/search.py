"""Saved search repository: exhibit-scoped lookups and display ordering."""

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import Select, exists, func, select

from vitrine.db.models.search import SavedSearch
from vitrine.db.repositories.base import BaseRepository


def display_order(stmt: Select) -> Select:
    """Ascending weight, ties broken by creation order."""
    return stmt.order_by(SavedSearch.weight.asc(), SavedSearch.search_id.asc())


class SavedSearchRepository(BaseRepository[SavedSearch, int]):
    """Repository for SavedSearch records.

    Every lookup is scoped to one exhibit; a search owned by another exhibit
    is indistinguishable from a missing one.
    """

    model = SavedSearch

    def _scoped(self, exhibit_id: UUID) -> Select:
        return select(SavedSearch).where(SavedSearch.exhibit_id == exhibit_id)

    async def get_for_exhibit(self, exhibit_id: UUID, search_id: int) -> SavedSearch | None:
        stmt = self._scoped(exhibit_id).where(SavedSearch.search_id == search_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_many_for_exhibit(
        self, exhibit_id: UUID, search_ids: Sequence[int]
    ) -> dict[int, SavedSearch]:
        """Resolve ids within an exhibit, keyed by id. Unknown ids are absent."""
        if not search_ids:
            return {}
        stmt = self._scoped(exhibit_id).where(SavedSearch.search_id.in_(search_ids))
        result = await self.db.execute(stmt)
        return {s.search_id: s for s in result.scalars().all()}

    async def list_ordered(self, exhibit_id: UUID) -> list[SavedSearch]:
        result = await self.db.execute(display_order(self._scoped(exhibit_id)))
        return list(result.scalars().all())

    async def list_published(
        self, exhibit_id: UUID, *, landing_page_only: bool = False
    ) -> list[SavedSearch]:
        stmt = self._scoped(exhibit_id).where(SavedSearch.published.is_(True))
        if landing_page_only:
            stmt = stmt.where(SavedSearch.on_landing_page.is_(True))
        result = await self.db.execute(display_order(stmt))
        return list(result.scalars().all())

    async def count_for_exhibit(self, exhibit_id: UUID) -> int:
        stmt = select(func.count(SavedSearch.search_id)).where(
            SavedSearch.exhibit_id == exhibit_id
        )
        result = await self.db.execute(stmt)
        return result.scalar() or 0

    async def any_published(self, exhibit_id: UUID) -> bool:
        stmt = select(
            exists().where(
                SavedSearch.exhibit_id == exhibit_id,
                SavedSearch.published.is_(True),
            )
        )
        result = await self.db.execute(stmt)
        return bool(result.scalar())
