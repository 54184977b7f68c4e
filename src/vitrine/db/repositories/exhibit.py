"""Exhibit and page repositories."""

from uuid import UUID

from sqlalchemy import func, select

from vitrine.db.models.exhibit import Exhibit
from vitrine.db.models.page import Page, PageType
from vitrine.db.repositories.base import BaseRepository


class ExhibitRepository(BaseRepository[Exhibit, UUID]):
    """Repository for Exhibit records."""

    model = Exhibit

    async def get_by_slug(self, slug: str) -> Exhibit | None:
        """Look up an exhibit by slug, case-insensitively."""
        stmt = select(Exhibit).where(Exhibit.slug == slug.lower())
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def slug_exists(self, slug: str) -> bool:
        stmt = select(func.count(Exhibit.exhibit_id)).where(Exhibit.slug == slug)
        result = await self.db.execute(stmt)
        return (result.scalar() or 0) > 0

    async def list(self, *, limit: int = 100, offset: int = 0) -> list[Exhibit]:
        stmt = (
            select(Exhibit)
            .order_by(Exhibit.created_at.asc(), Exhibit.slug.asc())
            .limit(min(limit, 1000))
            .offset(offset)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())


class PageRepository(BaseRepository[Page, int]):
    """Repository for Page records."""

    model = Page

    async def list_for_exhibit(
        self, exhibit_id: UUID, page_type: PageType | None = None
    ) -> list[Page]:
        stmt = select(Page).where(Page.exhibit_id == exhibit_id)
        if page_type is not None:
            stmt = stmt.where(Page.page_type == page_type.value)
        stmt = stmt.order_by(Page.weight.asc(), Page.page_id.asc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def first_published(self, exhibit_id: UUID, page_type: PageType) -> Page | None:
        stmt = (
            select(Page)
            .where(
                Page.exhibit_id == exhibit_id,
                Page.page_type == page_type.value,
                Page.published.is_(True),
            )
            .order_by(Page.weight.asc(), Page.page_id.asc())
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()
