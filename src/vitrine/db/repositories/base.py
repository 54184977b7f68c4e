"""Base repository with common data access operations.

Repositories never commit; the service that owns the unit of work decides
when to flush, commit or roll back.

Usage:
    class PageRepository(BaseRepository[Page, int]):
        model = Page

    repo = PageRepository(db_session)
    page = await repo.get(page_id)
"""

from collections.abc import Sequence
from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from vitrine.db.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)
PKType = TypeVar("PKType", bound=UUID | int | str)


class BaseRepository(Generic[ModelType, PKType]):
    """Generic repository for SQLAlchemy models.

    Type Parameters:
        ModelType: The SQLAlchemy model class
        PKType: The type of the primary key (UUID, int, or str)

    Attributes:
        model: The model class
        db: The database session
    """

    model: type[ModelType]

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, pk: PKType) -> ModelType | None:
        """Get a single record by primary key, or None."""
        return await self.db.get(self.model, pk)

    async def get_many(self, pks: Sequence[PKType]) -> list[ModelType]:
        """Get the records among pks that exist (order not guaranteed)."""
        if not pks:
            return []
        stmt = select(self.model).where(self._get_pk_column().in_(pks))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def count(self) -> int:
        """Count total records."""
        stmt = select(func.count(self._get_pk_column()))
        result = await self.db.execute(stmt)
        return result.scalar() or 0

    async def add(self, obj: ModelType) -> ModelType:
        """Stage a new record and flush so generated keys are populated."""
        self.db.add(obj)
        await self.db.flush()
        return obj

    async def delete(self, obj: ModelType) -> None:
        """Delete a record (cascades follow the model's relationships)."""
        await self.db.delete(obj)
        await self.db.flush()

    def _get_pk_column(self):
        """Get the primary key column for this model.

        Raises:
            ValueError: If no primary key found
        """
        pk_cols = self.model.__mapper__.primary_key
        if not pk_cols:
            raise ValueError(f"No primary key found for {self.model.__name__}")
        return pk_cols[0]
