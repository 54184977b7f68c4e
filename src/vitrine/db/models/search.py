"""Saved search model."""

from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, PortableJSON, PortableUUID, TimestampMixin

if TYPE_CHECKING:
    from .exhibit import Exhibit


# Fields a curator may change through a single edit or a bulk update
EDITABLE_FIELDS = (
    "title",
    "short_description",
    "long_description",
    "featured_image",
    "query_params",
    "weight",
    "on_landing_page",
    "published",
)


class SavedSearch(TimestampMixin, Base):
    """A named, reusable query against the document index.

    query_params holds the filter/facet state exactly as the index
    understands it, e.g. {"q": "New Mexico", "f": {"genre_ssim": ["map"]}}.
    Display order is ascending weight, ties broken by creation order (id).
    """

    __tablename__ = "saved_searches"

    search_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    exhibit_id: Mapped[UUID] = mapped_column(
        PortableUUID(),
        ForeignKey("exhibits.exhibit_id", ondelete="CASCADE"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    short_description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    long_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    featured_image: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    query_params: Mapped[dict[str, Any]] = mapped_column(
        PortableJSON(), default=dict, nullable=False
    )

    weight: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    on_landing_page: Mapped[bool] = mapped_column(default=False, nullable=False)
    published: Mapped[bool] = mapped_column(default=True, nullable=False)

    # Optimistic lock counter, bumped by the ORM on every UPDATE
    lock_version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    exhibit: Mapped["Exhibit"] = relationship(back_populates="searches")

    __mapper_args__ = {"version_id_col": lock_version}

    __table_args__ = (
        Index("idx_saved_search_exhibit_order", "exhibit_id", "weight", "search_id"),
    )

    def snapshot(self) -> dict[str, Any]:
        """Return the editable state plus identity, for comparisons and logs."""
        data = {name: getattr(self, name) for name in EDITABLE_FIELDS}
        data["search_id"] = self.search_id
        data["exhibit_id"] = self.exhibit_id
        data["lock_version"] = self.lock_version
        return data

    def __repr__(self) -> str:
        return f"<SavedSearch(id={self.search_id}, title={self.title!r}, weight={self.weight})>"
