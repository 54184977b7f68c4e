"""Page model for exhibit home, about and feature pages."""

from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, PortableUUID, TimestampMixin

if TYPE_CHECKING:
    from .exhibit import Exhibit


class PageType(str, Enum):
    """Kinds of page an exhibit can own."""

    HOME = "home"
    ABOUT = "about"
    FEATURE = "feature"


class Page(TimestampMixin, Base):
    """A content page belonging to an exhibit.

    Page content and editing live outside this service; only the fields
    needed to create the default home page and to pick the main about page
    are modelled here.
    """

    __tablename__ = "pages"

    page_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    exhibit_id: Mapped[UUID] = mapped_column(
        PortableUUID(),
        ForeignKey("exhibits.exhibit_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    page_type: Mapped[str] = mapped_column(String(20), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    published: Mapped[bool] = mapped_column(default=False, nullable=False)
    weight: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    exhibit: Mapped["Exhibit"] = relationship(back_populates="pages")

    __table_args__ = (Index("idx_page_exhibit_type", "exhibit_id", "page_type", "weight"),)

    def __repr__(self) -> str:
        return f"<Page(id={self.page_id}, type={self.page_type}, title={self.title!r})>"
