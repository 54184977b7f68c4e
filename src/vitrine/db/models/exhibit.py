"""Exhibit model: the tenant that owns saved searches, pages and configuration."""

from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from uuid_utils.compat import uuid7

from .base import Base, PortableJSON, PortableUUID, TimestampMixin

if TYPE_CHECKING:
    from .page import Page
    from .search import SavedSearch


class Exhibit(TimestampMixin, Base):
    """A curated collection of saved searches and pages.

    The slug is derived from the title at creation time and never rewritten,
    so links to the exhibit stay stable.
    """

    __tablename__ = "exhibits"

    exhibit_id: Mapped[UUID] = mapped_column(PortableUUID(), primary_key=True, default=uuid7)
    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    subtitle: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Free-form facet selection and contact addresses, stored whole
    facets: Mapped[list[str]] = mapped_column(PortableJSON(), default=list, nullable=False)
    contact_emails: Mapped[list[str]] = mapped_column(
        PortableJSON(), default=list, nullable=False
    )

    published: Mapped[bool] = mapped_column(default=True, nullable=False)

    configuration: Mapped["ExhibitConfiguration | None"] = relationship(
        back_populates="exhibit",
        cascade="all, delete-orphan",
        uselist=False,
        lazy="selectin",
    )
    searches: Mapped[list["SavedSearch"]] = relationship(
        back_populates="exhibit",
        cascade="all, delete-orphan",
    )
    pages: Mapped[list["Page"]] = relationship(
        back_populates="exhibit",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Exhibit(id={self.exhibit_id}, slug={self.slug})>"

    def __str__(self) -> str:
        return self.title


class ExhibitConfiguration(TimestampMixin, Base):
    """Display configuration for an exhibit's search views.

    Every exhibit has exactly one; it is created with the exhibit.
    """

    __tablename__ = "exhibit_configurations"

    configuration_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    exhibit_id: Mapped[UUID] = mapped_column(
        PortableUUID(),
        ForeignKey("exhibits.exhibit_id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    default_per_page: Mapped[int] = mapped_column(Integer, default=10, nullable=False)
    default_sort: Mapped[str | None] = mapped_column(String(100), nullable=True)
    default_view: Mapped[str] = mapped_column(String(50), default="list", nullable=False)
    settings: Mapped[dict[str, Any]] = mapped_column(PortableJSON(), default=dict, nullable=False)

    exhibit: Mapped[Exhibit] = relationship(back_populates="configuration")

    def __repr__(self) -> str:
        return f"<ExhibitConfiguration(exhibit_id={self.exhibit_id})>"
