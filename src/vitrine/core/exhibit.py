"""Exhibit management service.

Creating an exhibit walks it through a fixed initialization sequence:

    NEW -> CONFIG_INITIALIZED -> SEARCHES_INITIALIZED
        -> HOME_PAGE_INITIALIZED -> READY

The configuration and the default browse search are part of the creating
transaction. The home page is added after the exhibit is committed; if that
step fails the exhibit stays and the failure is only logged.
"""

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_utils.compat import uuid7

from vitrine.core.contacts import ContactEmailList
from vitrine.core.exceptions import (
    ExhibitNotFoundError,
    FieldError,
    ValidationFailedError,
    field_errors_from_pydantic,
)
from vitrine.core.logging import get_logger
from vitrine.core.searches import SavedSearchCollection
from vitrine.db.models.exhibit import Exhibit, ExhibitConfiguration
from vitrine.db.models.page import Page, PageType
from vitrine.db.models.search import SavedSearch
from vitrine.db.repositories.exhibit import ExhibitRepository, PageRepository
from vitrine.db.schemas.exhibit import ContactEmailEntry, ExhibitCreate, ExhibitUpdate
from vitrine.db.schemas.search import SavedSearchCreate
from vitrine.security.sanitization import slugify, strip_html

logger = get_logger(__name__)

HOME_PAGE_TITLE = "Exhibit Home"


class ExhibitInitState(str, Enum):
    """Initialization progress of a newly created exhibit."""

    NEW = "new"
    CONFIG_INITIALIZED = "config_initialized"
    SEARCHES_INITIALIZED = "searches_initialized"
    HOME_PAGE_INITIALIZED = "home_page_initialized"
    READY = "ready"


class ExhibitService:
    """Service for exhibit CRUD operations.

    Each public mutating method commits its own unit of work.
    """

    def __init__(self, db: AsyncSession):
        """Initialize exhibit service with database session.

        Args:
            db: Async SQLAlchemy session for database operations
        """
        self.db = db
        self.repo = ExhibitRepository(db)
        self.pages = PageRepository(db)
        self.init_state: ExhibitInitState | None = None

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create_exhibit(self, data: ExhibitCreate | Mapping[str, Any]) -> Exhibit:
        """Create a new exhibit and initialize its owned resources.

        Args:
            data: Validated create schema or raw field mapping

        Returns:
            The created, committed Exhibit

        Raises:
            ValidationFailedError: If fields or contact emails are invalid
        """
        if not isinstance(data, ExhibitCreate):
            try:
                data = ExhibitCreate.model_validate(data)
            except ValidationError as exc:
                raise ValidationFailedError(field_errors_from_pydantic(exc)) from exc

        contacts = ContactEmailList([e.strip() for e in data.contact_emails if e.strip()])
        errors = contacts.validate()
        if errors:
            raise ValidationFailedError(errors)

        slug = await self._unique_slug(slugify(data.title))
        exhibit = Exhibit(
            exhibit_id=uuid7(),
            slug=slug,
            title=data.title,
            subtitle=data.subtitle,
            description=strip_html(data.description),
            facets=list(data.facets),
            contact_emails=contacts.emails,
            published=data.published,
        )
        await self._initialize(exhibit, data.searches or [])
        return exhibit

    async def ensure_default_exhibit(self, slug: str = "default", title: str = "Default exhibit") -> Exhibit:
        """Find or create the default exhibit.

        Safe against concurrent callers: the insert runs in a savepoint and a
        lost race on the unique slug re-reads the winner's row.
        """
        existing = await self.repo.get_by_slug(slug)
        if existing is not None:
            return existing

        self.init_state = ExhibitInitState.NEW
        exhibit = Exhibit(exhibit_id=uuid7(), slug=slug.lower(), title=title)
        try:
            async with self.db.begin_nested():
                await self._initialize_config(exhibit)
                self.db.add(exhibit)
                await self.db.flush()
        except IntegrityError:
            logger.info("default_exhibit_race_lost", slug=slug)
            winner = await self.repo.get_by_slug(slug)
            if winner is None:
                raise
            return winner

        await self._initialize_searches(exhibit, [])
        await self.db.commit()
        await self._create_home_page(exhibit)
        self._transition(exhibit, ExhibitInitState.READY)
        logger.info("default_exhibit_created", exhibit_id=str(exhibit.exhibit_id), slug=exhibit.slug)
        return exhibit

    async def _initialize(self, exhibit: Exhibit, searches: Iterable[SavedSearchCreate]) -> None:
        self.init_state = ExhibitInitState.NEW
        await self._initialize_config(exhibit)
        self.db.add(exhibit)
        await self.db.flush()
        await self._initialize_searches(exhibit, searches)
        await self.db.commit()

        logger.info(
            "exhibit_created",
            exhibit_id=str(exhibit.exhibit_id),
            slug=exhibit.slug,
            title=exhibit.title,
        )

        await self._create_home_page(exhibit)
        self._transition(exhibit, ExhibitInitState.READY)

    async def _initialize_config(self, exhibit: Exhibit) -> None:
        # Only reached for pending exhibits, whose unloaded relationship is None
        if exhibit.configuration is None:
            exhibit.configuration = ExhibitConfiguration(exhibit_id=exhibit.exhibit_id)
        self._transition(exhibit, ExhibitInitState.CONFIG_INITIALIZED)

    async def _initialize_searches(
        self, exhibit: Exhibit, searches: Iterable[SavedSearchCreate]
    ) -> None:
        for search in searches:
            self.db.add(SavedSearch(exhibit_id=exhibit.exhibit_id, **search.model_dump()))
        await self.db.flush()

        await SavedSearchCollection(self.db, exhibit.exhibit_id).ensure_default()
        self._transition(exhibit, ExhibitInitState.SEARCHES_INITIALIZED)

    async def _create_home_page(self, exhibit: Exhibit) -> Page | None:
        """Add the default home page after the exhibit is committed.

        A database failure here is logged and rolled back; the exhibit
        itself is already durable and is not affected.
        """
        page = Page(
            exhibit_id=exhibit.exhibit_id,
            page_type=PageType.HOME.value,
            title=HOME_PAGE_TITLE,
            published=True,
        )
        try:
            async with self.db.begin_nested():
                self.db.add(page)
            await self.db.commit()
        except SQLAlchemyError as exc:
            logger.warning(
                "home_page_creation_failed",
                exhibit_id=str(exhibit.exhibit_id),
                error=str(exc),
            )
            await self.db.rollback()
            await self.db.refresh(exhibit)
            return None

        self._transition(exhibit, ExhibitInitState.HOME_PAGE_INITIALIZED)
        return page

    def _transition(self, exhibit: Exhibit, state: ExhibitInitState) -> None:
        previous = self.init_state
        self.init_state = state
        logger.debug(
            "exhibit_init_transition",
            exhibit_id=str(exhibit.exhibit_id),
            from_state=previous.value if previous else None,
            to_state=state.value,
        )

    async def _unique_slug(self, base: str) -> str:
        candidate = base
        suffix = 2
        while await self.repo.slug_exists(candidate):
            candidate = f"{base}-{suffix}"
            suffix += 1
        return candidate

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_exhibit(self, exhibit_id: UUID) -> Exhibit | None:
        return await self.repo.get(exhibit_id)

    async def get_exhibit_or_raise(self, exhibit_id: UUID) -> Exhibit:
        """Get an exhibit by ID, raising if not found.

        Raises:
            ExhibitNotFoundError: If exhibit does not exist
        """
        exhibit = await self.get_exhibit(exhibit_id)
        if exhibit is None:
            raise ExhibitNotFoundError(exhibit_id)
        return exhibit

    async def get_by_slug_or_raise(self, slug: str) -> Exhibit:
        """Get an exhibit by slug (case-insensitive).

        Raises:
            ExhibitNotFoundError: If no exhibit has this slug
        """
        exhibit = await self.repo.get_by_slug(slug)
        if exhibit is None:
            raise ExhibitNotFoundError(slug)
        return exhibit

    async def list_exhibits(self, limit: int = 100, offset: int = 0) -> list[Exhibit]:
        return await self.repo.list(limit=limit, offset=offset)

    async def main_about_page(self, exhibit_id: UUID) -> Page | None:
        """The first published about page, by weight then creation order."""
        return await self.pages.first_published(exhibit_id, PageType.ABOUT)

    async def has_browse_categories(self, exhibit_id: UUID) -> bool:
        return await SavedSearchCollection(self.db, exhibit_id).has_browse_categories()

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    async def update_exhibit(
        self, exhibit: Exhibit, data: ExhibitUpdate | Mapping[str, Any]
    ) -> Exhibit:
        """Update an exhibit's editable fields.

        The slug never changes, even when the title does. A changed
        description is stripped of markup before it is stored.

        Raises:
            ValidationFailedError: If fields or contact emails are invalid
        """
        if not isinstance(data, ExhibitUpdate):
            try:
                data = ExhibitUpdate.model_validate(data)
            except ValidationError as exc:
                raise ValidationFailedError(field_errors_from_pydantic(exc)) from exc

        supplied = data.model_fields_set
        errors: list[FieldError] = []
        if "title" in supplied and data.title is None:
            errors.append(FieldError(field="title", message="Title can't be blank"))
        if "published" in supplied and data.published is None:
            errors.append(FieldError(field="published", message="published cannot be null"))

        contacts = None
        if "contact_emails_attributes" in supplied:
            contacts = ContactEmailList.from_entries(data.contact_emails_attributes or [])
            errors.extend(contacts.validate())

        if errors:
            raise ValidationFailedError(errors)

        changed: list[str] = []
        for name in ("title", "subtitle", "published"):
            if name in supplied and getattr(exhibit, name) != getattr(data, name):
                setattr(exhibit, name, getattr(data, name))
                changed.append(name)

        if "facets" in supplied and exhibit.facets != (data.facets or []):
            exhibit.facets = list(data.facets or [])
            changed.append("facets")

        if "description" in supplied and data.description != exhibit.description:
            exhibit.description = strip_html(data.description)
            changed.append("description")

        if contacts is not None and contacts.emails != exhibit.contact_emails:
            exhibit.contact_emails = contacts.emails
            changed.append("contact_emails")

        if changed:
            await self.db.flush()
            await self.db.commit()
            logger.info(
                "exhibit_updated",
                exhibit_id=str(exhibit.exhibit_id),
                slug=exhibit.slug,
                changed=changed,
            )
        return exhibit

    def contact_email_entries(self, exhibit: Exhibit) -> list[ContactEmailEntry]:
        """The exhibit's contact addresses as editable rows."""
        return ContactEmailList(list(exhibit.contact_emails or [])).entries()

    async def replace_contact_emails(
        self,
        exhibit: Exhibit,
        entries: Iterable[ContactEmailEntry] | Mapping[str, ContactEmailEntry],
    ) -> list[str]:
        """Replace the whole contact list from submitted rows.

        Raises:
            ValidationFailedError: One error per invalid address
        """
        rows = dict(entries) if isinstance(entries, Mapping) else list(entries)
        await self.update_exhibit(exhibit, ExhibitUpdate(contact_emails_attributes=rows))
        return list(exhibit.contact_emails)

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------

    async def delete_exhibit(self, exhibit: Exhibit) -> None:
        """Delete an exhibit with its configuration, searches and pages."""
        exhibit_id = exhibit.exhibit_id
        slug = exhibit.slug
        await self.repo.delete(exhibit)
        await self.db.commit()
        logger.info("exhibit_deleted", exhibit_id=str(exhibit_id), slug=slug)
