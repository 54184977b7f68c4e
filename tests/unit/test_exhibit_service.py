"""Unit tests for ExhibitService."""

import pytest
from sqlalchemy import func, select

from vitrine.core.exceptions import ExhibitNotFoundError, ValidationFailedError
from vitrine.core.exhibit import HOME_PAGE_TITLE, ExhibitInitState, ExhibitService
from vitrine.core.searches import DEFAULT_SEARCH_TITLE, SavedSearchCollection
from vitrine.db.models.exhibit import Exhibit, ExhibitConfiguration
from vitrine.db.models.page import Page, PageType
from vitrine.db.models.search import SavedSearch


async def _count(db_session, model, exhibit_id) -> int:
    stmt = select(func.count()).select_from(model).where(model.exhibit_id == exhibit_id)
    result = await db_session.execute(stmt)
    return result.scalar() or 0


async def _pages(db_session, exhibit_id) -> list[Page]:
    result = await db_session.execute(select(Page).where(Page.exhibit_id == exhibit_id))
    return list(result.scalars().all())


class TestCreateExhibit:
    """Tests for exhibit creation and initialization."""

    @pytest.mark.asyncio
    async def test_reaches_ready(self, db_session):
        """Test creation walks the init sequence to READY."""
        service = ExhibitService(db_session)

        exhibit = await service.create_exhibit({"title": "Maps of New Mexico"})

        assert service.init_state == ExhibitInitState.READY
        assert exhibit.slug == "maps-of-new-mexico"
        assert exhibit.published is True

    @pytest.mark.asyncio
    async def test_configuration_created(self, db_session):
        """Test every exhibit gets exactly one configuration."""
        exhibit = await ExhibitService(db_session).create_exhibit({"title": "Maps"})

        assert await _count(db_session, ExhibitConfiguration, exhibit.exhibit_id) == 1
        assert exhibit.configuration is not None
        assert exhibit.configuration.default_per_page == 10

    @pytest.mark.asyncio
    async def test_default_search_created(self, db_session):
        """Test an exhibit created without searches gets the browse-all search."""
        exhibit = await ExhibitService(db_session).create_exhibit({"title": "Maps"})

        searches = await SavedSearchCollection(db_session, exhibit.exhibit_id).ordered()

        assert [s.title for s in searches] == [DEFAULT_SEARCH_TITLE]
        assert searches[0].query_params == {}

    @pytest.mark.asyncio
    async def test_supplied_searches_skip_default(self, db_session):
        """Test supplied searches replace the default one."""
        exhibit = await ExhibitService(db_session).create_exhibit(
            {"title": "Maps", "searches": [{"title": "Atlases"}, {"title": "Charts"}]}
        )

        searches = await SavedSearchCollection(db_session, exhibit.exhibit_id).ordered()

        assert [s.title for s in searches] == ["Atlases", "Charts"]

    @pytest.mark.asyncio
    async def test_home_page_created(self, db_session):
        """Test a published home page is added after creation."""
        exhibit = await ExhibitService(db_session).create_exhibit({"title": "Maps"})

        pages = await _pages(db_session, exhibit.exhibit_id)

        assert len(pages) == 1
        assert pages[0].page_type == PageType.HOME.value
        assert pages[0].title == HOME_PAGE_TITLE
        assert pages[0].published is True

    @pytest.mark.asyncio
    async def test_home_page_failure_keeps_exhibit(self, db_session, monkeypatch):
        """Test a failed home page insert leaves the exhibit in place."""
        monkeypatch.setattr("vitrine.core.exhibit.HOME_PAGE_TITLE", None)
        service = ExhibitService(db_session)

        exhibit = await service.create_exhibit({"title": "Maps"})

        assert await service.get_exhibit(exhibit.exhibit_id) is not None
        assert await _pages(db_session, exhibit.exhibit_id) == []
        assert await _count(db_session, SavedSearch, exhibit.exhibit_id) == 1
        assert service.init_state == ExhibitInitState.READY

    @pytest.mark.asyncio
    async def test_slug_collision_gets_suffix(self, db_session):
        """Test titles producing the same slug get numbered suffixes."""
        service = ExhibitService(db_session)

        first = await service.create_exhibit({"title": "Maps"})
        second = await service.create_exhibit({"title": "maps!"})
        third = await service.create_exhibit({"title": "MAPS"})

        assert [first.slug, second.slug, third.slug] == ["maps", "maps-2", "maps-3"]

    @pytest.mark.asyncio
    async def test_description_sanitized(self, db_session):
        """Test markup is stripped from the description."""
        exhibit = await ExhibitService(db_session).create_exhibit(
            {
                "title": "Maps",
                "description": "<p>Maps of <b>New Mexico</b></p><script>alert(1)</script>",
            }
        )

        assert exhibit.description == "Maps of New Mexico"

    @pytest.mark.asyncio
    async def test_blank_title_rejected(self, db_session):
        """Test a blank title is a field error and nothing is created."""
        service = ExhibitService(db_session)

        with pytest.raises(ValidationFailedError) as exc_info:
            await service.create_exhibit({"title": "   "})

        assert [e.field for e in exc_info.value.errors] == ["title"]
        assert await service.list_exhibits() == []

    @pytest.mark.asyncio
    async def test_invalid_contact_email_rejected(self, db_session):
        """Test every invalid contact address is reported."""
        with pytest.raises(ValidationFailedError) as exc_info:
            await ExhibitService(db_session).create_exhibit(
                {"title": "Maps", "contact_emails": ["bob", "ok@example.com", "carol@"]}
            )

        assert [e.message for e in exc_info.value.errors] == [
            "bob is not valid",
            "carol@ is not valid",
        ]


class TestDefaultExhibit:
    """Tests for ensure_default_exhibit()."""

    @pytest.mark.asyncio
    async def test_created_once(self, db_session):
        """Test repeated calls return the same exhibit."""
        service = ExhibitService(db_session)

        first = await service.ensure_default_exhibit()
        second = await service.ensure_default_exhibit()

        assert first.exhibit_id == second.exhibit_id
        assert first.slug == "default"
        result = await db_session.execute(
            select(func.count()).select_from(Exhibit).where(Exhibit.slug == "default")
        )
        assert result.scalar() == 1

    @pytest.mark.asyncio
    async def test_fully_initialized(self, db_session):
        """Test the default exhibit gets configuration, search and home page."""
        exhibit = await ExhibitService(db_session).ensure_default_exhibit()

        assert await _count(db_session, ExhibitConfiguration, exhibit.exhibit_id) == 1
        assert await _count(db_session, SavedSearch, exhibit.exhibit_id) == 1
        assert len(await _pages(db_session, exhibit.exhibit_id)) == 1


class TestReads:
    """Tests for lookups and derived queries."""

    @pytest.mark.asyncio
    async def test_slug_lookup_case_insensitive(self, db_session):
        service = ExhibitService(db_session)
        exhibit = await service.create_exhibit({"title": "Maps"})

        found = await service.get_by_slug_or_raise("MAPS")

        assert found.exhibit_id == exhibit.exhibit_id

    @pytest.mark.asyncio
    async def test_unknown_slug_raises(self, db_session):
        with pytest.raises(ExhibitNotFoundError):
            await ExhibitService(db_session).get_by_slug_or_raise("missing")

    @pytest.mark.asyncio
    async def test_main_about_page(self, db_session):
        """Test the first published about page by weight is chosen."""
        service = ExhibitService(db_session)
        exhibit = await service.create_exhibit({"title": "Maps"})
        db_session.add_all(
            [
                Page(exhibit_id=exhibit.exhibit_id, page_type="about", title="Draft", weight=0),
                Page(
                    exhibit_id=exhibit.exhibit_id,
                    page_type="about",
                    title="Second",
                    weight=2,
                    published=True,
                ),
                Page(
                    exhibit_id=exhibit.exhibit_id,
                    page_type="about",
                    title="First",
                    weight=1,
                    published=True,
                ),
            ]
        )
        await db_session.flush()

        page = await service.main_about_page(exhibit.exhibit_id)

        assert page is not None
        assert page.title == "First"

    @pytest.mark.asyncio
    async def test_main_about_page_none(self, db_session):
        """Test an exhibit without about pages has none."""
        service = ExhibitService(db_session)
        exhibit = await service.create_exhibit({"title": "Maps"})

        assert await service.main_about_page(exhibit.exhibit_id) is None

    @pytest.mark.asyncio
    async def test_has_browse_categories(self, db_session):
        service = ExhibitService(db_session)
        exhibit = await service.create_exhibit({"title": "Maps"})

        assert await service.has_browse_categories(exhibit.exhibit_id) is True


class TestUpdateExhibit:
    """Tests for update_exhibit()."""

    @pytest.mark.asyncio
    async def test_slug_immutable(self, db_session):
        """Test retitling never changes the slug."""
        service = ExhibitService(db_session)
        exhibit = await service.create_exhibit({"title": "Maps"})

        updated = await service.update_exhibit(exhibit, {"title": "Charts and Atlases"})

        assert updated.title == "Charts and Atlases"
        assert updated.slug == "maps"

    @pytest.mark.asyncio
    async def test_slug_not_updatable(self, db_session):
        """Test a slug in the update is rejected."""
        service = ExhibitService(db_session)
        exhibit = await service.create_exhibit({"title": "Maps"})

        with pytest.raises(ValidationFailedError) as exc_info:
            await service.update_exhibit(exhibit, {"slug": "other"})

        assert [e.field for e in exc_info.value.errors] == ["slug"]

    @pytest.mark.asyncio
    async def test_description_sanitized(self, db_session):
        service = ExhibitService(db_session)
        exhibit = await service.create_exhibit({"title": "Maps"})

        updated = await service.update_exhibit(exhibit, {"description": "<em>Old</em> maps"})

        assert updated.description == "Old maps"

    @pytest.mark.asyncio
    async def test_null_title_rejected(self, db_session):
        service = ExhibitService(db_session)
        exhibit = await service.create_exhibit({"title": "Maps"})

        with pytest.raises(ValidationFailedError) as exc_info:
            await service.update_exhibit(exhibit, {"title": None})

        assert [e.field for e in exc_info.value.errors] == ["title"]
        assert exhibit.title == "Maps"

    @pytest.mark.asyncio
    async def test_contact_emails_replaced(self, db_session):
        """Test the contact list is rebuilt from the submitted rows."""
        service = ExhibitService(db_session)
        exhibit = await service.create_exhibit(
            {"title": "Maps", "contact_emails": ["old@example.com"]}
        )

        emails = await service.replace_contact_emails(
            exhibit, {"0": {"email": "a@example.com"}, "1": {"email": ""}, "2": {"email": "b@example.com"}}
        )

        assert emails == ["a@example.com", "b@example.com"]
        assert [e.email for e in service.contact_email_entries(exhibit)] == emails

    @pytest.mark.asyncio
    async def test_invalid_contact_email_leaves_list(self, db_session):
        """Test an invalid row rejects the whole replacement."""
        service = ExhibitService(db_session)
        exhibit = await service.create_exhibit(
            {"title": "Maps", "contact_emails": ["old@example.com"]}
        )

        with pytest.raises(ValidationFailedError) as exc_info:
            await service.replace_contact_emails(
                exhibit, [{"email": "bob"}, {"email": "bob@example.com"}]
            )

        assert [e.message for e in exc_info.value.errors] == ["bob is not valid"]
        assert exhibit.contact_emails == ["old@example.com"]


class TestDeleteExhibit:
    """Tests for delete_exhibit()."""

    @pytest.mark.asyncio
    async def test_cascades_to_owned_records(self, db_session):
        """Test configuration, searches and pages go with the exhibit."""
        service = ExhibitService(db_session)
        exhibit = await service.create_exhibit(
            {"title": "Maps", "searches": [{"title": "A"}, {"title": "B"}]}
        )
        exhibit_id = exhibit.exhibit_id

        await service.delete_exhibit(exhibit)

        assert await service.get_exhibit(exhibit_id) is None
        assert await _count(db_session, ExhibitConfiguration, exhibit_id) == 0
        assert await _count(db_session, SavedSearch, exhibit_id) == 0
        assert await _count(db_session, Page, exhibit_id) == 0

    @pytest.mark.asyncio
    async def test_other_exhibits_untouched(self, db_session):
        service = ExhibitService(db_session)
        doomed = await service.create_exhibit({"title": "Doomed"})
        kept = await service.create_exhibit({"title": "Kept"})

        await service.delete_exhibit(doomed)

        assert await _count(db_session, SavedSearch, kept.exhibit_id) == 1
        assert await _count(db_session, Page, kept.exhibit_id) == 1
