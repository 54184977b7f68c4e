"""Exhibit API schemas."""

from pydantic import BaseModel

from vitrine.db.schemas.exhibit import ContactEmailEntry, ExhibitResponse


class ExhibitListResponse(BaseModel):
    exhibits: list[ExhibitResponse]


class PageSummary(BaseModel):
    """Minimal page reference."""

    page_id: int
    page_type: str
    title: str

    model_config = {"from_attributes": True}


class ExhibitDetailResponse(ExhibitResponse):
    """Exhibit with derived browse and about-page information."""

    has_browse_categories: bool
    main_about_page: PageSummary | None = None


class ContactEmailsRequest(BaseModel):
    """Replacement contact list, as a list of rows or an index-keyed object."""

    contact_emails: list[ContactEmailEntry] | dict[str, ContactEmailEntry]


class ContactEmailsResponse(BaseModel):
    contact_emails: list[ContactEmailEntry]
