"""Pydantic schemas for exhibit API validation."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .search import SavedSearchCreate


class ContactEmailEntry(BaseModel):
    """One row of the contact email editor.

    Entries have no identity of their own; the exhibit's list is replaced
    as a whole from the submitted entries.
    """

    email: str = ""


class ExhibitCreate(BaseModel):
    """Schema for creating a new exhibit."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=1, max_length=255, description="Exhibit display title")
    subtitle: str | None = Field(None, max_length=255)
    description: str | None = None
    facets: list[str] = Field(default_factory=list)
    contact_emails: list[str] = Field(default_factory=list)
    published: bool = True
    searches: list[SavedSearchCreate] | None = Field(
        None, description="Initial saved searches; a default browse search is added if omitted"
    )

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title can't be blank")
        return v


class ExhibitUpdate(BaseModel):
    """Schema for updating an existing exhibit.

    The slug is not editable.
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(None, min_length=1, max_length=255)
    subtitle: str | None = Field(None, max_length=255)
    description: str | None = None
    facets: list[str] | None = None
    published: bool | None = None
    contact_emails_attributes: list[ContactEmailEntry] | dict[str, ContactEmailEntry] | None = (
        None
    )

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Title can't be blank")
        return v


class ExhibitResponse(BaseModel):
    """Schema for exhibit API responses."""

    exhibit_id: UUID
    slug: str
    title: str
    subtitle: str | None
    description: str | None
    facets: list[str]
    contact_emails: list[str]
    published: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
