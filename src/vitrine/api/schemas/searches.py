"""Saved search API schemas."""

from typing import Any

from pydantic import BaseModel, Field

from vitrine.core.exceptions import FieldError, ValidationFailedError
from vitrine.db.schemas.search import SavedSearchResponse


class SearchListResponse(BaseModel):
    """Saved searches in display order."""

    searches: list[SavedSearchResponse]


class BulkUpdateRequest(BaseModel):
    """Bulk partial update of saved searches.

    Accepts either an id-keyed object, ``{"12": {"weight": 0}}``, or a list
    of records each carrying its id, ``[{"id": 12, "weight": 0}]``.
    """

    searches: dict[str, dict[str, Any]] | list[dict[str, Any]] = Field(
        ..., description="Per-search field changes, keyed by id or listed with ids"
    )

    model_config = {"json_schema_extra": {"example": {
        "searches": {"12": {"weight": 0}, "14": {"weight": 1, "on_landing_page": True}},
    }}}

    def to_updates(self) -> dict[str, dict[str, Any]]:
        """Normalize both accepted shapes into id -> fields.

        Raises:
            ValidationFailedError: If a listed record has no id or an id repeats
        """
        if isinstance(self.searches, dict):
            return dict(self.searches)

        updates: dict[str, dict[str, Any]] = {}
        errors: list[FieldError] = []
        for position, record in enumerate(self.searches):
            fields = dict(record)
            search_id = fields.pop("id", None)
            if search_id is None:
                errors.append(FieldError(field=f"searches.{position}.id", message="Field required"))
                continue
            key = str(search_id)
            if key in updates:
                errors.append(
                    FieldError(field=f"searches.{position}.id", message=f"Duplicate id {key}")
                )
                continue
            updates[key] = fields

        if errors:
            raise ValidationFailedError(errors)
        return updates


class BulkUpdateResponse(BaseModel):
    """Result of a bulk update."""

    updated: list[int] = Field(..., description="Ids of the updated saved searches, sorted")
    count: int
    message: str


class AutocompleteDoc(BaseModel):
    """One typeahead suggestion. Missing values are empty strings."""

    id: str
    title: str
    description: str
    thumbnail: str
    url: str


class AutocompleteResponse(BaseModel):
    """Typeahead suggestions in index ranking order."""

    docs: list[AutocompleteDoc]
    count: int
