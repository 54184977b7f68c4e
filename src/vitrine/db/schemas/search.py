"""Pydantic schemas for saved search validation."""

import re
from datetime import datetime
from typing import Annotated, Any
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationInfo, field_validator

# Stored query parameters the document index can apply
QUERY_KEY = "q"
FACET_KEY = "f"
RANGE_KEY = "range"
RANGE_BOUNDS = ("begin", "end")

# Presentation state saved alongside the filters; it never scopes results
DISPLAY_KEYS = frozenset({"sort", "per_page", "page", "view"})

# Weights are stored in a 32-bit integer column
MIN_WEIGHT = -(2**31)
MAX_WEIGHT = 2**31 - 1

_SCALARS = (str, int, float, bool)
_FIELD_NAME = re.compile(r"^[A-Za-z0-9_.\-]+$")
_NUMBER = re.compile(r"^-?\d+(\.\d+)?$")


def _check_values(value: Any, path: str) -> None:
    if isinstance(value, _SCALARS):
        return
    if isinstance(value, list):
        for i, item in enumerate(value):
            if not isinstance(item, _SCALARS):
                raise ValueError(f"{path}[{i}] must be a string, number or boolean")
        return
    raise ValueError(f"{path} must be a value or a list of values")


def _check_fields(value: Any, path: str) -> dict:
    if not isinstance(value, dict):
        raise ValueError(f"{path} must be a mapping of index field names")
    for name in value:
        if not isinstance(name, str) or not _FIELD_NAME.match(name):
            raise ValueError(f"{path} has an invalid index field name: {name!r}")
    return value


def _check_range(value: Any, path: str) -> None:
    if not isinstance(value, dict):
        raise ValueError(f"{path} must be a mapping with begin and/or end")
    for key, bound in value.items():
        if key not in RANGE_BOUNDS:
            raise ValueError(f"{path}.{key} is not a range bound")
        if bound is None or bound == "":
            continue
        if isinstance(bound, bool) or not (
            isinstance(bound, (int, float)) or (isinstance(bound, str) and _NUMBER.match(bound))
        ):
            raise ValueError(f"{path}.{key} must be a number")


def validate_query_params(value: dict[str, Any]) -> dict[str, Any]:
    """Check that a mapping is a filter state the document index can apply.

    Accepted keys are ``q`` (a value or list of values), ``f`` (index field
    -> value or list of values), ``range`` (index field -> ``{begin, end}``)
    and presentation keys such as ``sort`` that never scope results.

    Raises:
        ValueError: For any other key or a value of the wrong shape
    """
    for key, item in value.items():
        if key == FACET_KEY:
            for name, values in _check_fields(item, key).items():
                _check_values(values, f"{key}.{name}")
        elif key == RANGE_KEY:
            for name, bounds in _check_fields(item, key).items():
                _check_range(bounds, f"{key}.{name}")
        elif key == QUERY_KEY or key in DISPLAY_KEYS:
            _check_values(item, key)
        else:
            raise ValueError(f"{key!r} is not a filter the document index can apply")
    return value


QueryParams = Annotated[dict[str, Any], AfterValidator(validate_query_params)]


def _require_title(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Title can't be blank")
    return value


class SavedSearchCreate(BaseModel):
    """Schema for creating a saved search."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., max_length=255, description="Label shown to visitors")
    short_description: str | None = Field(None, max_length=255)
    long_description: str | None = None
    featured_image: str | None = Field(None, max_length=2048)
    query_params: QueryParams = Field(default_factory=dict)
    weight: int = Field(0, ge=MIN_WEIGHT, le=MAX_WEIGHT)
    on_landing_page: bool = False
    published: bool = True

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _require_title(v)


class SavedSearchPatch(BaseModel):
    """Partial update for one saved search.

    Only fields actually supplied are applied; see changes().
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(None, max_length=255)
    short_description: str | None = Field(None, max_length=255)
    long_description: str | None = None
    featured_image: str | None = Field(None, max_length=2048)
    query_params: QueryParams | None = None
    weight: int | None = Field(None, ge=MIN_WEIGHT, le=MAX_WEIGHT)
    on_landing_page: bool | None = None
    published: bool | None = None
    lock_version: int | None = Field(
        None, description="Stored version the client edited; mismatches are rejected"
    )

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _require_title(v)

    @field_validator("title", "query_params", "weight", "on_landing_page", "published", mode="before")
    @classmethod
    def reject_null(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    def changes(self) -> dict[str, Any]:
        """The supplied editable fields and their new values."""
        return self.model_dump(include=self.model_fields_set - {"lock_version"})


class SavedSearchResponse(BaseModel):
    """Schema for saved search API responses."""

    id: int = Field(validation_alias="search_id")
    exhibit_id: UUID
    title: str
    short_description: str | None
    long_description: str | None
    featured_image: str | None
    query_params: dict[str, Any]
    weight: int
    on_landing_page: bool
    published: bool
    lock_version: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
