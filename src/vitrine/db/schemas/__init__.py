"""Pydantic schemas for API validation."""

from .exhibit import ContactEmailEntry, ExhibitCreate, ExhibitResponse, ExhibitUpdate
from .search import (
    QueryParams,
    SavedSearchCreate,
    SavedSearchPatch,
    SavedSearchResponse,
    validate_query_params,
)

__all__ = [
    "ContactEmailEntry",
    "ExhibitCreate",
    "ExhibitUpdate",
    "ExhibitResponse",
    "QueryParams",
    "SavedSearchCreate",
    "SavedSearchPatch",
    "SavedSearchResponse",
    "validate_query_params",
]
