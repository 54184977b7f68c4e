"""Database models for Vitrine."""

from .base import Base, TimestampMixin
from .exhibit import Exhibit, ExhibitConfiguration
from .page import Page, PageType
from .search import EDITABLE_FIELDS, SavedSearch

__all__ = [
    "Base",
    "TimestampMixin",
    "Exhibit",
    "ExhibitConfiguration",
    "Page",
    "PageType",
    "SavedSearch",
    "EDITABLE_FIELDS",
]
