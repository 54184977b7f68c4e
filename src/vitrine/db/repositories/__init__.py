"""Database repositories for clean data access."""

from .base import BaseRepository
from .exhibit import ExhibitRepository, PageRepository
from .search import SavedSearchRepository, display_order

__all__ = [
    "BaseRepository",
    "ExhibitRepository",
    "PageRepository",
    "SavedSearchRepository",
    "display_order",
]
