"""Core curation logic: exhibits, saved searches and reconciliation.

Import the typeahead proxy from vitrine.core.autocomplete; it depends on
vitrine.index, which imports from this package.
"""

from vitrine.core.contacts import ContactEmailList
from vitrine.core.context import RequestContext, create_context, request_context
from vitrine.core.exceptions import (
    ConflictError,
    ExhibitNotFoundError,
    FieldError,
    NotFoundError,
    SavedSearchNotFoundError,
    UpstreamUnavailableError,
    ValidationFailedError,
)
from vitrine.core.exhibit import ExhibitInitState, ExhibitService
from vitrine.core.reconciliation import ReconciliationEngine
from vitrine.core.searches import SavedSearchCollection, SavedSearchService

__all__ = [
    "ConflictError",
    "ContactEmailList",
    "ExhibitInitState",
    "ExhibitNotFoundError",
    "ExhibitService",
    "FieldError",
    "NotFoundError",
    "ReconciliationEngine",
    "RequestContext",
    "SavedSearchCollection",
    "SavedSearchNotFoundError",
    "SavedSearchService",
    "UpstreamUnavailableError",
    "ValidationFailedError",
    "create_context",
    "request_context",
]
