"""API request and response schemas."""

from .errors import APIError, ErrorCode
from .exhibits import (
    ContactEmailsRequest,
    ContactEmailsResponse,
    ExhibitDetailResponse,
    ExhibitListResponse,
    PageSummary,
)
from .health import ComponentHealth, HealthDetailResponse, HealthResponse, HealthStatus
from .searches import (
    AutocompleteDoc,
    AutocompleteResponse,
    BulkUpdateRequest,
    BulkUpdateResponse,
    SearchListResponse,
)

__all__ = [
    "APIError",
    "AutocompleteDoc",
    "AutocompleteResponse",
    "BulkUpdateRequest",
    "BulkUpdateResponse",
    "ComponentHealth",
    "ContactEmailsRequest",
    "ContactEmailsResponse",
    "ErrorCode",
    "ExhibitDetailResponse",
    "ExhibitListResponse",
    "HealthDetailResponse",
    "HealthResponse",
    "HealthStatus",
    "PageSummary",
    "SearchListResponse",
]
