"""Saved search API endpoints.

- GET/POST /v1/exhibits/{slug}/searches - List in display order, or create
- GET/PATCH/DELETE /v1/exhibits/{slug}/searches/{search_id} - One search
- POST /v1/exhibits/{slug}/searches/update-all - Bulk partial update
- GET /v1/exhibits/{slug}/searches/{search_id}/autocomplete - Scoped typeahead
"""

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Body, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from vitrine.api.dependencies import get_app_settings, get_db, get_exhibit, get_index_client
from vitrine.api.schemas.errors import APIError
from vitrine.api.schemas.searches import (
    AutocompleteDoc,
    AutocompleteResponse,
    BulkUpdateRequest,
    BulkUpdateResponse,
    SearchListResponse,
)
from vitrine.config.settings import Settings
from vitrine.core.autocomplete import AutocompleteProxy
from vitrine.core.logging import LogContext
from vitrine.core.reconciliation import ReconciliationEngine
from vitrine.core.searches import SavedSearchService
from vitrine.db.models.exhibit import Exhibit
from vitrine.db.schemas.search import SavedSearchCreate, SavedSearchResponse
from vitrine.index.client import DocumentIndexClient

logger = structlog.get_logger()

router = APIRouter(prefix="/exhibits/{slug}/searches", tags=["searches"])


def get_search_service(
    exhibit: Annotated[Exhibit, Depends(get_exhibit)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SavedSearchService:
    return SavedSearchService(db, exhibit.exhibit_id)


@router.get(
    "",
    response_model=SearchListResponse,
    summary="List saved searches",
    description="All saved searches of the exhibit, by weight then creation order.",
    responses={404: {"model": APIError, "description": "Exhibit not found"}},
)
async def list_searches(
    service: Annotated[SavedSearchService, Depends(get_search_service)],
) -> SearchListResponse:
    searches = await service.list_ordered()
    return SearchListResponse(searches=[SavedSearchResponse.model_validate(s) for s in searches])


@router.post(
    "",
    response_model=SavedSearchResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a saved search",
    responses={
        404: {"model": APIError, "description": "Exhibit not found"},
        422: {"model": APIError, "description": "Validation error"},
    },
)
async def create_search(
    request: SavedSearchCreate,
    service: Annotated[SavedSearchService, Depends(get_search_service)],
) -> SavedSearchResponse:
    search = await service.create(request)
    return SavedSearchResponse.model_validate(search)


@router.post(
    "/update-all",
    response_model=BulkUpdateResponse,
    summary="Bulk update saved searches",
    description="""
    Apply partial updates to several saved searches in one transaction.

    Only the searches named in the request change; others are untouched.
    Unknown ids, invalid fields or stale lock versions reject the whole
    batch and nothing is applied.
    """,
    responses={
        404: {"model": APIError, "description": "Exhibit or saved search not found"},
        409: {"model": APIError, "description": "Concurrent modification"},
        422: {"model": APIError, "description": "Validation error"},
    },
)
async def update_all_searches(
    request: BulkUpdateRequest,
    exhibit: Annotated[Exhibit, Depends(get_exhibit)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BulkUpdateResponse:
    engine = ReconciliationEngine(db, exhibit.exhibit_id)
    with LogContext(operation="update_all", exhibit=exhibit.slug):
        updated = await engine.reconcile(request.to_updates())
    return BulkUpdateResponse(
        updated=updated,
        count=len(updated),
        message="Searches were successfully updated.",
    )


@router.get(
    "/{search_id}",
    response_model=SavedSearchResponse,
    summary="Get a saved search",
    responses={404: {"model": APIError, "description": "Not found"}},
)
async def get_search(
    search_id: int,
    service: Annotated[SavedSearchService, Depends(get_search_service)],
) -> SavedSearchResponse:
    search = await service.get_or_raise(search_id)
    return SavedSearchResponse.model_validate(search)


@router.patch(
    "/{search_id}",
    response_model=SavedSearchResponse,
    summary="Edit a saved search",
    description="Partial update; include lock_version to guard against concurrent edits.",
    responses={
        404: {"model": APIError, "description": "Not found"},
        409: {"model": APIError, "description": "Concurrent modification"},
        422: {"model": APIError, "description": "Validation error"},
    },
)
async def update_search(
    search_id: int,
    request: Annotated[dict[str, Any], Body()],
    service: Annotated[SavedSearchService, Depends(get_search_service)],
) -> SavedSearchResponse:
    search = await service.update(search_id, request)
    return SavedSearchResponse.model_validate(search)


@router.delete(
    "/{search_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a saved search",
    responses={404: {"model": APIError, "description": "Not found"}},
)
async def delete_search(
    search_id: int,
    service: Annotated[SavedSearchService, Depends(get_search_service)],
) -> Response:
    await service.delete(search_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{search_id}/autocomplete",
    response_model=AutocompleteResponse,
    summary="Typeahead within a saved search",
    description="""
    Documents matching the saved search's stored filters, ranked by the
    optional term. Index failures answer 502 (504 on timeout), never an
    empty list.
    """,
    responses={
        404: {"model": APIError, "description": "Not found"},
        502: {"model": APIError, "description": "Document index unavailable"},
        504: {"model": APIError, "description": "Document index timed out"},
    },
)
async def autocomplete(
    search_id: int,
    exhibit: Annotated[Exhibit, Depends(get_exhibit)],
    db: Annotated[AsyncSession, Depends(get_db)],
    index_client: Annotated[DocumentIndexClient, Depends(get_index_client)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    q: Annotated[str | None, Query(description="Typed term")] = None,
) -> AutocompleteResponse:
    proxy = AutocompleteProxy(db, index_client, settings)
    result = await proxy.autocomplete(exhibit, search_id, q)
    return AutocompleteResponse(
        docs=[AutocompleteDoc(**doc.to_dict()) for doc in result.docs],
        count=result.count,
    )
