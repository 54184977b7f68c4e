"""Exhibit API endpoints.

- POST /v1/exhibits - Create an exhibit
- GET /v1/exhibits - List exhibits
- GET/PATCH/DELETE /v1/exhibits/{slug} - Read, edit or delete one exhibit
- GET/PUT /v1/exhibits/{slug}/contact-emails - Contact address editor
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Query, Response, status

from vitrine.api.dependencies import get_exhibit, get_exhibit_service
from vitrine.api.schemas.errors import APIError
from vitrine.api.schemas.exhibits import (
    ContactEmailsRequest,
    ContactEmailsResponse,
    ExhibitDetailResponse,
    ExhibitListResponse,
    PageSummary,
)
from vitrine.core.exhibit import ExhibitService
from vitrine.db.models.exhibit import Exhibit
from vitrine.db.schemas.exhibit import ExhibitCreate, ExhibitResponse, ExhibitUpdate

logger = structlog.get_logger()

router = APIRouter(prefix="/exhibits", tags=["exhibits"])


@router.post(
    "",
    response_model=ExhibitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an exhibit",
    description="""
    Create an exhibit. The slug is derived from the title and never changes.

    If no saved searches are supplied, a "Browse All Exhibit Items" search
    is created. A default home page is added after the exhibit is stored.
    """,
    responses={422: {"model": APIError, "description": "Validation error"}},
)
async def create_exhibit(
    request: ExhibitCreate,
    service: Annotated[ExhibitService, Depends(get_exhibit_service)],
) -> ExhibitResponse:
    exhibit = await service.create_exhibit(request)
    return ExhibitResponse.model_validate(exhibit)


@router.get(
    "",
    response_model=ExhibitListResponse,
    summary="List exhibits",
)
async def list_exhibits(
    service: Annotated[ExhibitService, Depends(get_exhibit_service)],
    limit: Annotated[int, Query(ge=1, le=1000)] = 100,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> ExhibitListResponse:
    exhibits = await service.list_exhibits(limit=limit, offset=offset)
    return ExhibitListResponse(exhibits=[ExhibitResponse.model_validate(e) for e in exhibits])


@router.get(
    "/{slug}",
    response_model=ExhibitDetailResponse,
    summary="Get an exhibit",
    responses={404: {"model": APIError, "description": "Exhibit not found"}},
)
async def get_exhibit_detail(
    exhibit: Annotated[Exhibit, Depends(get_exhibit)],
    service: Annotated[ExhibitService, Depends(get_exhibit_service)],
) -> ExhibitDetailResponse:
    about = await service.main_about_page(exhibit.exhibit_id)
    base = ExhibitResponse.model_validate(exhibit)
    return ExhibitDetailResponse(
        **base.model_dump(),
        has_browse_categories=await service.has_browse_categories(exhibit.exhibit_id),
        main_about_page=PageSummary.model_validate(about) if about else None,
    )


@router.patch(
    "/{slug}",
    response_model=ExhibitResponse,
    summary="Edit an exhibit",
    description="Partial update. The slug is not editable.",
    responses={
        404: {"model": APIError, "description": "Exhibit not found"},
        422: {"model": APIError, "description": "Validation error"},
    },
)
async def update_exhibit(
    request: ExhibitUpdate,
    exhibit: Annotated[Exhibit, Depends(get_exhibit)],
    service: Annotated[ExhibitService, Depends(get_exhibit_service)],
) -> ExhibitResponse:
    exhibit = await service.update_exhibit(exhibit, request)
    return ExhibitResponse.model_validate(exhibit)


@router.delete(
    "/{slug}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an exhibit",
    description="Deletes the exhibit with its configuration, saved searches and pages.",
    responses={404: {"model": APIError, "description": "Exhibit not found"}},
)
async def delete_exhibit(
    exhibit: Annotated[Exhibit, Depends(get_exhibit)],
    service: Annotated[ExhibitService, Depends(get_exhibit_service)],
) -> Response:
    await service.delete_exhibit(exhibit)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{slug}/contact-emails",
    response_model=ContactEmailsResponse,
    summary="Get contact email rows",
)
async def get_contact_emails(
    exhibit: Annotated[Exhibit, Depends(get_exhibit)],
    service: Annotated[ExhibitService, Depends(get_exhibit_service)],
) -> ContactEmailsResponse:
    return ContactEmailsResponse(contact_emails=service.contact_email_entries(exhibit))


@router.put(
    "/{slug}/contact-emails",
    response_model=ContactEmailsResponse,
    summary="Replace contact emails",
    description="""
    Replace the whole contact list. Blank rows are dropped. Every invalid
    address is reported, one error each.
    """,
    responses={422: {"model": APIError, "description": "Invalid address"}},
)
async def replace_contact_emails(
    request: ContactEmailsRequest,
    exhibit: Annotated[Exhibit, Depends(get_exhibit)],
    service: Annotated[ExhibitService, Depends(get_exhibit_service)],
) -> ContactEmailsResponse:
    await service.replace_contact_emails(exhibit, request.contact_emails)
    logger.info("contact_emails_replaced", exhibit=exhibit.slug, count=len(exhibit.contact_emails))
    return ContactEmailsResponse(contact_emails=service.contact_email_entries(exhibit))
