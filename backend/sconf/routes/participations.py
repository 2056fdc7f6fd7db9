"""
SConf Backend - Participation Route Handlers
============================================

What:  CRUD endpoints for /participations plus the metadata search, the
       joined listing and the bulk status transition.
How:   Thin handlers over ParticipationService. Static paths (/search,
       /with-details, /bulk-update-status) are declared before
       /{participation_id}.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from sconf.database import get_db_session
from sconf.schemas.common import INT4_MAX, ErrorResponse, MessageResponse
from sconf.schemas.participation import (
    BulkStatusUpdate,
    BulkStatusUpdateResponse,
    ParticipationCreate,
    ParticipationDetailsResponse,
    ParticipationListResponse,
    ParticipationRead,
    ParticipationSearchResponse,
    ParticipationUpdate,
)
from sconf.services.participation_service import participation_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/participations", tags=["Participations"])

NOT_FOUND = {404: {"description": "Participation not found", "model": ErrorResponse}}
BAD_REQUEST = {400: {"description": "Invalid input", "model": ErrorResponse}}


class ListParams:
    """Shared list query parameters (documented in OpenAPI, validated by the query shaper)."""

    def __init__(
        self,
        page: Optional[str] = Query(default=None, description="Page number (default 1)"),
        limit: Optional[str] = Query(default=None, description="Items per page (default 10, max 100)"),
        sort_by: Optional[str] = Query(
            default=None, alias="sortBy",
            description=(
                "id, talkTitle, participationType, durationMinutes, status, "
                "scientistId or conferenceId"
            ),
        ),
        sort_order: Optional[str] = Query(default=None, alias="sortOrder", description="asc or desc"),
        participation_type: Optional[str] = Query(
            default=None, alias="participationType", description="Filter by participation type",
        ),
        status_filter: Optional[str] = Query(default=None, alias="status", description="Filter by status"),
        scientist_id: Optional[str] = Query(default=None, alias="scientistId", description="Exact scientist ID"),
        conference_id: Optional[str] = Query(default=None, alias="conferenceId", description="Exact conference ID"),
    ):
        self.values = {
            "page": page,
            "limit": limit,
            "sortBy": sort_by,
            "sortOrder": sort_order,
            "participationType": participation_type,
            "status": status_filter,
            "scientistId": scientist_id,
            "conferenceId": conference_id,
        }


@router.get(
    "",
    response_model=ParticipationListResponse,
    responses=BAD_REQUEST,
    summary="List participations",
)
async def list_participations(
    params: ListParams = Depends(),
    db: AsyncSession = Depends(get_db_session),
) -> ParticipationListResponse:
    return await participation_service.list_participations(db, params.values)


@router.get(
    "/search",
    response_model=ParticipationSearchResponse,
    responses=BAD_REQUEST,
    summary="Search participations by metadata",
    description=(
        "Case-insensitive regular expression match against the metadata document "
        "as text. Results include the scientist's name and the conference name."
    ),
)
async def search_participations(
    q: Optional[str] = Query(default=None, description="Regular expression to match in metadata"),
    page: Optional[str] = Query(default=None, description="Page number (default 1)"),
    limit: Optional[str] = Query(default=None, description="Items per page (default 10, max 100)"),
    db: AsyncSession = Depends(get_db_session),
) -> ParticipationSearchResponse:
    return await participation_service.search_metadata(db, q, {"page": page, "limit": limit})


@router.get(
    "/with-details",
    response_model=ParticipationDetailsResponse,
    responses=BAD_REQUEST,
    summary="List participations with scientist and conference",
    description="Same filters and pagination as the plain list; each row embeds summaries of its relations.",
)
async def list_participations_with_details(
    params: ListParams = Depends(),
    db: AsyncSession = Depends(get_db_session),
) -> ParticipationDetailsResponse:
    return await participation_service.list_with_details(db, params.values)


@router.patch(
    "/bulk-update-status",
    response_model=BulkStatusUpdateResponse,
    responses=BAD_REQUEST,
    summary="Change the status of a conference's participations",
    description=(
        "Moves every participation of `conferenceId` with status `oldStatus` to "
        "`newStatus`. With `beforeDate`, applies only if the conference date is "
        "earlier than it. Returns the number of rows changed."
    ),
)
async def bulk_update_status(
    payload: BulkStatusUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> BulkStatusUpdateResponse:
    return await participation_service.bulk_update_status(db, payload)


@router.get(
    "/{participation_id}",
    response_model=ParticipationRead,
    responses=NOT_FOUND,
    summary="Get a participation by ID",
)
async def get_participation(
    participation_id: Annotated[int, Path(le=INT4_MAX)],
    db: AsyncSession = Depends(get_db_session),
) -> ParticipationRead:
    return await participation_service.get_participation(db, participation_id)


@router.post(
    "",
    response_model=ParticipationRead,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {
            "description": "Invalid input, or scientist/conference does not exist",
            "model": ErrorResponse,
        },
    },
    summary="Create a participation",
)
async def create_participation(
    payload: ParticipationCreate,
    db: AsyncSession = Depends(get_db_session),
) -> ParticipationRead:
    return await participation_service.create_participation(db, payload)


@router.put(
    "/{participation_id}",
    response_model=ParticipationRead,
    responses={**NOT_FOUND, **BAD_REQUEST},
    summary="Update a participation",
)
async def update_participation(
    participation_id: Annotated[int, Path(le=INT4_MAX)],
    payload: ParticipationUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> ParticipationRead:
    return await participation_service.update_participation(db, participation_id, payload)


@router.delete(
    "/{participation_id}",
    response_model=MessageResponse,
    responses=NOT_FOUND,
    summary="Delete a participation",
)
async def delete_participation(
    participation_id: Annotated[int, Path(le=INT4_MAX)],
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await participation_service.delete_participation(db, participation_id)
