"""
SConf Backend - Conference Route Handlers
=========================================

What:  CRUD endpoints for /conferences plus GET /conferences/stats.
How:   Thin handlers over ConferenceService. /stats is declared before
       /{conference_id} so the static path wins.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from sconf.database import get_db_session
from sconf.schemas.common import INT4_MAX, ErrorResponse, MessageResponse
from sconf.schemas.conference import (
    ConferenceCreate,
    ConferenceDetail,
    ConferenceListResponse,
    ConferenceRead,
    ConferenceStatsResponse,
    ConferenceUpdate,
)
from sconf.services.conference_service import conference_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/conferences", tags=["Conferences"])

NOT_FOUND = {404: {"description": "Conference not found", "model": ErrorResponse}}
BAD_REQUEST = {400: {"description": "Invalid input", "model": ErrorResponse}}


@router.get(
    "",
    response_model=ConferenceListResponse,
    responses=BAD_REQUEST,
    summary="List conferences",
    description="Paginated list of conferences, newest date first unless sortBy/sortOrder say otherwise.",
)
async def list_conferences(
    page: Optional[str] = Query(default=None, description="Page number (default 1)"),
    limit: Optional[str] = Query(default=None, description="Items per page (default 10, max 100)"),
    sort_by: Optional[str] = Query(
        default=None, alias="sortBy",
        description="id, name, topic, date, country, location or capacity",
    ),
    sort_order: Optional[str] = Query(default=None, alias="sortOrder", description="asc or desc"),
    country: Optional[str] = Query(default=None, description="Filter by country"),
    topic: Optional[str] = Query(default=None, description="Filter by topic"),
    db: AsyncSession = Depends(get_db_session),
) -> ConferenceListResponse:
    return await conference_service.list_conferences(
        db,
        {
            "page": page,
            "limit": limit,
            "sortBy": sort_by,
            "sortOrder": sort_order,
            "country": country,
            "topic": topic,
        },
    )


@router.get(
    "/stats",
    response_model=ConferenceStatsResponse,
    summary="Conference statistics by country",
    description=(
        "For each country: number of conferences, number of participations, "
        "average capacity and the number of conferences per topic."
    ),
)
async def conference_stats(
    db: AsyncSession = Depends(get_db_session),
) -> ConferenceStatsResponse:
    return await conference_service.get_country_stats(db)


@router.get(
    "/{conference_id}",
    response_model=ConferenceDetail,
    responses=NOT_FOUND,
    summary="Get a conference with its participations",
)
async def get_conference(
    conference_id: Annotated[int, Path(le=INT4_MAX)],
    db: AsyncSession = Depends(get_db_session),
) -> ConferenceDetail:
    return await conference_service.get_conference(db, conference_id)


@router.post(
    "",
    response_model=ConferenceRead,
    status_code=status.HTTP_201_CREATED,
    responses=BAD_REQUEST,
    summary="Create a conference",
)
async def create_conference(
    payload: ConferenceCreate,
    db: AsyncSession = Depends(get_db_session),
) -> ConferenceRead:
    return await conference_service.create_conference(db, payload)


@router.put(
    "/{conference_id}",
    response_model=ConferenceRead,
    responses={**NOT_FOUND, **BAD_REQUEST},
    summary="Update a conference",
)
async def update_conference(
    conference_id: Annotated[int, Path(le=INT4_MAX)],
    payload: ConferenceUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> ConferenceRead:
    return await conference_service.update_conference(db, conference_id, payload)


@router.delete(
    "/{conference_id}",
    response_model=MessageResponse,
    responses={
        **NOT_FOUND,
        400: {"description": "Conference still has participations", "model": ErrorResponse},
    },
    summary="Delete a conference",
)
async def delete_conference(
    conference_id: Annotated[int, Path(le=INT4_MAX)],
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await conference_service.delete_conference(db, conference_id)
