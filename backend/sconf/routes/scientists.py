"""
SConf Backend - Scientist Route Handlers
========================================

What:  CRUD endpoints for /scientists.
How:   Extracts query/path/body parameters, delegates to ScientistService,
       returns JSON. List parameters are passed to the query shaper as raw
       strings so that malformed values surface as uniform 400 errors.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from sconf.database import get_db_session
from sconf.schemas.common import INT4_MAX, ErrorResponse, MessageResponse
from sconf.schemas.scientist import (
    ScientistCreate,
    ScientistListResponse,
    ScientistRead,
    ScientistUpdate,
)
from sconf.services.scientist_service import scientist_service

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/scientists", tags=["Scientists"])

NOT_FOUND = {404: {"description": "Scientist not found", "model": ErrorResponse}}
BAD_REQUEST = {400: {"description": "Invalid input", "model": ErrorResponse}}


@router.get(
    "",
    response_model=ScientistListResponse,
    responses=BAD_REQUEST,
    summary="List scientists",
    description=(
        "Paginated list of scientists. `search` matches full name, specialization "
        "or organization (case-insensitive substring); `country` filters by country."
    ),
)
async def list_scientists(
    page: Optional[str] = Query(default=None, description="Page number (default 1)"),
    limit: Optional[str] = Query(default=None, description="Items per page (default 10, max 100)"),
    sort_by: Optional[str] = Query(
        default=None, alias="sortBy",
        description="id, fullName, country, degree, specialization, organization or hIndex",
    ),
    sort_order: Optional[str] = Query(default=None, alias="sortOrder", description="asc or desc"),
    search: Optional[str] = Query(default=None, description="Search name, specialization, organization"),
    country: Optional[str] = Query(default=None, description="Filter by country"),
    db: AsyncSession = Depends(get_db_session),
) -> ScientistListResponse:
    return await scientist_service.list_scientists(
        db,
        {
            "page": page,
            "limit": limit,
            "sortBy": sort_by,
            "sortOrder": sort_order,
            "search": search,
            "country": country,
        },
    )


@router.get(
    "/{scientist_id}",
    response_model=ScientistRead,
    responses=NOT_FOUND,
    summary="Get a scientist by ID",
)
async def get_scientist(
    scientist_id: Annotated[int, Path(le=INT4_MAX)],
    db: AsyncSession = Depends(get_db_session),
) -> ScientistRead:
    return await scientist_service.get_scientist(db, scientist_id)


@router.post(
    "",
    response_model=ScientistRead,
    status_code=status.HTTP_201_CREATED,
    responses=BAD_REQUEST,
    summary="Create a scientist",
)
async def create_scientist(
    payload: ScientistCreate,
    db: AsyncSession = Depends(get_db_session),
) -> ScientistRead:
    return await scientist_service.create_scientist(db, payload)


@router.put(
    "/{scientist_id}",
    response_model=ScientistRead,
    responses={**NOT_FOUND, **BAD_REQUEST},
    summary="Update a scientist",
    description="Partial update: only the fields present in the body are changed.",
)
async def update_scientist(
    scientist_id: Annotated[int, Path(le=INT4_MAX)],
    payload: ScientistUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> ScientistRead:
    return await scientist_service.update_scientist(db, scientist_id, payload)


@router.delete(
    "/{scientist_id}",
    response_model=MessageResponse,
    responses={
        **NOT_FOUND,
        400: {"description": "Scientist still has participations", "model": ErrorResponse},
    },
    summary="Delete a scientist",
)
async def delete_scientist(
    scientist_id: Annotated[int, Path(le=INT4_MAX)],
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await scientist_service.delete_scientist(db, scientist_id)
