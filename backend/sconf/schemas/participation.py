"""
SConf Backend - Participation Schemas
=====================================

Request bodies and response shapes for /participations, including the
joined listing (with-details), the metadata search results and the bulk
status transition.
"""

from datetime import datetime
from typing import Any, ClassVar, Dict, FrozenSet, List, Optional

from pydantic import Field, field_validator

from sconf.schemas.common import (
    INT4_MAX,
    CamelModel,
    NonEmptyStr,
    PageInfo,
    Pagination,
    PartialUpdate,
    as_utc,
)
from sconf.schemas.summaries import ConferenceSummary, ScientistSummary


class ParticipationCreate(CamelModel):
    """
    POST /participations body.

    status defaults to 'confirmed' when omitted. metadata is an arbitrary
    JSON object; its inner shape is never validated.
    """
    talk_title: NonEmptyStr
    participation_type: NonEmptyStr = Field(description="e.g. Keynote, Workshop, Poster, Panel")
    duration_minutes: int = Field(ge=1, le=INT4_MAX, description="Talk duration in minutes")
    scientist_id: int = Field(gt=0, le=INT4_MAX)
    conference_id: int = Field(gt=0, le=INT4_MAX)
    status: Optional[NonEmptyStr] = None
    metadata: Optional[Dict[str, Any]] = None


class ParticipationUpdate(PartialUpdate):
    nullable_fields: ClassVar[FrozenSet[str]] = frozenset({"metadata"})

    talk_title: Optional[NonEmptyStr] = None
    participation_type: Optional[NonEmptyStr] = None
    duration_minutes: Optional[int] = Field(default=None, ge=1, le=INT4_MAX)
    scientist_id: Optional[int] = Field(default=None, gt=0, le=INT4_MAX)
    conference_id: Optional[int] = Field(default=None, gt=0, le=INT4_MAX)
    status: Optional[NonEmptyStr] = None
    metadata: Optional[Dict[str, Any]] = None


class ParticipationRead(CamelModel):
    id: int
    talk_title: str
    participation_type: str
    duration_minutes: int
    scientist_id: int
    conference_id: int
    status: str
    metadata: Optional[Dict[str, Any]] = None


class ParticipationListResponse(CamelModel):
    data: List[ParticipationRead]
    pagination: Pagination


class ParticipationSummary(CamelModel):
    """Participation as nested inside a conference detail response."""
    id: int
    talk_title: str
    participation_type: str
    duration_minutes: int
    status: str
    scientist: ScientistSummary


class ParticipationWithDetails(ParticipationRead):
    scientist: ScientistSummary
    conference: ConferenceSummary


class ParticipationDetailsResponse(CamelModel):
    data: List[ParticipationWithDetails]
    pagination: Pagination


class ParticipationSearchItem(ParticipationRead):
    scientist_name: str
    conference_name: str


class ParticipationSearchResponse(CamelModel):
    """Search results carry page/limit only; no total is computed for this path."""
    data: List[ParticipationSearchItem]
    pagination: PageInfo


class BulkStatusUpdate(CamelModel):
    """
    PATCH /participations/bulk-update-status body.

    Moves every participation of `conferenceId` whose status equals
    `oldStatus` to `newStatus`. With `beforeDate`, only applies when the
    conference date is strictly earlier than the cutoff.
    """
    conference_id: int = Field(gt=0, le=INT4_MAX)
    old_status: NonEmptyStr
    new_status: NonEmptyStr
    before_date: Optional[datetime] = None

    @field_validator("before_date")
    @classmethod
    def normalize_before_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v) if v is not None else None


class BulkStatusUpdateResponse(CamelModel):
    updated: int = Field(ge=0, description="Number of participations changed")
