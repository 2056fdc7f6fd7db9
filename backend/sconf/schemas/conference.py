"""
SConf Backend - Conference Schemas
==================================

Request bodies for POST/PUT /conferences, list/detail responses and the
per-country statistics returned by GET /conferences/stats.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field, field_validator

from sconf.schemas.common import (
    INT4_MAX,
    CamelModel,
    NonEmptyStr,
    Pagination,
    PartialUpdate,
    as_utc,
)
from sconf.schemas.participation import ParticipationSummary


class ConferenceCreate(CamelModel):
    """POST /conferences body. date is ISO-8601; naive values are taken as UTC."""
    topic: NonEmptyStr
    name: NonEmptyStr
    date: datetime
    country: NonEmptyStr
    location: NonEmptyStr
    capacity: int = Field(default=0, ge=0, le=INT4_MAX, description="Seat capacity")

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        return as_utc(v)


class ConferenceUpdate(PartialUpdate):
    topic: Optional[NonEmptyStr] = None
    name: Optional[NonEmptyStr] = None
    date: Optional[datetime] = None
    country: Optional[NonEmptyStr] = None
    location: Optional[NonEmptyStr] = None
    capacity: Optional[int] = Field(default=None, ge=0, le=INT4_MAX)

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v) if v is not None else None


class ConferenceRead(CamelModel):
    id: int
    topic: str
    name: str
    date: datetime
    country: str
    location: str
    capacity: int


class ConferenceDetail(ConferenceRead):
    """GET /conferences/{id}: the conference plus its participations (trimmed)."""
    participations: List[ParticipationSummary]


class ConferenceListResponse(CamelModel):
    data: List[ConferenceRead]
    pagination: Pagination


class CountryStats(CamelModel):
    """
    Statistics for all conferences held in one country.

    averageCapacity is rounded to the nearest integer (0 when unknown);
    topics maps each topic to its number of conferences in the country.
    """
    country: str
    conference_count: int
    participation_count: int
    average_capacity: int
    topics: Dict[str, int]


class ConferenceStatsResponse(CamelModel):
    data: List[CountryStats]
