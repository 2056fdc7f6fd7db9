"""
SConf Backend - Response Formatter
==================================

What:  Converts ORM rows into the response schemas, applying the nested
       relation allow-lists and normalizing the opaque metadata document.
Why:   Response shapes are decided here, once; services never hand raw ORM
       objects (or unlisted related fields) to the HTTP layer.
Who:   Called by the entity services after every read or write.

Normalization:
    - metadata: a stored JSON object is returned as-is; a string holding a
      JSON object is decoded; anything else is reported as null.
    - datetimes: naive values (SQLite drops the zone) are taken as UTC.
"""

import json
from typing import Any, Dict, Mapping, Optional

from sconf.models import Conference, Participation, Scientist
from sconf.schemas.common import as_utc
from sconf.schemas.conference import ConferenceDetail, ConferenceRead
from sconf.schemas.participation import (
    ParticipationRead,
    ParticipationSearchItem,
    ParticipationSummary,
    ParticipationWithDetails,
)
from sconf.schemas.scientist import ScientistRead
from sconf.schemas.summaries import ConferenceSummary, ScientistSummary


def normalize_metadata(value: Any) -> Optional[Dict[str, Any]]:
    """Returns the metadata document as a dict, or None when it is not an object."""
    if isinstance(value, dict):
        return value
    if isinstance(value, (str, bytes)):
        try:
            decoded = json.loads(value)
        except ValueError:
            return None
        return decoded if isinstance(decoded, dict) else None
    return None


# ── Scientists ────────────────────────────────────────────────────────────
def format_scientist(scientist: Scientist) -> ScientistRead:
    return ScientistRead(
        id=scientist.id,
        full_name=scientist.full_name,
        country=scientist.country,
        degree=scientist.degree,
        specialization=scientist.specialization,
        organization=scientist.organization,
        email=scientist.email,
        orcid=scientist.orcid,
        h_index=scientist.h_index,
    )


def scientist_summary(scientist: Scientist) -> ScientistSummary:
    return ScientistSummary(
        id=scientist.id,
        full_name=scientist.full_name,
        country=scientist.country,
        organization=scientist.organization,
    )


# ── Conferences ───────────────────────────────────────────────────────────
def format_conference(conference: Conference) -> ConferenceRead:
    return ConferenceRead(
        id=conference.id,
        topic=conference.topic,
        name=conference.name,
        date=as_utc(conference.date),
        country=conference.country,
        location=conference.location,
        capacity=conference.capacity,
    )


def conference_summary(conference: Conference) -> ConferenceSummary:
    return ConferenceSummary(
        id=conference.id,
        name=conference.name,
        topic=conference.topic,
        date=as_utc(conference.date),
        country=conference.country,
        location=conference.location,
    )


def format_conference_detail(conference: Conference) -> ConferenceDetail:
    """
    Conference with its participations.

    Expects `participations` and each participation's `scientist` to be
    eager-loaded; lazy loading is not available under AsyncSession.
    """
    return ConferenceDetail(
        **format_conference(conference).model_dump(),
        participations=[participation_summary(p) for p in conference.participations],
    )


# ── Participations ────────────────────────────────────────────────────────
def _participation_fields(participation: Participation) -> Dict[str, Any]:
    return {
        "id": participation.id,
        "talk_title": participation.talk_title,
        "participation_type": participation.participation_type,
        "duration_minutes": participation.duration_minutes,
        "scientist_id": participation.scientist_id,
        "conference_id": participation.conference_id,
        "status": participation.status,
        "metadata": normalize_metadata(participation.metadata_),
    }


def format_participation(participation: Participation) -> ParticipationRead:
    return ParticipationRead(**_participation_fields(participation))


def participation_summary(participation: Participation) -> ParticipationSummary:
    return ParticipationSummary(
        id=participation.id,
        talk_title=participation.talk_title,
        participation_type=participation.participation_type,
        duration_minutes=participation.duration_minutes,
        status=participation.status,
        scientist=scientist_summary(participation.scientist),
    )


def format_participation_with_details(participation: Participation) -> ParticipationWithDetails:
    return ParticipationWithDetails(
        **_participation_fields(participation),
        scientist=scientist_summary(participation.scientist),
        conference=conference_summary(participation.conference),
    )


def format_search_row(row: Mapping[str, Any]) -> ParticipationSearchItem:
    """
    One metadata search result.

    `row` carries the Participation entity under "Participation" plus the
    joined "scientist_name" and "conference_name" labels.
    """
    return ParticipationSearchItem(
        **_participation_fields(row["Participation"]),
        scientist_name=row["scientist_name"],
        conference_name=row["conference_name"],
    )
