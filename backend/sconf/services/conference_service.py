"""
SConf Backend - Conference Service
==================================

What:  Business logic for /conferences: shaped listing, detail with
       participations, CRUD and per-country statistics.
Who:   Called by routes/conferences.py.

Statistics (GET /conferences/stats):
    Three grouped queries folded in Python, independent of the number of
    countries:
        1. country → conference count, average capacity
        2. (country, topic) → conference count
        3. country → participation count (Participation JOIN Conference)
"""

import logging
import math
from typing import Dict, List

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from sconf.exceptions import DatabaseError
from sconf.models import Conference, Participation
from sconf.schemas.common import MessageResponse
from sconf.schemas.conference import (
    ConferenceCreate,
    ConferenceDetail,
    ConferenceListResponse,
    ConferenceRead,
    ConferenceStatsResponse,
    ConferenceUpdate,
    CountryStats,
)
from sconf.services.entity_store import EntityStore
from sconf.services.formatters import format_conference, format_conference_detail
from sconf.services.query_shaper import QueryParams, QuerySpec, TextFilter, shape_query

logger = logging.getLogger(__name__)


CONFERENCE_QUERY = QuerySpec(
    model=Conference,
    sort_fields={
        "id": Conference.id,
        "name": Conference.name,
        "topic": Conference.topic,
        "date": Conference.date,
        "country": Conference.country,
        "location": Conference.location,
        "capacity": Conference.capacity,
    },
    # Upcoming and recent conferences first
    default_sort="date",
    default_order="desc",
    filters=(
        TextFilter("country", (Conference.country,)),
        TextFilter("topic", (Conference.topic,)),
    ),
)

# Conference detail eager-loads participations and their scientists
DETAIL_OPTIONS = (
    selectinload(Conference.participations).selectinload(Participation.scientist),
)


def round_half_up(value) -> int:
    """Nearest integer with halves rounded up; None (no rows) counts as 0."""
    if value is None:
        return 0
    return int(math.floor(float(value) + 0.5))


class ConferenceService:
    """CRUD and statistics for conferences."""

    def __init__(self) -> None:
        self.store = EntityStore(Conference, "Conference")

    async def list_conferences(self, db: AsyncSession, params: QueryParams) -> ConferenceListResponse:
        shaped = shape_query(CONFERENCE_QUERY, params)
        rows, total = await self.store.find_page(db, shaped)
        return ConferenceListResponse(
            data=[format_conference(c) for c in rows],
            pagination=shaped.pagination(total),
        )

    async def get_conference(self, db: AsyncSession, conference_id: int) -> ConferenceDetail:
        conference = await self.store.find_by_id(db, conference_id, options=DETAIL_OPTIONS)
        return format_conference_detail(conference)

    async def create_conference(self, db: AsyncSession, payload: ConferenceCreate) -> ConferenceRead:
        conference = await self.store.create(db, payload.model_dump())
        return format_conference(conference)

    async def update_conference(
        self, db: AsyncSession, conference_id: int, payload: ConferenceUpdate
    ) -> ConferenceRead:
        conference = await self.store.update(db, conference_id, payload.changes())
        return format_conference(conference)

    async def delete_conference(self, db: AsyncSession, conference_id: int) -> MessageResponse:
        await self.store.delete(db, conference_id)
        return MessageResponse(message="Conference deleted successfully")

    async def get_country_stats(self, db: AsyncSession) -> ConferenceStatsResponse:
        """
        Per-country statistics, sorted by country.

        Each entry: conference count, participation count across the
        country's conferences, average capacity (rounded) and the number of
        conferences per topic.
        """
        per_country = (
            select(
                Conference.country,
                func.count(Conference.id),
                func.avg(Conference.capacity),
            )
            .group_by(Conference.country)
            .order_by(Conference.country)
        )
        per_topic = (
            select(Conference.country, Conference.topic, func.count(Conference.id))
            .group_by(Conference.country, Conference.topic)
            .order_by(Conference.country, Conference.topic)
        )
        participations = (
            select(Conference.country, func.count(Participation.id))
            .join(Participation, Participation.conference_id == Conference.id)
            .group_by(Conference.country)
        )

        try:
            country_rows = (await db.execute(per_country)).all()
            topic_rows = (await db.execute(per_topic)).all()
            participation_rows = (await db.execute(participations)).all()
        except SQLAlchemyError as e:
            logger.error("Database error computing conference stats: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

        topics: Dict[str, Dict[str, int]] = {}
        for country, topic, count in topic_rows:
            topics.setdefault(country, {})[topic] = count
        participation_counts = {country: count for country, count in participation_rows}

        stats: List[CountryStats] = [
            CountryStats(
                country=country,
                conference_count=conference_count,
                participation_count=participation_counts.get(country, 0),
                average_capacity=round_half_up(average_capacity),
                topics=topics.get(country, {}),
            )
            for country, conference_count, average_capacity in country_rows
        ]
        return ConferenceStatsResponse(data=stats)


# ── Singleton Instance ────────────────────────────────────────────────────
conference_service = ConferenceService()
