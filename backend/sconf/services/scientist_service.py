"""
SConf Backend - Scientist Service
=================================

What:  Business logic for /scientists: shaped listing, lookup and CRUD.
How:   Delegates persistence to an EntityStore and shapes results through
       the response formatter.
Who:   Called by routes/scientists.py.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from sconf.models import Scientist
from sconf.schemas.common import MessageResponse
from sconf.schemas.scientist import (
    ScientistCreate,
    ScientistListResponse,
    ScientistRead,
    ScientistUpdate,
)
from sconf.services.entity_store import EntityStore
from sconf.services.formatters import format_scientist
from sconf.services.query_shaper import QueryParams, QuerySpec, TextFilter, shape_query

logger = logging.getLogger(__name__)


SCIENTIST_QUERY = QuerySpec(
    model=Scientist,
    sort_fields={
        "id": Scientist.id,
        "fullName": Scientist.full_name,
        "country": Scientist.country,
        "degree": Scientist.degree,
        "specialization": Scientist.specialization,
        "organization": Scientist.organization,
        "hIndex": Scientist.h_index,
    },
    default_sort="id",
    default_order="asc",
    filters=(
        # Free-text search across the descriptive columns
        TextFilter("search", (Scientist.full_name, Scientist.specialization, Scientist.organization)),
        TextFilter("country", (Scientist.country,)),
    ),
)


class ScientistService:
    """CRUD for scientists. Deleting a scientist with participations is refused."""

    def __init__(self) -> None:
        self.store = EntityStore(Scientist, "Scientist")

    async def list_scientists(self, db: AsyncSession, params: QueryParams) -> ScientistListResponse:
        shaped = shape_query(SCIENTIST_QUERY, params)
        rows, total = await self.store.find_page(db, shaped)
        return ScientistListResponse(
            data=[format_scientist(s) for s in rows],
            pagination=shaped.pagination(total),
        )

    async def get_scientist(self, db: AsyncSession, scientist_id: int) -> ScientistRead:
        return format_scientist(await self.store.find_by_id(db, scientist_id))

    async def create_scientist(self, db: AsyncSession, payload: ScientistCreate) -> ScientistRead:
        scientist = await self.store.create(db, payload.model_dump())
        return format_scientist(scientist)

    async def update_scientist(
        self, db: AsyncSession, scientist_id: int, payload: ScientistUpdate
    ) -> ScientistRead:
        scientist = await self.store.update(db, scientist_id, payload.changes())
        return format_scientist(scientist)

    async def delete_scientist(self, db: AsyncSession, scientist_id: int) -> MessageResponse:
        await self.store.delete(db, scientist_id)
        return MessageResponse(message="Scientist deleted successfully")


# ── Singleton Instance ────────────────────────────────────────────────────
scientist_service = ScientistService()
