"""
SConf Backend - Participation Service
=====================================

What:  Business logic for /participations: shaped listing (plain and with
       nested scientist/conference summaries), CRUD, regex search over the
       metadata document and the bulk status transition.
Who:   Called by routes/participations.py.

Metadata search:
    SELECT p.*, s."fullName" AS scientist_name, c.name AS conference_name
    FROM "Participation" p JOIN "Scientist" s ... JOIN "Conference" c ...
    WHERE CAST(p.metadata AS TEXT) matches the pattern (case-insensitive)
    ORDER BY p.id LIMIT :limit OFFSET :offset

    The pattern is compiled with Python's `re` first so a malformed
    expression is a 400, not a database error. Patterns only PostgreSQL
    rejects (SQLSTATE 2201B, e.g. Python named groups) are a 400 as well.
    Case-insensitivity is the embedded `(?i)` flag, understood by PostgreSQL
    regular expressions and by the Python function SQLAlchemy registers for
    SQLite REGEXP.
"""

import logging
import re
from typing import Any, Dict, Optional

from sqlalchemy import Text, cast, select, update
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from sconf.exceptions import DatabaseError, ValidationError
from sconf.models import Conference, Participation, Scientist
from sconf.models.participation import DEFAULT_STATUS
from sconf.schemas.common import MessageResponse, PageInfo
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
from sconf.services.entity_store import EntityStore
from sconf.services.formatters import (
    format_participation,
    format_participation_with_details,
    format_search_row,
)
from sconf.services.query_shaper import (
    ExactFilter,
    QueryParams,
    QuerySpec,
    TextFilter,
    resolve_page,
    shape_query,
)

logger = logging.getLogger(__name__)

# PostgreSQL invalid_regular_expression
INVALID_REGEX_SQLSTATE = "2201B"


PARTICIPATION_QUERY = QuerySpec(
    model=Participation,
    sort_fields={
        "id": Participation.id,
        "talkTitle": Participation.talk_title,
        "participationType": Participation.participation_type,
        "durationMinutes": Participation.duration_minutes,
        "status": Participation.status,
        "scientistId": Participation.scientist_id,
        "conferenceId": Participation.conference_id,
    },
    default_sort="id",
    default_order="asc",
    filters=(
        TextFilter("participationType", (Participation.participation_type,)),
        TextFilter("status", (Participation.status,)),
        ExactFilter("scientistId", Participation.scientist_id),
        ExactFilter("conferenceId", Participation.conference_id),
    ),
)

DETAIL_OPTIONS = (
    selectinload(Participation.scientist),
    selectinload(Participation.conference),
)


def _model_fields(changes: Dict[str, Any]) -> Dict[str, Any]:
    """Maps schema field names to model attributes (metadata → metadata_)."""
    fields = dict(changes)
    if "metadata" in fields:
        fields["metadata_"] = fields.pop("metadata")
    return fields


def compile_search_pattern(q: Optional[str]) -> str:
    """
    Validates a metadata search pattern and returns it with the
    case-insensitive flag prepended.

    Raises:
        ValidationError: empty pattern or invalid regular expression
    """
    if q is None or not q.strip():
        raise ValidationError(message="Search query 'q' must not be empty", field="q")

    pattern = f"(?i){q}"
    try:
        re.compile(pattern)
    except re.error as e:
        raise ValidationError(
            message=f"Invalid search pattern: {e}",
            field="q",
            context={"value": q},
        )
    return pattern


def _is_invalid_regex(error: DBAPIError) -> bool:
    # asyncpg and psycopg expose `sqlstate`, psycopg2 `pgcode`
    orig = error.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return code == INVALID_REGEX_SQLSTATE


class ParticipationService:
    """
    CRUD and read paths for participations.

    Creating or updating a participation that points at a missing scientist
    or conference fails with ConstraintViolationError (400).
    """

    def __init__(self) -> None:
        self.store = EntityStore(Participation, "Participation")

    async def list_participations(
        self, db: AsyncSession, params: QueryParams
    ) -> ParticipationListResponse:
        shaped = shape_query(PARTICIPATION_QUERY, params)
        rows, total = await self.store.find_page(db, shaped)
        return ParticipationListResponse(
            data=[format_participation(p) for p in rows],
            pagination=shaped.pagination(total),
        )

    async def list_with_details(
        self, db: AsyncSession, params: QueryParams
    ) -> ParticipationDetailsResponse:
        """Same contract as list_participations, each row with scientist and conference summaries."""
        shaped = shape_query(PARTICIPATION_QUERY, params)
        rows, total = await self.store.find_page(db, shaped, options=DETAIL_OPTIONS)
        return ParticipationDetailsResponse(
            data=[format_participation_with_details(p) for p in rows],
            pagination=shaped.pagination(total),
        )

    async def get_participation(self, db: AsyncSession, participation_id: int) -> ParticipationRead:
        return format_participation(await self.store.find_by_id(db, participation_id))

    async def create_participation(
        self, db: AsyncSession, payload: ParticipationCreate
    ) -> ParticipationRead:
        fields = _model_fields(payload.model_dump())
        if fields.get("status") is None:
            fields["status"] = DEFAULT_STATUS
        participation = await self.store.create(db, fields)
        return format_participation(participation)

    async def update_participation(
        self, db: AsyncSession, participation_id: int, payload: ParticipationUpdate
    ) -> ParticipationRead:
        participation = await self.store.update(
            db, participation_id, _model_fields(payload.changes())
        )
        return format_participation(participation)

    async def delete_participation(self, db: AsyncSession, participation_id: int) -> MessageResponse:
        await self.store.delete(db, participation_id)
        return MessageResponse(message="Participation deleted successfully")

    async def search_metadata(
        self, db: AsyncSession, q: Optional[str], params: QueryParams
    ) -> ParticipationSearchResponse:
        """
        Case-insensitive regex search over the metadata document.

        Results are ordered by participation id and carry the scientist's
        full name and the conference name. Pagination reports page and
        limit only.
        """
        pattern = compile_search_pattern(q)
        page, limit = resolve_page(params)

        statement = (
            select(
                Participation,
                Scientist.full_name.label("scientist_name"),
                Conference.name.label("conference_name"),
            )
            .join(Scientist, Participation.scientist_id == Scientist.id)
            .join(Conference, Participation.conference_id == Conference.id)
            .where(cast(Participation.metadata_, Text).regexp_match(pattern))
            .order_by(Participation.id)
            .offset((page - 1) * limit)
            .limit(limit)
        )

        try:
            result = await db.execute(statement)
        except DBAPIError as e:
            if _is_invalid_regex(e):
                logger.info("Search pattern %r rejected by the database", q)
                raise ValidationError(
                    message="Invalid search pattern",
                    field="q",
                    context={"value": q},
                )
            logger.error("Database error searching metadata: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})
        except SQLAlchemyError as e:
            logger.error("Database error searching metadata: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

        rows = result.mappings().all()
        logger.debug("Metadata search %r matched %d rows on page %d", q, len(rows), page)
        return ParticipationSearchResponse(
            data=[format_search_row(row) for row in rows],
            pagination=PageInfo(page=page, limit=limit),
        )

    async def bulk_update_status(
        self, db: AsyncSession, payload: BulkStatusUpdate
    ) -> BulkStatusUpdateResponse:
        """
        Moves every participation of one conference from old_status to new_status.

        With before_date, nothing changes unless the conference date is
        strictly earlier than the cutoff. An unknown conference updates 0 rows.
        """
        statement = (
            update(Participation)
            .where(
                Participation.conference_id == payload.conference_id,
                Participation.status == payload.old_status,
            )
            .values(status=payload.new_status)
            .execution_options(synchronize_session=False)
        )
        if payload.before_date is not None:
            statement = statement.where(
                Participation.conference_id.in_(
                    select(Conference.id).where(Conference.date < payload.before_date)
                )
            )

        try:
            result = await db.execute(statement)
        except SQLAlchemyError as e:
            logger.error("Database error in bulk status update: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

        logger.info(
            "Bulk status update: conference=%s %r → %r, %d rows",
            payload.conference_id, payload.old_status, payload.new_status, result.rowcount,
        )
        return BulkStatusUpdateResponse(updated=result.rowcount)


# ── Singleton Instance ────────────────────────────────────────────────────
participation_service = ParticipationService()
