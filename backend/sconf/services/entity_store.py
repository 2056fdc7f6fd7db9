"""
SConf Backend - Entity Store
============================

What:  Generic async persistence operations over one ORM model: shaped
       listing, counting, lookup by id, create, partial update, delete.
Why:   The three resources share identical CRUD semantics; only the model and
       its display name differ.
How:   Wraps an AsyncSession passed in per call. Writes are flushed (not
       committed) so the request-scoped session in database.get_db_session
       owns the transaction.
Who:   Composed by the scientist, conference and participation services.

Error tagging:
    row genuinely absent           → NotFoundError
    IntegrityError (FK / restrict) → ConstraintViolationError
    any other SQLAlchemyError      → DatabaseError
"""

import logging
from typing import Any, Dict, Generic, List, Sequence, Tuple, Type, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.interfaces import ORMOption

from sconf.database import Base
from sconf.exceptions import ConstraintViolationError, DatabaseError, NotFoundError
from sconf.services.query_shaper import ShapedQuery

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class EntityStore(Generic[ModelType]):
    """
    CRUD operations for `model`, reported under `resource_name`
    ("Scientist", "Conference", ...) in errors and logs.
    """

    def __init__(self, model: Type[ModelType], resource_name: str):
        self.model = model
        self.resource_name = resource_name

    def _database_error(self, operation: str, exc: SQLAlchemyError) -> DatabaseError:
        logger.error(
            "Database error during %s %s: %s",
            operation, self.resource_name, str(exc), exc_info=True,
        )
        return DatabaseError(
            context={"resource": self.resource_name, "error_type": type(exc).__name__},
        )

    async def _constraint_violation(
        self, db: AsyncSession, operation: str, exc: IntegrityError, **context: Any
    ) -> ConstraintViolationError:
        # The failed flush leaves the transaction unusable until rolled back
        await db.rollback()
        logger.warning(
            "%s %s rejected by constraint: %s",
            operation, self.resource_name, str(exc.orig),
        )
        return ConstraintViolationError(context={"resource": self.resource_name, **context})

    # ── Reads ─────────────────────────────────────────────────────────────

    async def find(
        self,
        db: AsyncSession,
        shaped: ShapedQuery,
        options: Sequence[ORMOption] = (),
    ) -> List[ModelType]:
        """One page of rows matching `shaped`; `options` adds eager loads."""
        statement = shaped.apply(select(self.model).options(*options))
        try:
            result = await db.execute(statement)
        except SQLAlchemyError as e:
            raise self._database_error("list", e)
        return list(result.scalars().all())

    async def count(self, db: AsyncSession, shaped: ShapedQuery) -> int:
        """Number of rows matching the filters of `shaped`, ignoring the page window."""
        try:
            result = await db.execute(shaped.count_statement)
        except SQLAlchemyError as e:
            raise self._database_error("count", e)
        return result.scalar_one()

    async def find_page(
        self,
        db: AsyncSession,
        shaped: ShapedQuery,
        options: Sequence[ORMOption] = (),
    ) -> Tuple[List[ModelType], int]:
        """
        Page rows plus the total match count.

        Both queries run one after the other on the same session; an
        AsyncSession does not support concurrent statements.
        """
        rows = await self.find(db, shaped, options)
        total = await self.count(db, shaped)
        return rows, total

    async def find_by_id(
        self,
        db: AsyncSession,
        entity_id: int,
        options: Sequence[ORMOption] = (),
    ) -> ModelType:
        """
        Raises:
            NotFoundError: no row with `entity_id`
            DatabaseError: query failed
        """
        statement = select(self.model).where(self.model.id == entity_id).options(*options)
        try:
            result = await db.execute(statement)
        except SQLAlchemyError as e:
            raise self._database_error("get", e)

        instance = result.scalar_one_or_none()
        if instance is None:
            raise NotFoundError(resource=self.resource_name, resource_id=entity_id)
        return instance

    # ── Writes ────────────────────────────────────────────────────────────

    async def create(self, db: AsyncSession, fields: Dict[str, Any]) -> ModelType:
        """
        Inserts a row built from `fields` (model attribute names).

        Raises:
            ConstraintViolationError: a referenced row does not exist; nothing is created
            DatabaseError: any other storage failure
        """
        instance = self.model(**fields)
        db.add(instance)
        try:
            await db.flush()
        except IntegrityError as e:
            raise await self._constraint_violation(db, "create", e)
        except SQLAlchemyError as e:
            raise self._database_error("create", e)

        logger.info("%s created: id=%s", self.resource_name, instance.id)
        return instance

    async def update(self, db: AsyncSession, entity_id: int, fields: Dict[str, Any]) -> ModelType:
        """
        Applies `fields` to an existing row; attributes not in `fields` are untouched.

        Raises:
            NotFoundError: no row with `entity_id`
            ConstraintViolationError: a changed reference points to a missing row
            DatabaseError: any other storage failure
        """
        instance = await self.find_by_id(db, entity_id)
        for name, value in fields.items():
            setattr(instance, name, value)

        try:
            await db.flush()
        except IntegrityError as e:
            raise await self._constraint_violation(db, "update", e, resource_id=entity_id)
        except SQLAlchemyError as e:
            raise self._database_error("update", e)

        logger.info("%s updated: id=%s fields=%s", self.resource_name, entity_id, sorted(fields))
        return instance

    async def delete(self, db: AsyncSession, entity_id: int) -> None:
        """
        Deletes a row by id.

        Raises:
            NotFoundError: no row with `entity_id`
            ConstraintViolationError: the row is still referenced (restrict-on-delete)
            DatabaseError: any other storage failure
        """
        statement = delete(self.model).where(self.model.id == entity_id)
        try:
            result = await db.execute(statement)
        except IntegrityError as e:
            raise await self._constraint_violation(db, "delete", e, resource_id=entity_id)
        except SQLAlchemyError as e:
            raise self._database_error("delete", e)

        if result.rowcount == 0:
            raise NotFoundError(resource=self.resource_name, resource_id=entity_id)
        logger.info("%s deleted: id=%s", self.resource_name, entity_id)
