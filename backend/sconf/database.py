"""
SConf Backend - Database Engine & Session Management
=====================================================

What:  Async SQLAlchemy engine factory, session factory, declarative base and
       the per-request session dependency.
How:   The application lifespan calls create_db_engine() and
       create_session_factory() once, stores both on `app.state`, and disposes
       the engine on shutdown. get_db_session() reads the factory from
       `request.app.state`, so every component that needs the store receives
       it through FastAPI dependency injection rather than a module global.
Who:   main.lifespan (lifecycle), route handlers (Depends(get_db_session)),
       tests (build their own engine against in-memory SQLite).

Connection Pooling (PostgreSQL):
    pool_size / max_overflow from settings, pre-ping enabled, connections
    recycled hourly.

SQLite:
    Used by the test suite. Foreign keys are off by default in SQLite, so a
    connect hook turns them on; otherwise restrict-on-delete and FK existence
    would not be enforced.
"""

import logging
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from sconf.config import settings

logger = logging.getLogger(__name__)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Every model registers with `Base.metadata`, which Alembic and the test
    suite use to create the schema.
    """
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# ── Engine Factory ────────────────────────────────────────────────────────
def create_db_engine(database_url: Optional[str] = None) -> AsyncEngine:
    """
    Build the async engine for the configured (or given) database URL.

    PostgreSQL gets a sized connection pool; SQLite gets a single shared
    connection (StaticPool) so in-memory databases survive across sessions.
    """
    url = database_url or settings.database_url

    if url.startswith("sqlite"):
        engine = create_async_engine(
            url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
            echo=settings.log_level == "DEBUG",
        )
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_async_engine(
        url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
        echo=settings.log_level == "DEBUG",
    )


# ── Session Factory ───────────────────────────────────────────────────────
def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to `engine`.

    expire_on_commit=False keeps loaded attributes readable after the
    request-level commit, when responses are serialized.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Opens a session from the factory stored on app.state
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global error handlers
        5. Always: closes the session (returns the connection to the pool)

    Example usage in a route:
        @router.get("/scientists")
        async def list_scientists(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine(engine: AsyncEngine) -> None:
    """Closes every pooled connection. Called during application shutdown."""
    await engine.dispose()
    logger.info("Database engine disposed")
