"""
SConf Backend - Application Package Initializer
===============================================

What: Marks the `sconf` directory as a Python package.
Who:  Imported by uvicorn (`sconf.main:app`), Alembic, pytest and the seed script.

Architecture Note:
    The backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Query Shaper, Store,    │  ← pagination, filtering, sorting,
    │   Formatter, Aggregator)            │    aggregation, error tagging
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes never build SQL; services never touch Request/Response objects.
"""

__version__ = "1.0.0"
