"""
SConf Backend - Pydantic Schemas
================================

API contracts (request bodies and response shapes) kept separate from the
ORM models. External field names are camelCase; Python names are snake_case.
"""
