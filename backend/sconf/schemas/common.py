"""
SConf Backend - Shared Schema Building Blocks
=============================================

What:  Base model with the camelCase wire convention, pagination envelopes,
       and the error / message / health response models shared by every
       resource.
Who:   Imported by the per-entity schema modules and by route declarations
       (OpenAPI `responses=` maps).
"""

from datetime import datetime, timezone
from typing import Annotated, Any, ClassVar, FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, model_validator
from pydantic.alias_generators import to_camel

# Required text fields: surrounding whitespace stripped, must not be empty
NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

# Largest value an INTEGER column holds (PostgreSQL int4)
INT4_MAX = 2**31 - 1


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken as UTC; aware ones are converted to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class CamelModel(BaseModel):
    """
    Base for every API schema.

    Serializes with camelCase aliases (fullName, hIndex, ...) and accepts
    either camelCase or snake_case on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class PartialUpdate(CamelModel):
    """
    Base for PUT bodies where every field is optional.

    Omitted fields are left untouched. An explicit null is only accepted for
    columns listed in `nullable_fields`; nulling a required column is a
    validation error rather than a database failure.
    """

    nullable_fields: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="after")
    def reject_null_required_fields(self):
        for name in self.model_fields_set:
            if getattr(self, name) is None and name not in self.nullable_fields:
                raise ValueError(f"'{to_camel(name)}' cannot be null")
        return self

    def changes(self) -> dict:
        """Only the fields the client actually sent, keyed by attribute name."""
        return self.model_dump(exclude_unset=True)


# ══════════════════════════════════════════════════════════════════════════
# Pagination Envelopes
# ══════════════════════════════════════════════════════════════════════════


class PageInfo(CamelModel):
    """Pagination block for paths that do not compute a total (metadata search)."""
    page: int = Field(ge=1, description="Current page number (1-based)")
    limit: int = Field(ge=1, description="Items per page")


class Pagination(PageInfo):
    """
    Pagination block for list endpoints.

    pages == ceil(total / limit); an empty result reports total=0, pages=0.
    """
    total: int = Field(ge=0, description="Number of records matching the filters")
    pages: int = Field(ge=0, description="Number of pages at the current limit")


# ══════════════════════════════════════════════════════════════════════════
# Generic Responses
# ══════════════════════════════════════════════════════════════════════════


class MessageResponse(CamelModel):
    message: str = Field(description="Human-readable confirmation")


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "error": "Scientist not found",
            "code": "not_found",
            "details": {"resource": "Scientist", "resource_id": 42},
            "request_id": "550e8400"
        }
    """
    error: str = Field(description="Human-readable error description")
    code: str = Field(description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(CamelModel):
    """Returned by GET /health for monitoring and load balancer probes."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    environment: str = Field(description="Deployment environment name")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
