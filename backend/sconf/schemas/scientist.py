"""
SConf Backend - Scientist Schemas
=================================

Request bodies for POST/PUT /scientists and the response shapes of the
scientist endpoints.
"""

from typing import ClassVar, FrozenSet, List, Optional

from pydantic import EmailStr, Field

from sconf.schemas.common import INT4_MAX, CamelModel, NonEmptyStr, Pagination, PartialUpdate


class ScientistCreate(CamelModel):
    """POST /scientists body. email must be a valid address when present."""
    full_name: NonEmptyStr = Field(description="Full name")
    country: NonEmptyStr
    degree: NonEmptyStr = Field(description="Academic degree, e.g. PhD")
    specialization: NonEmptyStr
    organization: NonEmptyStr
    email: Optional[EmailStr] = None
    orcid: Optional[str] = Field(default=None, description="ORCID identifier")
    h_index: int = Field(default=0, ge=0, le=INT4_MAX, description="Hirsch index")


class ScientistUpdate(PartialUpdate):
    """PUT /scientists/{id} body: any subset of the create fields."""

    nullable_fields: ClassVar[FrozenSet[str]] = frozenset({"email", "orcid"})

    full_name: Optional[NonEmptyStr] = None
    country: Optional[NonEmptyStr] = None
    degree: Optional[NonEmptyStr] = None
    specialization: Optional[NonEmptyStr] = None
    organization: Optional[NonEmptyStr] = None
    email: Optional[EmailStr] = None
    orcid: Optional[str] = None
    h_index: Optional[int] = Field(default=None, ge=0, le=INT4_MAX)


class ScientistRead(CamelModel):
    id: int
    full_name: str
    country: str
    degree: str
    specialization: str
    organization: str
    email: Optional[str] = None
    orcid: Optional[str] = None
    h_index: int


class ScientistListResponse(CamelModel):
    data: List[ScientistRead]
    pagination: Pagination
