"""
SConf Backend - Scientist SQLAlchemy Model
==========================================

What:  ORM model for the `Scientist` table.
Who:   Used by the scientist service (CRUD), the participation service
       (joined listings and metadata search) and Alembic.

Table Design:
    - Table and column names keep the persisted camelCase schema
      ("Scientist"."fullName", "hIndex"); Python attributes are snake_case.
    - email / orcid are nullable; hIndex defaults to 0.
    - Deletion is restricted while any Participation references the row.
"""

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Integer, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sconf.database import Base

if TYPE_CHECKING:
    from sconf.models.participation import Participation


class Scientist(Base):
    """
    A researcher who can give talks at conferences.

    Lifecycle:
        Created via POST, mutated by partial PUT, deleted only when no
        Participation references it (restrict-on-delete).
    """

    __tablename__ = "Scientist"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    full_name: Mapped[str] = mapped_column("fullName", Text, nullable=False)
    country: Mapped[str] = mapped_column(Text, nullable=False)
    degree: Mapped[str] = mapped_column(Text, nullable=False)
    specialization: Mapped[str] = mapped_column(Text, nullable=False)
    organization: Mapped[str] = mapped_column(Text, nullable=False)

    email: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    orcid: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Hirsch index: non-negative citation metric
    h_index: Mapped[int] = mapped_column(
        "hIndex",
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    # passive_deletes="all": the ORM never nullifies Participation.scientistId;
    # the database RESTRICT constraint decides whether a delete may proceed.
    participations: Mapped[List["Participation"]] = relationship(
        back_populates="scientist",
        passive_deletes="all",
    )

    def __repr__(self) -> str:
        return f"<Scientist(id={self.id}, full_name='{self.full_name}')>"
