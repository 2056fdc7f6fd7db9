"""
SConf Backend - Conference SQLAlchemy Model
===========================================

What:  ORM model for the `Conference` table.
Who:   Used by the conference service (CRUD, country statistics), the
       participation service (bulk status update date cutoff) and Alembic.

Query Patterns:
    - Default listing: ORDER BY date DESC
    - Statistics: GROUP BY country (count, avg(capacity)) and
      GROUP BY country, topic
"""

from datetime import datetime
from typing import TYPE_CHECKING, List

from sqlalchemy import DateTime, Index, Integer, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sconf.database import Base

if TYPE_CHECKING:
    from sconf.models.participation import Participation


class Conference(Base):
    """
    A scientific conference held at a given date and place.

    Lifecycle:
        Same as Scientist: deletion is blocked while participations exist.
    """

    __tablename__ = "Conference"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    topic: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    country: Mapped[str] = mapped_column(Text, nullable=False)
    location: Mapped[str] = mapped_column(Text, nullable=False)

    # Stored with time zone; all values are normalized to UTC on input
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    capacity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    participations: Mapped[List["Participation"]] = relationship(
        back_populates="conference",
        passive_deletes="all",
        order_by="Participation.id",
    )

    __table_args__ = (
        Index("Conference_date_idx", date.desc()),
        Index("Conference_country_idx", country),
    )

    def __repr__(self) -> str:
        return f"<Conference(id={self.id}, name='{self.name}', date='{self.date}')>"
