"""
SConf Backend - Participation SQLAlchemy Model
==============================================

What:  ORM model for the `Participation` table, linking a Scientist to a
       Conference with a talk.
Who:   Used by the participation service and by conference detail/statistics.

Table Design:
    - scientistId / conferenceId: ON DELETE RESTRICT, ON UPDATE CASCADE,
      each with its own index.
    - status: free text, defaults to 'confirmed'.
    - metadata: opaque JSON document (JSONB on PostgreSQL, plain JSON
      elsewhere). SQL NULL when absent, never the JSON literal 'null'.
      A GIN index covers the document; migration 002 adds a pg_trgm index on
      metadata::text for the regex search path.

`metadata` is reserved on declarative classes, so the Python attribute is
`metadata_` while the column keeps its persisted name.
"""

from typing import TYPE_CHECKING, Any, Dict, Optional

from sqlalchemy import JSON, ForeignKey, Index, Integer, Text, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sconf.database import Base

if TYPE_CHECKING:
    from sconf.models.conference import Conference
    from sconf.models.scientist import Scientist


MetadataType = JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql")

DEFAULT_STATUS = "confirmed"


class Participation(Base):
    """A talk given by a scientist at a conference."""

    __tablename__ = "Participation"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    talk_title: Mapped[str] = mapped_column("talkTitle", Text, nullable=False)
    participation_type: Mapped[str] = mapped_column("participationType", Text, nullable=False)
    duration_minutes: Mapped[int] = mapped_column("durationMinutes", Integer, nullable=False)

    scientist_id: Mapped[int] = mapped_column(
        "scientistId",
        ForeignKey("Scientist.id", ondelete="RESTRICT", onupdate="CASCADE"),
        nullable=False,
    )
    conference_id: Mapped[int] = mapped_column(
        "conferenceId",
        ForeignKey("Conference.id", ondelete="RESTRICT", onupdate="CASCADE"),
        nullable=False,
    )

    status: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default=DEFAULT_STATUS,
        server_default=text("'confirmed'"),
    )

    metadata_: Mapped[Optional[Dict[str, Any]]] = mapped_column(
        "metadata",
        MetadataType,
        nullable=True,
    )

    scientist: Mapped["Scientist"] = relationship(back_populates="participations")
    conference: Mapped["Conference"] = relationship(back_populates="participations")

    __table_args__ = (
        Index("Participation_scientistId_idx", "scientistId"),
        Index("Participation_conferenceId_idx", "conferenceId"),
        Index("Participation_metadata_idx", "metadata", postgresql_using="gin"),
    )

    def __repr__(self) -> str:
        return (
            f"<Participation(id={self.id}, scientist_id={self.scientist_id}, "
            f"conference_id={self.conference_id}, status='{self.status}')>"
        )
