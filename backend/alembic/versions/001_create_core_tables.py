"""Create Scientist, Conference and Participation tables

Revision ID: 001
Revises: None
Create Date: 2025-11-25 19:18:32.000000+00:00

What:  Initial schema: the three tables, their foreign keys
       (ON DELETE RESTRICT, ON UPDATE CASCADE) and indexes.
How:   Table and column names keep their persisted camelCase spelling
       ("Scientist"."fullName", "Participation"."conferenceId", ...).

Rollback: downgrade() drops all three tables (destructive, all data lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "Scientist",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("fullName", sa.Text(), nullable=False),
        sa.Column("country", sa.Text(), nullable=False),
        sa.Column("degree", sa.Text(), nullable=False),
        sa.Column("specialization", sa.Text(), nullable=False),
        sa.Column("organization", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("orcid", sa.Text(), nullable=True),
        sa.Column("hIndex", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.PrimaryKeyConstraint("id", name="Scientist_pkey"),
    )

    op.create_table(
        "Conference",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("topic", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("country", sa.Text(), nullable=False),
        sa.Column("location", sa.Text(), nullable=False),
        sa.Column("capacity", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.PrimaryKeyConstraint("id", name="Conference_pkey"),
    )
    op.create_index("Conference_date_idx", "Conference", [sa.text("date DESC")])
    op.create_index("Conference_country_idx", "Conference", ["country"])

    op.create_table(
        "Participation",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("talkTitle", sa.Text(), nullable=False),
        sa.Column("participationType", sa.Text(), nullable=False),
        sa.Column("durationMinutes", sa.Integer(), nullable=False),
        sa.Column("scientistId", sa.Integer(), nullable=False),
        sa.Column("conferenceId", sa.Integer(), nullable=False),
        sa.Column("status", sa.Text(), server_default=sa.text("'confirmed'"), nullable=False),
        sa.Column(
            "metadata",
            sa.JSON().with_variant(postgresql.JSONB(), "postgresql"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("id", name="Participation_pkey"),
        sa.ForeignKeyConstraint(
            ["scientistId"], ["Scientist.id"],
            name="Participation_scientistId_fkey",
            ondelete="RESTRICT", onupdate="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["conferenceId"], ["Conference.id"],
            name="Participation_conferenceId_fkey",
            ondelete="RESTRICT", onupdate="CASCADE",
        ),
    )
    op.create_index("Participation_scientistId_idx", "Participation", ["scientistId"])
    op.create_index("Participation_conferenceId_idx", "Participation", ["conferenceId"])
    op.create_index(
        "Participation_metadata_idx", "Participation", ["metadata"], postgresql_using="gin",
    )


def downgrade() -> None:
    op.drop_index("Participation_metadata_idx", table_name="Participation")
    op.drop_index("Participation_conferenceId_idx", table_name="Participation")
    op.drop_index("Participation_scientistId_idx", table_name="Participation")
    op.drop_table("Participation")
    op.drop_index("Conference_country_idx", table_name="Conference")
    op.drop_index("Conference_date_idx", table_name="Conference")
    op.drop_table("Conference")
    op.drop_table("Scientist")
