"""Trigram index on Participation.metadata text

Revision ID: 002
Revises: 001
Create Date: 2025-11-26 10:00:00.000000+00:00

What:  Enables pg_trgm and indexes metadata::text with gin_trgm_ops.
Why:   GET /participations/search matches a regular expression against the
       metadata document cast to text; the trigram index lets PostgreSQL
       avoid a sequential scan for selective patterns.

PostgreSQL only; on other dialects both steps are no-ops.
"""

from typing import Sequence, Union

from alembic import op

# revision identifiers
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    if op.get_bind().dialect.name != "postgresql":
        return
    op.execute("CREATE EXTENSION IF NOT EXISTS pg_trgm")
    op.execute(
        'CREATE INDEX IF NOT EXISTS "Participation_metadata_trgm_idx" '
        'ON "Participation" USING GIN ((metadata::text) gin_trgm_ops)'
    )


def downgrade() -> None:
    if op.get_bind().dialect.name != "postgresql":
        return
    # The extension is left installed; other schemas may rely on it
    op.execute('DROP INDEX IF EXISTS "Participation_metadata_trgm_idx"')
