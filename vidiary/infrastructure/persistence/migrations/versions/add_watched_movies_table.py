"""add_watched_movies_table

Move the per-day "movie watched" flag into the database.

Revision ID: add_watched_movies_table
Revises: add_videos_table
Create Date: 2026-10-19

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "add_watched_movies_table"
down_revision: Union[str, Sequence[str], None] = "add_videos_table"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create watched_movies table."""
    op.create_table(
        "watched_movies",
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("watched", sa.Boolean(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("date"),
    )


def downgrade() -> None:
    """Drop watched_movies table."""
    op.drop_table("watched_movies")
