"""add_videos_table

Create the videos table with its date and origin indexes.

Revision ID: add_videos_table
Revises:
Create Date: 2026-10-19

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "add_videos_table"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create videos table."""
    op.create_table(
        "videos",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("seq", sa.Integer(), nullable=False),
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("origin", sa.String(16), nullable=False),
        sa.Column("label", sa.String(), nullable=False),
        sa.Column("mime_type", sa.String(128), nullable=False),
        sa.Column("filename", sa.String(), nullable=True),
        sa.Column("payload", sa.LargeBinary(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_videos_date", "videos", ["date"])
    op.create_index("idx_videos_origin", "videos", ["origin"])
    op.create_index("idx_videos_seq", "videos", ["seq"])


def downgrade() -> None:
    """Drop videos table."""
    op.drop_index("idx_videos_seq", table_name="videos")
    op.drop_index("idx_videos_origin", table_name="videos")
    op.drop_index("idx_videos_date", table_name="videos")
    op.drop_table("videos")
