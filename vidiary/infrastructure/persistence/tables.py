"""SQLAlchemy table definitions for the local diary database."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Index,
    Integer,
    LargeBinary,
    MetaData,
    String,
    Table,
)

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# VIDEOS TABLE
# ============================================================================
videos_table = Table(
    "videos",
    metadata,
    Column("id", String, primary_key=True),
    Column("seq", Integer, nullable=False),  # Insertion order, kept across replaces
    Column("date", String(10), nullable=False),  # YYYY-MM-DD partition key
    Column("timestamp", DateTime(timezone=True), nullable=False),
    Column("origin", String(16), nullable=False),  # VideoOrigin as string
    Column("label", String, nullable=False),
    Column("mime_type", String(128), nullable=False),
    Column("filename", String, nullable=True),
    Column("payload", LargeBinary, nullable=False),
)

Index("idx_videos_date", videos_table.c.date)
Index("idx_videos_origin", videos_table.c.origin)
Index("idx_videos_seq", videos_table.c.seq)


# ============================================================================
# WATCHED MOVIES TABLE
# ============================================================================
watched_movies_table = Table(
    "watched_movies",
    metadata,
    Column("date", String(10), primary_key=True),
    Column("watched", Boolean, nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)
