"""Database engine and session factory creation."""

import os
from pathlib import Path

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from vidiary.config import DatabaseConfig
from vidiary.domain.shared.error import ConfigurationError


def expand_sqlite_path(url: str) -> str:
    """Expand ~ in SQLite URLs and ensure parent directory exists.

    Raises:
        OSError: if the parent directory cannot be created.
    """
    if not url.startswith("sqlite") or ":memory:" in url:
        return url

    # Extract path from URL (sqlite+aiosqlite:///path or sqlite:///path)
    prefix_end = url.index("///") + 3
    prefix = url[:prefix_end]
    path = url[prefix_end:]

    abs_path = os.path.abspath(os.path.expanduser(path))
    Path(abs_path).parent.mkdir(parents=True, exist_ok=True)

    return f"{prefix}{abs_path}"


def create_db_engine(config: DatabaseConfig) -> AsyncEngine:
    """Create the async engine for the diary database.

    A single StaticPool connection is shared by every operation; the store
    serializes transactions on it.

    Raises:
        ConfigurationError: if the URL does not name a SQLite database.
    """
    if not config.url.startswith("sqlite"):
        raise ConfigurationError(f"Unsupported database URL: {config.url!r} (expected sqlite)")
    return create_async_engine(
        expand_sqlite_path(config.url),
        echo=config.echo,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
