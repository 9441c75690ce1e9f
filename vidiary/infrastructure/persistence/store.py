"""SQLite-backed implementation of the durable video store."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from alembic.util import CommandError
from sqlalchemy.exc import OperationalError, SQLAlchemyError, StatementError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, AsyncSession, async_sessionmaker

from vidiary.config import DatabaseConfig
from vidiary.domain.shared.error import SerializationError, StorageUnavailableError
from vidiary.domain.video.model.aggregate import VideoRecord
from vidiary.domain.video.model.value import VideoId
from vidiary.domain.video.port.store import VideoStorePort
from vidiary.infrastructure.persistence.database import (
    create_db_engine,
    create_session_factory,
)
from vidiary.infrastructure.persistence.migrate import (
    current_revision,
    head_revision,
    upgrade_to_head,
)
from vidiary.infrastructure.persistence.repository.video import SQLAlchemyVideoRepository
from vidiary.infrastructure.persistence.repository.watched import (
    SQLAlchemyWatchedRepository,
)

logger = logging.getLogger(__name__)


class SQLiteVideoStore(VideoStorePort):
    """Durable store for clips and watched flags.

    Constructed explicitly and opened once per session. All operations share
    one connection and run one transaction at a time.
    """

    def __init__(self, config: DatabaseConfig) -> None:
        self._config = config
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None
        self._open_lock = asyncio.Lock()
        self._tx_lock = asyncio.Lock()

    async def __aenter__(self) -> "SQLiteVideoStore":
        await self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    @property
    def is_open(self) -> bool:
        return self._session_factory is not None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def open(self) -> "SQLiteVideoStore":
        if self.is_open:
            return self

        async with self._open_lock:
            # Concurrent callers queue on the lock and find the store ready
            if self.is_open:
                return self

            engine: AsyncEngine | None = None
            try:
                engine = create_db_engine(self._config)
                async with engine.begin() as conn:
                    await self._prepare_schema(conn)
            except StorageUnavailableError:
                if engine is not None:
                    await engine.dispose()
                raise
            except (OSError, SQLAlchemyError, CommandError) as e:
                if engine is not None:
                    await engine.dispose()
                raise StorageUnavailableError(
                    f"Could not open video store at {self._config.url}: {e}"
                ) from e

            self._engine = engine
            self._session_factory = create_session_factory(engine)
            logger.info("Video store opened: %s", engine.url)
        return self

    async def _prepare_schema(self, conn: AsyncConnection) -> None:
        if self._config.auto_migrate:
            await conn.run_sync(upgrade_to_head)
            return

        current = await conn.run_sync(current_revision)
        head = head_revision()
        if current != head:
            raise StorageUnavailableError(
                f"Database schema is at {current or 'empty'}, expected {head}; "
                "enable database.auto_migrate or migrate manually"
            )

    async def close(self) -> None:
        async with self._open_lock:
            if self._engine is None:
                return
            # Let an in-flight transaction finish first
            async with self._tx_lock:
                await self._engine.dispose()
                self._engine = None
                self._session_factory = None
            logger.info("Video store closed")

    @asynccontextmanager
    async def _transaction(self, *, writes_payload: bool = False) -> AsyncIterator[AsyncSession]:
        """Run one serialized transaction, translating driver errors."""
        async with self._tx_lock:
            if self._session_factory is None:
                raise StorageUnavailableError("Video store is not open")
            try:
                async with self._session_factory() as session, session.begin():
                    yield session
            except OperationalError as e:
                raise StorageUnavailableError(f"Database unavailable: {e}") from e
            except StatementError as e:
                if writes_payload:
                    raise SerializationError(f"Could not store video payload: {e}") from e
                raise StorageUnavailableError(f"Database error: {e}") from e
            except SQLAlchemyError as e:
                raise StorageUnavailableError(f"Database error: {e}") from e

    # -------------------------------------------------------------------------
    # Videos
    # -------------------------------------------------------------------------

    async def put(self, record: VideoRecord) -> VideoRecord:
        async with self._transaction(writes_payload=True) as session:
            await SQLAlchemyVideoRepository(session).save(record)
        logger.debug(
            "Stored video %s (date=%s, %d bytes)", record.id, record.date, record.size
        )
        return record

    async def get(self, video_id: VideoId) -> VideoRecord | None:
        async with self._transaction() as session:
            return await SQLAlchemyVideoRepository(session).get(video_id)

    async def get_by_date(self, day: str) -> list[VideoRecord]:
        async with self._transaction() as session:
            return await SQLAlchemyVideoRepository(session).find_by_date(day)

    async def get_all(self) -> list[VideoRecord]:
        async with self._transaction() as session:
            return await SQLAlchemyVideoRepository(session).list_all()

    async def count(self) -> int:
        async with self._transaction() as session:
            return await SQLAlchemyVideoRepository(session).count()

    async def delete(self, video_id: VideoId) -> None:
        async with self._transaction() as session:
            await SQLAlchemyVideoRepository(session).delete(video_id)
        logger.debug("Deleted video %s", video_id)

    async def clear(self) -> None:
        async with self._transaction() as session:
            await SQLAlchemyVideoRepository(session).delete_all()
        logger.info("Cleared all stored videos")

    # -------------------------------------------------------------------------
    # Watched map
    # -------------------------------------------------------------------------

    async def mark_watched(self, day: str, watched: bool = True) -> None:
        async with self._transaction() as session:
            await SQLAlchemyWatchedRepository(session).set(day, watched)

    async def is_watched(self, day: str) -> bool:
        async with self._transaction() as session:
            return await SQLAlchemyWatchedRepository(session).get(day)

    async def watched_dates(self) -> list[str]:
        async with self._transaction() as session:
            return await SQLAlchemyWatchedRepository(session).list_watched()
