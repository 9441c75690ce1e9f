"""Global test fixtures."""

from collections.abc import Callable
from pathlib import Path

import pytest
import pytest_asyncio

from vidiary.config import DatabaseConfig
from vidiary.domain.video.model.aggregate import NewVideo
from vidiary.domain.video.model.value import VideoOrigin
from vidiary.domain.video.service.cache import PartitionCache
from vidiary.domain.video.service.handles import HandleManager
from vidiary.infrastructure.persistence.store import SQLiteVideoStore


@pytest.fixture
def db_config(tmp_path: Path) -> DatabaseConfig:
    """Per-test SQLite database file."""
    return DatabaseConfig(url=f"sqlite+aiosqlite:///{tmp_path / 'diary.db'}")


@pytest_asyncio.fixture
async def store(db_config: DatabaseConfig):
    """An opened store, closed after the test."""
    video_store = SQLiteVideoStore(db_config)
    await video_store.open()
    yield video_store
    await video_store.close()


@pytest.fixture
def handles() -> HandleManager:
    return HandleManager()


@pytest.fixture
def cache(store: SQLiteVideoStore, handles: HandleManager) -> PartitionCache:
    return PartitionCache(store=store, handles=handles)


@pytest.fixture
def make_video() -> Callable[..., NewVideo]:
    """Factory for producer input with distinct payloads."""
    counter = iter(range(1, 10_000))

    def _make(
        date: str = "2024-01-01",
        label: str | None = None,
        payload: bytes | None = None,
        origin: VideoOrigin = VideoOrigin.CAPTURED,
        **extra,
    ) -> NewVideo:
        n = next(counter)
        return NewVideo(
            date=date,
            origin=origin,
            label=label if label is not None else f"clip {n}",
            payload=payload if payload is not None else f"webm-bytes-{n}".encode(),
            **extra,
        )

    return _make
