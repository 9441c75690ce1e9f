"""Entry point for consumers: an opened diary as an async context manager."""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from vidiary.application.di import create_container
from vidiary.config import Config
from vidiary.domain.video.service.cache import PartitionCache


@asynccontextmanager
async def open_diary(config: Config | None = None) -> AsyncIterator[PartitionCache]:
    """Open the store, yield the partition cache, and close everything on exit.

    Raises:
        StorageUnavailableError: if the database cannot be opened.
    """
    container = create_container(config)
    try:
        yield await container.get(PartitionCache)
    finally:
        await container.close()
