"""VideoStorePort - the durable store as seen by the partition cache."""

from abc import abstractmethod
from typing import Protocol

from vidiary.domain.shared.port import Port
from vidiary.domain.video.model.aggregate import VideoRecord
from vidiary.domain.video.model.value import VideoId


class VideoStorePort(Port, Protocol):
    """Durable, schema-versioned storage for clips and the watched map.

    Every method raises ``StorageUnavailableError`` when the store is not open
    or the database cannot be used.
    """

    @abstractmethod
    async def open(self) -> "VideoStorePort":
        """Create or upgrade the schema. Idempotent and safe to call concurrently."""
        ...

    @abstractmethod
    async def close(self) -> None: ...

    @abstractmethod
    async def put(self, record: VideoRecord) -> VideoRecord:
        """Insert or fully replace a clip. Raises ``SerializationError`` on bad payloads."""
        ...

    @abstractmethod
    async def get(self, video_id: VideoId) -> VideoRecord | None: ...

    @abstractmethod
    async def get_by_date(self, day: str) -> list[VideoRecord]:
        """Clips of one day, in insertion order."""
        ...

    @abstractmethod
    async def get_all(self) -> list[VideoRecord]: ...

    @abstractmethod
    async def delete(self, video_id: VideoId) -> None:
        """Remove a clip; a missing id is not an error."""
        ...

    @abstractmethod
    async def clear(self) -> None: ...

    @abstractmethod
    async def mark_watched(self, day: str, watched: bool = True) -> None: ...

    @abstractmethod
    async def is_watched(self, day: str) -> bool: ...

    @abstractmethod
    async def watched_dates(self) -> list[str]: ...
