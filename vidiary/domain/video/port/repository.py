"""Repository ports - persistence interfaces for clips and watched flags."""

from abc import abstractmethod
from typing import Protocol

from vidiary.domain.shared.port import Port
from vidiary.domain.video.model.aggregate import VideoRecord
from vidiary.domain.video.model.value import VideoId


class VideoRepository(Port, Protocol):
    @abstractmethod
    async def save(self, record: VideoRecord) -> None: ...

    @abstractmethod
    async def get(self, video_id: VideoId) -> VideoRecord | None: ...

    @abstractmethod
    async def find_by_date(self, day: str) -> list[VideoRecord]: ...

    @abstractmethod
    async def list_all(self) -> list[VideoRecord]: ...

    @abstractmethod
    async def delete(self, video_id: VideoId) -> None: ...

    @abstractmethod
    async def delete_all(self) -> None: ...

    @abstractmethod
    async def count(self) -> int: ...


class WatchedRepository(Port, Protocol):
    @abstractmethod
    async def set(self, day: str, watched: bool) -> None: ...

    @abstractmethod
    async def get(self, day: str) -> bool: ...

    @abstractmethod
    async def list_watched(self) -> list[str]: ...
