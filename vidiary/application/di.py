from typing import AsyncIterable, Iterable

from dishka import AsyncContainer, Provider, Scope, from_context, make_async_container, provide

from vidiary.config import Config
from vidiary.domain.video.port.store import VideoStorePort
from vidiary.domain.video.service.cache import PartitionCache
from vidiary.domain.video.service.handles import HandleManager
from vidiary.infrastructure.persistence.store import SQLiteVideoStore


class DiaryProvider(Provider):
    """Application-scoped wiring: one store, one handle manager, one cache."""

    config = from_context(provides=Config, scope=Scope.APP)

    @provide(scope=Scope.APP)
    async def get_store(self, config: Config) -> AsyncIterable[VideoStorePort]:
        store = SQLiteVideoStore(config.database)
        await store.open()
        yield store
        await store.close()

    @provide(scope=Scope.APP)
    def get_handles(self, config: Config) -> HandleManager:
        return HandleManager(url_scheme=config.playback.url_scheme)

    @provide(scope=Scope.APP)
    def get_cache(
        self, config: Config, store: VideoStorePort, handles: HandleManager
    ) -> Iterable[PartitionCache]:
        cache = PartitionCache(
            store=store,
            handles=handles,
            default_mime_type=config.playback.default_mime_type,
        )
        yield cache
        cache.close()


def create_container(config: Config | None = None) -> AsyncContainer:
    return make_async_container(
        DiaryProvider(),
        context={Config: config or Config()},
    )
