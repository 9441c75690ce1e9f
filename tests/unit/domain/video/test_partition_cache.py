"""Unit tests for PartitionCache against an in-memory store.

The fake store counts reads and can hold them open, which makes load
coalescing and lock ordering observable.
"""

import asyncio
import gc
from collections.abc import Callable

import pytest

from vidiary.domain.shared.error import (
    ConcurrentLoadCollisionError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from vidiary.domain.video.model.aggregate import NewVideo, VideoRecord
from vidiary.domain.video.model.value import VideoId
from vidiary.domain.video.service.cache import PartitionCache
from vidiary.domain.video.service.handles import HandleManager


class FakeStore:
    """In-memory VideoStorePort for testing."""

    def __init__(self) -> None:
        self.records: dict[VideoId, VideoRecord] = {}
        self.watched: dict[str, bool] = {}
        self.reads = 0
        self.gate: asyncio.Event | None = None
        self.on_read: Callable[[], None] | None = None
        self.failing = False
        self.failing_reads = False

    def _check(self) -> None:
        if self.failing:
            raise StorageUnavailableError("disk is gone")

    async def open(self) -> "FakeStore":
        return self

    async def close(self) -> None:
        pass

    async def put(self, record: VideoRecord) -> VideoRecord:
        self._check()
        self.records[record.id] = record
        return record

    async def get(self, video_id: VideoId) -> VideoRecord | None:
        return self.records.get(video_id)

    async def get_by_date(self, day: str) -> list[VideoRecord]:
        self.reads += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.failing_reads:
            raise StorageUnavailableError("database is locked")
        if self.on_read is not None:
            self.on_read()
        return [r for r in self.records.values() if r.date == day]

    async def get_all(self) -> list[VideoRecord]:
        return list(self.records.values())

    async def delete(self, video_id: VideoId) -> None:
        self._check()
        self.records.pop(video_id, None)

    async def clear(self) -> None:
        self.records.clear()

    async def mark_watched(self, day: str, watched: bool = True) -> None:
        self.watched[day] = watched

    async def is_watched(self, day: str) -> bool:
        return self.watched.get(day, False)

    async def watched_dates(self) -> list[str]:
        return sorted(d for d, w in self.watched.items() if w)


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def fake_cache(fake_store: FakeStore) -> PartitionCache:
    return PartitionCache(store=fake_store, handles=HandleManager())


async def _settle() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


class TestLoadPartition:
    @pytest.mark.asyncio
    async def test_second_load_does_not_read_store(
        self, fake_cache: PartitionCache, fake_store: FakeStore
    ) -> None:
        await fake_cache.load_partition("2024-01-01")
        await fake_cache.load_partition("2024-01-01")

        assert fake_store.reads == 1
        assert "2024-01-01" in fake_cache.loaded_dates

    @pytest.mark.asyncio
    async def test_empty_day_is_cached(
        self, fake_cache: PartitionCache, fake_store: FakeStore
    ) -> None:
        assert await fake_cache.load_partition("2024-05-05") == []
        assert await fake_cache.load_partition("2024-05-05") == []
        assert fake_store.reads == 1

    @pytest.mark.asyncio
    async def test_concurrent_loads_share_one_read(
        self,
        fake_cache: PartitionCache,
        fake_store: FakeStore,
        make_video: Callable[..., NewVideo],
    ) -> None:
        await fake_cache.add_video(make_video())
        fake_cache.close()
        fake_store.reads = 0
        fake_store.gate = asyncio.Event()

        loads = [asyncio.create_task(fake_cache.load_partition("2024-01-01")) for _ in range(3)]
        await _settle()
        fake_store.gate.set()
        results = await asyncio.gather(*loads)

        assert fake_store.reads == 1
        assert results[0] == results[1] == results[2]
        assert len(results[0]) == 1

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_cancel_load(
        self, fake_cache: PartitionCache, fake_store: FakeStore
    ) -> None:
        fake_store.gate = asyncio.Event()
        first = asyncio.create_task(fake_cache.load_partition("2024-01-01"))
        second = asyncio.create_task(fake_cache.load_partition("2024-01-01"))
        await _settle()

        first.cancel()
        await _settle()
        fake_store.gate.set()

        assert await second == []
        assert fake_store.reads == 1

    @pytest.mark.asyncio
    async def test_load_discarded_by_clear_is_retried(
        self,
        fake_cache: PartitionCache,
        fake_store: FakeStore,
        make_video: Callable[..., NewVideo],
    ) -> None:
        await fake_store.put(make_video().to_record(VideoId("old"), "video/webm"))
        fake_store.gate = asyncio.Event()

        load = asyncio.create_task(fake_cache.load_partition("2024-01-01"))
        await _settle()
        await fake_cache.clear_all()
        fake_store.gate.set()

        assert await load == []
        assert fake_store.reads == 2
        assert len(fake_cache.handles) == 0

    @pytest.mark.asyncio
    async def test_failed_load_with_only_cancelled_waiters(
        self, fake_cache: PartitionCache, fake_store: FakeStore
    ) -> None:
        loop = asyncio.get_running_loop()
        reported: list[dict] = []
        loop.set_exception_handler(lambda _, context: reported.append(context))
        fake_store.gate = asyncio.Event()
        fake_store.failing_reads = True

        waiter = asyncio.create_task(fake_cache.load_partition("2024-01-01"))
        await _settle()
        waiter.cancel()
        await _settle()
        fake_store.gate.set()
        await _settle()
        gc.collect()

        loop.set_exception_handler(None)
        assert waiter.cancelled()
        assert reported == []
        assert "2024-01-01" not in fake_cache.loaded_dates

    @pytest.mark.asyncio
    async def test_collision_when_every_attempt_is_discarded(
        self, fake_cache: PartitionCache, fake_store: FakeStore
    ) -> None:
        fake_store.on_read = fake_cache.close

        with pytest.raises(ConcurrentLoadCollisionError):
            await fake_cache.load_partition("2024-01-01")
        assert "2024-01-01" not in fake_cache.loaded_dates

    @pytest.mark.asyncio
    async def test_invalid_date(self, fake_cache: PartitionCache) -> None:
        with pytest.raises(ValidationError):
            await fake_cache.load_partition("not a day")


class TestOrdering:
    @pytest.mark.asyncio
    async def test_add_queued_behind_load_lands_in_partition(
        self,
        fake_cache: PartitionCache,
        fake_store: FakeStore,
        make_video: Callable[..., NewVideo],
    ) -> None:
        existing = await fake_store.put(make_video(label="a").to_record(VideoId("a"), "video/webm"))
        fake_store.gate = asyncio.Event()

        load = asyncio.create_task(fake_cache.load_partition("2024-01-01"))
        await _settle()
        add = asyncio.create_task(fake_cache.add_video(make_video(label="b")))
        await _settle()
        fake_store.gate.set()
        _, added = await asyncio.gather(load, add)

        assert [r.id for r in fake_cache.videos("2024-01-01")] == [existing.id, added.id]
        assert fake_store.reads == 1
        assert added.id in fake_cache.handles

    @pytest.mark.asyncio
    async def test_mutations_apply_in_invocation_order(
        self,
        fake_cache: PartitionCache,
        make_video: Callable[..., NewVideo],
    ) -> None:
        record = await fake_cache.add_video(make_video(label="v0"))

        await asyncio.gather(
            *(fake_cache.update_video(record.id, {"label": f"v{n}"}) for n in range(1, 6))
        )

        assert fake_cache.videos("2024-01-01")[0].label == "v5"


class TestMutations:
    @pytest.mark.asyncio
    async def test_add_to_unloaded_day_hydrates_it(
        self,
        fake_cache: PartitionCache,
        fake_store: FakeStore,
        make_video: Callable[..., NewVideo],
    ) -> None:
        earlier = await fake_store.put(make_video().to_record(VideoId("earlier"), "video/webm"))

        added = await fake_cache.add_video(make_video())

        assert [r.id for r in fake_cache.videos("2024-01-01")] == [earlier.id, added.id]
        assert earlier.id in fake_cache.handles

    @pytest.mark.asyncio
    async def test_add_reports_day_that_cannot_be_loaded(
        self,
        fake_cache: PartitionCache,
        fake_store: FakeStore,
        make_video: Callable[..., NewVideo],
    ) -> None:
        fake_store.failing_reads = True

        with pytest.raises(StorageUnavailableError, match="could not load 2024-01-01"):
            await fake_cache.add_video(make_video())

        [stored] = fake_store.records.values()
        assert "2024-01-01" not in fake_cache.loaded_dates
        assert len(fake_cache.handles) == 0

        fake_store.failing_reads = False
        assert await fake_cache.load_partition("2024-01-01") == [stored]
        assert (await fake_cache.get_handle(stored.id)).read() == stored.payload

    @pytest.mark.asyncio
    async def test_failed_add_leaves_cache_untouched(
        self,
        fake_cache: PartitionCache,
        fake_store: FakeStore,
        make_video: Callable[..., NewVideo],
    ) -> None:
        await fake_cache.add_video(make_video())
        before = fake_cache.videos("2024-01-01")
        fake_store.failing = True

        with pytest.raises(StorageUnavailableError):
            await fake_cache.add_video(make_video())

        assert fake_cache.videos("2024-01-01") == before
        assert len(fake_cache.handles) == 1

    @pytest.mark.asyncio
    async def test_failed_update_leaves_cache_untouched(
        self,
        fake_cache: PartitionCache,
        fake_store: FakeStore,
        make_video: Callable[..., NewVideo],
    ) -> None:
        record = await fake_cache.add_video(make_video(label="before"))
        handle = await fake_cache.get_handle(record.id)
        fake_store.failing = True

        with pytest.raises(StorageUnavailableError):
            await fake_cache.update_video(record.id, {"label": "after", "payload": b"new"})

        assert fake_cache.videos("2024-01-01")[0].label == "before"
        assert await fake_cache.get_handle(record.id) is handle
        assert not handle.revoked

    @pytest.mark.asyncio
    async def test_failed_delete_keeps_clip_and_handle(
        self,
        fake_cache: PartitionCache,
        fake_store: FakeStore,
        make_video: Callable[..., NewVideo],
    ) -> None:
        record = await fake_cache.add_video(make_video())
        handle = await fake_cache.get_handle(record.id)
        fake_store.failing = True

        with pytest.raises(StorageUnavailableError):
            await fake_cache.delete_video(record.id)

        assert [r.id for r in fake_cache.videos("2024-01-01")] == [record.id]
        assert not handle.revoked

    @pytest.mark.asyncio
    async def test_unknown_ids(self, fake_cache: PartitionCache) -> None:
        with pytest.raises(NotFoundError):
            await fake_cache.update_video(VideoId("ghost"), {"label": "x"})
        with pytest.raises(NotFoundError):
            await fake_cache.delete_video(VideoId("ghost"))
        with pytest.raises(NotFoundError):
            await fake_cache.get_handle(VideoId("ghost"))
        with pytest.raises(NotFoundError):
            await fake_cache.find_video(VideoId("ghost"))

    @pytest.mark.asyncio
    async def test_update_of_stored_but_unloaded_clip(
        self,
        fake_cache: PartitionCache,
        fake_store: FakeStore,
        make_video: Callable[..., NewVideo],
    ) -> None:
        stored = await fake_store.put(make_video().to_record(VideoId("cold"), "video/webm"))

        with pytest.raises(NotFoundError):
            await fake_cache.update_video(stored.id, {"label": "x"})
        assert fake_store.records[stored.id].label == stored.label

    @pytest.mark.asyncio
    async def test_patch_of_immutable_field(
        self, fake_cache: PartitionCache, make_video: Callable[..., NewVideo]
    ) -> None:
        record = await fake_cache.add_video(make_video())

        with pytest.raises(ValidationError):
            await fake_cache.update_video(record.id, {"date": "2024-02-02"})

    @pytest.mark.asyncio
    async def test_find_video_loads_its_day(
        self,
        fake_cache: PartitionCache,
        fake_store: FakeStore,
        make_video: Callable[..., NewVideo],
    ) -> None:
        stored = await fake_store.put(
            make_video(date="2023-12-24").to_record(VideoId("xmas"), "video/webm")
        )

        found = await fake_cache.find_video(stored.id)

        assert found == stored
        assert "2023-12-24" in fake_cache.loaded_dates
        assert stored.id in fake_cache.handles


class TestReset:
    @pytest.mark.asyncio
    async def test_close_drops_idle_day_locks(
        self, fake_cache: PartitionCache, make_video: Callable[..., NewVideo]
    ) -> None:
        for day in ("2024-01-01", "2024-01-02", "2024-01-03"):
            await fake_cache.add_video(make_video(date=day))
        assert len(fake_cache._locks) == 3

        fake_cache.close()

        assert fake_cache._locks == {}

    @pytest.mark.asyncio
    async def test_clear_keeps_lock_of_in_flight_load(
        self, fake_cache: PartitionCache, fake_store: FakeStore
    ) -> None:
        fake_store.gate = asyncio.Event()
        load = asyncio.create_task(fake_cache.load_partition("2024-01-01"))
        await _settle()
        held = fake_cache._locks["2024-01-01"]

        await fake_cache.clear_all()

        assert fake_cache._locks == {"2024-01-01": held}
        fake_store.gate.set()
        assert await load == []
