"""PartitionCache - the lazily loaded, per-day view of the video store."""

import asyncio
import datetime as dt
import logging
import random
from collections.abc import Mapping
from dataclasses import field
from typing import Any

import pydantic

from vidiary.domain.shared.error import (
    ConcurrentLoadCollisionError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from vidiary.domain.shared.service import Service
from vidiary.domain.video.model.aggregate import NewVideo, VideoPatch, VideoRecord
from vidiary.domain.video.model.handle import ViewHandle
from vidiary.domain.video.model.value import VideoId, new_video_id, normalize_day
from vidiary.domain.video.port.store import VideoStorePort
from vidiary.domain.video.service.handles import HandleManager

logger = logging.getLogger(__name__)

# A coalesced load is retried once if a concurrent clear discarded its result
_LOAD_ATTEMPTS = 2


class PartitionCache(Service):
    """In-memory projection of the store, organised as day -> ordered clips.

    Consumers only talk to this class. Invariants kept here:

    - every loaded day mirrors the store exactly after each add/update/delete;
    - a clip has a live view handle iff it sits in a loaded day;
    - store writes commit before memory changes, so a failed write leaves the
      cache untouched.

    Loads and mutations touching the same day queue on that day's lock in
    invocation order. ``clear_all`` bumps a generation counter; work that
    started before the clear never writes its results into memory.
    """

    store: VideoStorePort
    handles: HandleManager = field(default_factory=HandleManager)
    default_mime_type: str = "video/webm"

    _partitions: dict[str, list[VideoRecord]] = field(default_factory=dict, init=False, repr=False)
    _loaded: set[str] = field(default_factory=set, init=False, repr=False)
    _index: dict[VideoId, str] = field(default_factory=dict, init=False, repr=False)
    _loading: dict[str, asyncio.Task[None]] = field(default_factory=dict, init=False, repr=False)
    _locks: dict[str, asyncio.Lock] = field(default_factory=dict, init=False, repr=False)
    _generation: int = field(default=0, init=False, repr=False)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @property
    def loaded_dates(self) -> frozenset[str]:
        return frozenset(self._loaded)

    def videos(self, day: str | dt.date) -> list[VideoRecord]:
        """Snapshot of a loaded day; empty if the day is not loaded."""
        return list(self._partitions.get(self._day(day), ()))

    async def load_partition(self, day: str | dt.date) -> list[VideoRecord]:
        """Return a day's clips, reading the store only the first time."""
        day = self._day(day)
        for _ in range(_LOAD_ATTEMPTS):
            if day in self._loaded:
                return self.videos(day)

            task = self._loading.get(day)
            if task is None:
                task = asyncio.ensure_future(self._load(day))
                self._loading[day] = task
                task.add_done_callback(self._forget_load(day))
            else:
                logger.debug("Joining in-flight load of %s", day)

            # One waiter giving up must not cancel the read for the others
            await asyncio.shield(task)

        if day not in self._loaded:
            raise ConcurrentLoadCollisionError(
                f"Load of {day} completed without caching the partition"
            )
        return self.videos(day)

    def _forget_load(self, day: str):
        def _done(task: asyncio.Task[None]) -> None:
            if self._loading.get(day) is task:
                del self._loading[day]
            # Every waiter may have been cancelled; mark a failure as retrieved
            if not task.cancelled():
                task.exception()

        return _done

    async def _load(self, day: str) -> None:
        async with self._lock_for(day):
            # An add may have hydrated the day while this load queued
            if day in self._loaded:
                return
            generation = self._generation
            records = await self.store.get_by_date(day)
            if generation != self._generation:
                logger.debug("Discarding load of %s: cache was cleared meanwhile", day)
                return
            self._install(day, records)
            logger.debug("Loaded %d video(s) for %s", len(records), day)

    async def get_handle(self, video_id: VideoId) -> ViewHandle:
        handle = self.handles.get(video_id)
        if handle is None:
            raise NotFoundError(f"No loaded video with id {video_id}")
        return handle

    async def find_video(self, video_id: VideoId) -> VideoRecord:
        """Return a clip by id, loading its day if needed.

        Raises:
            NotFoundError: if the store has no such clip.
        """
        record = self._find(video_id)
        if record is not None:
            return record
        stored = await self.store.get(video_id)
        if stored is None:
            raise NotFoundError(f"Video not found: {video_id}")
        await self.load_partition(stored.date)
        record = self._find(video_id)
        if record is None:
            raise NotFoundError(f"Video not found: {video_id}")
        return record

    async def all_videos(self) -> list[VideoRecord]:
        """Every stored clip, loaded or not."""
        return await self.store.get_all()

    async def random_moment(self, rng: random.Random | None = None) -> VideoRecord | None:
        """Pick a random clip across all days and load its day so it is playable."""
        records = await self.store.get_all()
        if not records:
            return None
        choice = (rng or random).choice(records)
        await self.load_partition(choice.date)
        return self._find(choice.id)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def add_video(self, new_video: NewVideo) -> VideoRecord:
        """Persist a new clip and make it visible in its day.

        Raises:
            StorageUnavailableError: if the write fails, or if the clip was
                stored but its day could not be loaded afterwards.
        """
        record = new_video.to_record(new_video_id(), self.default_mime_type)

        async with self._lock_for(record.date):
            generation = self._generation
            await self.store.put(record)
            if generation != self._generation:
                return record

            if record.date in self._loaded:
                self._insert(record)
            else:
                await self._hydrate(record, generation)

        logger.debug("Added video %s to %s", record.id, record.date)
        return record

    async def _hydrate(self, record: VideoRecord, generation: int) -> None:
        # The day was never loaded: load it now (the store already holds the
        # new clip) so earlier clips of that day are not hidden behind it.
        try:
            records = await self.store.get_by_date(record.date)
        except StorageUnavailableError as e:
            # The day stays unloaded; the next load_partition picks the clip up
            raise StorageUnavailableError(
                f"Stored video {record.id} but could not load {record.date}: {e.message}"
            ) from e
        if generation == self._generation:
            self._install(record.date, records)

    async def update_video(
        self, video_id: VideoId, patch: VideoPatch | Mapping[str, Any]
    ) -> VideoRecord:
        """Merge ``patch`` into a loaded clip and persist it.

        Raises:
            NotFoundError: if no loaded day holds ``video_id``.
            ValidationError: if the patch names unknown or immutable fields.
        """
        patch = self._patch(patch)
        day = self._index.get(video_id)
        if day is None:
            raise NotFoundError(f"No loaded video with id {video_id}")

        async with self._lock_for(day):
            current = self._find(video_id)
            if current is None:
                raise NotFoundError(f"No loaded video with id {video_id}")

            generation = self._generation
            updated = patch.apply(current)
            await self.store.put(updated)
            if generation != self._generation:
                return updated

            self._replace(updated, remint=patch.changes_payload or patch.mime_type is not None)

        logger.debug("Updated video %s", video_id)
        return updated

    async def delete_video(self, video_id: VideoId) -> None:
        """Delete a loaded clip from the store and from memory.

        Raises:
            NotFoundError: if no loaded day holds ``video_id``.
        """
        day = self._index.get(video_id)
        if day is None:
            raise NotFoundError(f"No loaded video with id {video_id}")

        async with self._lock_for(day):
            if self._find(video_id) is None:
                raise NotFoundError(f"No loaded video with id {video_id}")

            generation = self._generation
            await self.store.delete(video_id)
            if generation != self._generation:
                return

            self.handles.revoke(video_id)
            self._partitions[day] = [r for r in self._partitions[day] if r.id != video_id]
            del self._index[video_id]

        logger.debug("Deleted video %s from %s", video_id, day)

    async def clear_all(self) -> None:
        """Delete every stored clip and reset memory and handles."""
        self._reset()
        await self.store.clear()

    async def mark_watched(self, day: str | dt.date, watched: bool = True) -> None:
        await self.store.mark_watched(self._day(day), watched)

    async def is_watched(self, day: str | dt.date) -> bool:
        return await self.store.is_watched(self._day(day))

    def close(self) -> None:
        """Drop memory state and revoke all handles. The store stays open."""
        self._reset()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _reset(self) -> None:
        self._generation += 1
        revoked = self.handles.revoke_all()
        self._partitions.clear()
        self._loaded.clear()
        self._index.clear()
        # Locks still held or awaited by in-flight work stay; that work sees
        # the bumped generation and leaves memory alone.
        self._locks = {day: lock for day, lock in self._locks.items() if lock.locked()}
        logger.debug("Cache reset, %d handle(s) revoked", revoked)

    def _lock_for(self, day: str) -> asyncio.Lock:
        lock = self._locks.get(day)
        if lock is None:
            lock = self._locks[day] = asyncio.Lock()
        return lock

    @staticmethod
    def _day(value: str | dt.date) -> str:
        try:
            return normalize_day(value)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid date: {value!r}", field="date") from e

    @staticmethod
    def _patch(patch: VideoPatch | Mapping[str, Any]) -> VideoPatch:
        if isinstance(patch, VideoPatch):
            return patch
        try:
            return VideoPatch.model_validate(dict(patch))
        except pydantic.ValidationError as e:
            raise ValidationError(f"Invalid video patch: {e}") from e

    def _find(self, video_id: VideoId) -> VideoRecord | None:
        day = self._index.get(video_id)
        if day is None:
            return None
        return next((r for r in self._partitions.get(day, ()) if r.id == video_id), None)

    def _install(self, day: str, records: list[VideoRecord]) -> None:
        for record in records:
            self.handles.mint(record)
            self._index[record.id] = day
        self._partitions[day] = list(records)
        self._loaded.add(day)

    def _insert(self, record: VideoRecord) -> None:
        partition = self._partitions.setdefault(record.date, [])
        for i, existing in enumerate(partition):
            if existing.id == record.id:
                partition[i] = record
                break
        else:
            partition.append(record)
        self.handles.mint(record)
        self._index[record.id] = record.date

    def _replace(self, record: VideoRecord, *, remint: bool) -> None:
        partition = self._partitions[record.date]
        position = next(i for i, r in enumerate(partition) if r.id == record.id)
        partition[position] = record
        if remint:
            self.handles.mint(record)
