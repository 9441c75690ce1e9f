"""Clip commands: add, list, rename, delete, export, random."""

import mimetypes
from datetime import date as Date
from pathlib import Path

import pydantic

from vidiary.cli.console import get_console
from vidiary.cli.runner import run_in_diary
from vidiary.domain.shared.error import ValidationError
from vidiary.domain.video.model.aggregate import NewVideo, VideoRecord
from vidiary.domain.video.model.value import VideoId, VideoOrigin
from vidiary.domain.video.payload import materialize_payload
from vidiary.domain.video.service.cache import PartitionCache


def add(file: Path, /, *, date: str | None = None, label: str | None = None) -> None:
    """Import a video file into the diary.

    Args:
        file: Video file to import.
        date: Day to file it under (YYYY-MM-DD, default today).
        label: Display name (default: the file name).
    """
    console = get_console()

    async def _add(diary: PartitionCache) -> VideoRecord:
        payload = materialize_payload(file)
        try:
            new_video = NewVideo(
                date=date or Date.today().isoformat(),
                origin=VideoOrigin.IMPORTED,
                label=label or file.stem,
                payload=payload,
                mime_type=mimetypes.guess_type(file.name)[0],
                filename=file.name,
            )
        except pydantic.ValidationError as e:
            raise ValidationError(f"Invalid video: {e}") from e
        return await diary.add_video(new_video)

    record = run_in_diary(_add)
    console.success(f"Added {record.label!r} to {record.date} ({record.id})")


def list_videos(date: str | None = None, /) -> None:
    """List the clips of a day, or every clip.

    Args:
        date: Day to list (YYYY-MM-DD). Omit to list all clips.
    """
    console = get_console()

    async def _list(diary: PartitionCache) -> tuple[list[VideoRecord], bool]:
        if date is None:
            return await diary.all_videos(), False
        return await diary.load_partition(date), await diary.is_watched(date)

    records, watched = run_in_diary(_list)
    title = f"Videos for {date}" if date else "All videos"
    if watched:
        title += " (movie watched)"
    console.videos(records, title=title)


def rename(video_id: str, label: str, /) -> None:
    """Change a clip's label.

    Args:
        video_id: Clip ID (see `vidiary list`).
        label: New display name.
    """

    async def _rename(diary: PartitionCache) -> VideoRecord:
        record = await diary.find_video(VideoId(video_id))
        return await diary.update_video(record.id, {"label": label})

    record = run_in_diary(_rename)
    get_console().success(f"Renamed {record.id} to {record.label!r}")


def delete(video_id: str, /) -> None:
    """Delete a clip permanently.

    Args:
        video_id: Clip ID (see `vidiary list`).
    """

    async def _delete(diary: PartitionCache) -> None:
        record = await diary.find_video(VideoId(video_id))
        await diary.delete_video(record.id)

    run_in_diary(_delete)
    get_console().success(f"Deleted {video_id}")


def export(video_id: str, out: Path, /) -> None:
    """Write a clip's video data to a file.

    Args:
        video_id: Clip ID (see `vidiary list`).
        out: Destination file.
    """

    async def _export(diary: PartitionCache) -> int:
        record = await diary.find_video(VideoId(video_id))
        handle = await diary.get_handle(record.id)
        return out.write_bytes(handle.read())

    written = run_in_diary(_export)
    get_console().success(f"Wrote {written} bytes to {out}")


def random_moment() -> None:
    """Show a random moment from the diary."""
    console = get_console()

    async def _random(diary: PartitionCache) -> tuple[VideoRecord, str] | None:
        record = await diary.random_moment()
        if record is None:
            return None
        handle = await diary.get_handle(record.id)
        return record, handle.url

    picked = run_in_diary(_random)
    if picked is None:
        console.warning("The diary is empty")
        return
    record, url = picked
    console.video_detail(record, url=url)
