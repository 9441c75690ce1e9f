"""Watched command - the per-day "movie watched" flag."""

from vidiary.cli.console import get_console
from vidiary.cli.runner import run_in_diary
from vidiary.domain.video.service.cache import PartitionCache


def watched(date: str, /, *, mark: bool | None = None) -> None:
    """Show or set whether a day's movie has been watched.

    Args:
        date: Day (YYYY-MM-DD).
        mark: --mark to flag the day as watched, --no-mark to clear it.
    """
    console = get_console()

    async def _watched(diary: PartitionCache) -> bool:
        if mark is not None:
            await diary.mark_watched(date, mark)
        return await diary.is_watched(date)

    state = run_in_diary(_watched)
    if mark is not None:
        console.success(f"{date} marked as {'watched' if state else 'not watched'}")
    else:
        console.print(f"{date}: {'watched' if state else 'not watched'}")
