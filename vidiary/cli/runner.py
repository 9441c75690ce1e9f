"""Runs one CLI action against an opened diary."""

import asyncio
import sys
from collections.abc import Awaitable, Callable
from typing import TypeVar

from vidiary.application.diary import open_diary
from vidiary.cli.console import get_console
from vidiary.config import Config, configure_logging
from vidiary.domain.shared.error import (
    DiaryError,
    NotFoundError,
    StorageUnavailableError,
)
from vidiary.domain.video.service.cache import PartitionCache

T = TypeVar("T")


def run_in_diary(action: Callable[[PartitionCache], Awaitable[T]]) -> T:
    """Open the diary, run ``action``, close the diary.

    Errors are printed to stderr and end the process with status 1.
    """
    config = Config()
    configure_logging(config.logging)
    console = get_console()

    async def _main() -> T:
        async with open_diary(config) as diary:
            return await action(diary)

    try:
        return asyncio.run(_main())
    except StorageUnavailableError as e:
        console.error(
            e.message,
            hint="Check VIDIARY_DATA_DIR / VIDIARY_DATABASE__URL and file permissions",
        )
        sys.exit(1)
    except NotFoundError as e:
        console.error(e.message, hint="List clips with: vidiary list")
        sys.exit(1)
    except DiaryError as e:
        console.error(e.message)
        sys.exit(1)
