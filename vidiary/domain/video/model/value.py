"""Video domain value objects."""

from datetime import date as _date
from datetime import datetime as _datetime
from enum import StrEnum
from typing import NewType
from uuid import uuid4

VideoId = NewType("VideoId", str)


def new_video_id() -> VideoId:
    """Generate a fresh, never-reused clip identifier."""
    return VideoId(uuid4().hex)


class VideoOrigin(StrEnum):
    CAPTURED = "captured"
    IMPORTED = "imported"


def normalize_day(value: str | _date) -> str:
    """Return the ISO ``YYYY-MM-DD`` partition key for a calendar day.

    Raises:
        ValueError: if the value is not a valid calendar day.
    """
    if isinstance(value, _datetime):
        return value.date().isoformat()
    if isinstance(value, _date):
        return value.isoformat()
    if not isinstance(value, str):
        raise ValueError(f"Expected an ISO day, got {type(value).__name__}")
    return _date.fromisoformat(value.strip()).isoformat()
