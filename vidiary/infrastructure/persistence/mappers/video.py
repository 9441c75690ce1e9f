from datetime import UTC, datetime
from typing import Any

from vidiary.domain.video.model.aggregate import VideoRecord
from vidiary.domain.video.model.value import VideoId, VideoOrigin
from vidiary.domain.video.payload import as_durable_bytes


def _aware(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def row_to_video(row: dict[str, Any]) -> VideoRecord:
    """Convert database row to VideoRecord aggregate."""
    return VideoRecord(
        id=VideoId(row["id"]),
        date=row["date"],
        timestamp=_aware(row["timestamp"]),
        origin=VideoOrigin(row["origin"]),
        label=row["label"],
        payload=row["payload"],
        mime_type=row["mime_type"],
        filename=row.get("filename"),
    )


def video_to_dict(record: VideoRecord) -> dict[str, Any]:
    """Convert VideoRecord aggregate to database dict (without ``seq``).

    Raises:
        SerializationError: if the payload is not bytes-like.
    """
    return {
        "id": str(record.id),
        "date": record.date,
        "timestamp": record.timestamp,
        "origin": VideoOrigin(record.origin).value,
        "label": record.label,
        "mime_type": record.mime_type,
        "filename": record.filename,
        "payload": as_durable_bytes(record.payload),
    }
