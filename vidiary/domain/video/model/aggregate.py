"""VideoRecord aggregate and the inputs that create and change it."""

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vidiary.domain.shared.model.value import ValueObject
from vidiary.domain.video.model.value import VideoId, VideoOrigin, normalize_day
from vidiary.domain.video.payload import as_durable_bytes


class VideoRecord(BaseModel):
    """One stored diary clip.

    ``id``, ``date``, ``origin`` and ``timestamp`` never change after creation;
    ``label`` and the payload (with its ``mime_type``) are replaced by updates.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: VideoId
    date: str
    timestamp: dt.datetime
    origin: VideoOrigin
    label: str = ""
    payload: bytes = Field(repr=False)
    mime_type: str = "video/webm"
    filename: str | None = None

    @field_validator("date", mode="before")
    @classmethod
    def _normalize_date(cls, value: str | dt.date) -> str:
        return normalize_day(value)

    @field_validator("payload", mode="before")
    @classmethod
    def _durable_payload(cls, value: object) -> bytes:
        return as_durable_bytes(value)

    @property
    def size(self) -> int:
        return len(self.payload)


class NewVideo(ValueObject):
    """What a capture or import flow hands to the core.

    The payload must already be materialized bytes; see
    :func:`vidiary.domain.video.payload.materialize_payload`.
    """

    date: str
    origin: VideoOrigin
    label: str = ""
    payload: bytes = Field(repr=False)
    mime_type: str | None = None
    filename: str | None = None

    @field_validator("date", mode="before")
    @classmethod
    def _normalize_date(cls, value: str | dt.date) -> str:
        return normalize_day(value)

    @field_validator("payload", mode="before")
    @classmethod
    def _durable_payload(cls, value: object) -> bytes:
        return as_durable_bytes(value)

    def to_record(self, video_id: VideoId, default_mime_type: str) -> VideoRecord:
        return VideoRecord(
            id=video_id,
            date=self.date,
            timestamp=dt.datetime.now(dt.UTC),
            origin=self.origin,
            label=self.label,
            payload=self.payload,
            mime_type=self.mime_type or default_mime_type,
            filename=self.filename,
        )


class VideoPatch(ValueObject):
    """Partial update of a clip. Unset fields are left untouched.

    Identity, day, origin and creation time cannot be patched.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    label: str | None = None
    payload: bytes | None = Field(default=None, repr=False)
    mime_type: str | None = None

    @field_validator("payload", mode="before")
    @classmethod
    def _durable_payload(cls, value: object) -> bytes | None:
        return None if value is None else as_durable_bytes(value)

    @property
    def changes_payload(self) -> bool:
        return self.payload is not None

    def apply(self, record: VideoRecord) -> VideoRecord:
        """Return a copy of ``record`` with this patch merged in."""
        changes = self.model_dump(exclude_none=True)
        return record.model_copy(update=changes)
