"""Tests for the clip models: VideoRecord, NewVideo and VideoPatch."""

import datetime as dt

import pydantic
import pytest

from vidiary.domain.shared.error import SerializationError
from vidiary.domain.video.model.aggregate import NewVideo, VideoPatch
from vidiary.domain.video.model.value import VideoId, VideoOrigin, new_video_id, normalize_day


class TestNormalizeDay:
    def test_accepts_iso_string(self) -> None:
        assert normalize_day("2024-03-07") == "2024-03-07"

    def test_accepts_date(self) -> None:
        assert normalize_day(dt.date(2024, 3, 7)) == "2024-03-07"

    def test_rejects_garbage(self) -> None:
        with pytest.raises(ValueError):
            normalize_day("yesterday")


class TestNewVideo:
    def test_to_record_fills_defaults(self) -> None:
        new_video = NewVideo(
            date=dt.date(2024, 1, 1),
            origin=VideoOrigin.CAPTURED,
            payload=bytearray(b"abc"),
        )

        record = new_video.to_record(VideoId("v1"), "video/webm")

        assert record.id == "v1"
        assert record.date == "2024-01-01"
        assert record.payload == b"abc"
        assert isinstance(record.payload, bytes)
        assert record.mime_type == "video/webm"
        assert record.timestamp.tzinfo is not None
        assert record.size == 3

    def test_to_record_keeps_explicit_mime_type(self) -> None:
        new_video = NewVideo(
            date="2024-01-01",
            origin=VideoOrigin.IMPORTED,
            payload=b"x",
            mime_type="video/mp4",
            filename="beach.mp4",
        )

        record = new_video.to_record(new_video_id(), "video/webm")

        assert record.mime_type == "video/mp4"
        assert record.filename == "beach.mp4"
        assert record.origin is VideoOrigin.IMPORTED

    def test_text_payload_is_refused(self) -> None:
        with pytest.raises(SerializationError):
            NewVideo(date="2024-01-01", origin=VideoOrigin.CAPTURED, payload="not bytes")

    def test_invalid_date_is_refused(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            NewVideo(date="2024-13-40", origin=VideoOrigin.CAPTURED, payload=b"x")

    def test_repr_hides_payload(self) -> None:
        new_video = NewVideo(date="2024-01-01", origin=VideoOrigin.CAPTURED, payload=b"SECRET")
        assert "SECRET" not in repr(new_video)


class TestVideoPatch:
    def test_apply_changes_only_given_fields(self) -> None:
        record = NewVideo(
            date="2024-01-01", origin=VideoOrigin.CAPTURED, label="old", payload=b"p"
        ).to_record(VideoId("v1"), "video/webm")

        updated = VideoPatch(label="new").apply(record)

        assert updated.label == "new"
        assert updated.payload == b"p"
        assert updated.id == record.id
        assert updated.timestamp == record.timestamp
        assert record.label == "old"

    def test_immutable_fields_are_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            VideoPatch.model_validate({"date": "2024-02-02"})

    def test_changes_payload(self) -> None:
        assert VideoPatch(payload=b"new").changes_payload
        assert not VideoPatch(label="x").changes_payload
