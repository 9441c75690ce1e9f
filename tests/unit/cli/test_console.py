"""Tests for console formatting helpers."""

from datetime import UTC, datetime, timedelta

import pytest

from vidiary.cli.console import human_size, relative_time


class TestRelativeTime:
    @pytest.mark.parametrize(
        ("delta", "expected"),
        [
            (timedelta(seconds=5), "just now"),
            (timedelta(minutes=1), "1 minute ago"),
            (timedelta(hours=3), "3 hours ago"),
            (timedelta(days=2), "2 days ago"),
        ],
    )
    def test_recent(self, delta: timedelta, expected: str) -> None:
        assert relative_time(datetime.now(UTC) - delta) == expected

    def test_naive_timestamp_is_utc(self) -> None:
        naive = datetime.now(UTC).replace(tzinfo=None) - timedelta(hours=2)
        assert relative_time(naive) == "2 hours ago"

    def test_old_dates_are_absolute(self) -> None:
        assert relative_time(datetime(2020, 5, 17, 8, 30, tzinfo=UTC)) == "2020-05-17 08:30"


class TestHumanSize:
    @pytest.mark.parametrize(
        ("size", "expected"),
        [(512, "512 B"), (2048, "2.0 KB"), (5 * 1024 * 1024, "5.0 MB"), (3 * 1024**3, "3.0 GB")],
    )
    def test_units(self, size: int, expected: str) -> None:
        assert human_size(size) == expected
