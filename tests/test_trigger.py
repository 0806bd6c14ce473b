"""Rotation trigger tests."""

import os
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from funrotate.policy import Interval, RotationPolicy, Strategy
from funrotate.trigger import rotation_reason, should_rotate, stat_target


def _policy(path: Path, size: int = 1024, interval: Interval = Interval.DAILY) -> RotationPolicy:
    return RotationPolicy(
        path=str(path),
        interval=interval,
        max_files=3,
        compress=False,
        size=size,
        strategy=Strategy.COPYTRUNCATE,
    )


def _age(path: Path, delta: timedelta) -> None:
    ts = (datetime.now(timezone.utc) - delta).timestamp()
    os.utime(path, (ts, ts))


class TestStatTarget:
    def test_missing_returns_none(self, tmp_path: Path) -> None:
        assert stat_target(str(tmp_path / "nope.log")) is None

    def test_existing(self, tmp_path: Path) -> None:
        log = tmp_path / "a.log"
        log.write_bytes(b"hello")
        assert stat_target(str(log)).st_size == 5


class TestShouldRotate:
    def test_missing_file_not_due(self, tmp_path: Path) -> None:
        assert should_rotate(_policy(tmp_path / "nope.log"), None) is False

    def test_size_trigger_fresh_file(self, tmp_path: Path) -> None:
        log = tmp_path / "a.log"
        log.write_bytes(b"x" * 2000)
        assert rotation_reason(_policy(log), os.stat(log)) == "size"

    def test_size_equal_to_threshold(self, tmp_path: Path) -> None:
        log = tmp_path / "a.log"
        log.write_bytes(b"x" * 1024)
        assert should_rotate(_policy(log, size=1024), os.stat(log)) is True

    def test_small_fresh_file_not_due(self, tmp_path: Path) -> None:
        log = tmp_path / "a.log"
        log.write_bytes(b"small\n")
        assert should_rotate(_policy(log), os.stat(log)) is False

    def test_interval_trigger_small_file(self, tmp_path: Path) -> None:
        log = tmp_path / "a.log"
        log.write_bytes(b"small\n")
        _age(log, timedelta(days=2))
        assert rotation_reason(_policy(log), os.stat(log)) == "interval"

    @pytest.mark.parametrize(
        "interval,age,expected",
        [
            (Interval.HOURLY, timedelta(minutes=61), True),
            (Interval.HOURLY, timedelta(minutes=30), False),
            (Interval.DAILY, timedelta(hours=23), False),
            (Interval.WEEKLY, timedelta(days=31), True),
            (Interval.WEEKLY, timedelta(days=1), False),
            (Interval.MONTHLY, timedelta(days=29), False),
            (Interval.MONTHLY, timedelta(days=30, minutes=1), True),
        ],
    )
    def test_interval_durations(
        self, tmp_path: Path, interval: Interval, age: timedelta, expected: bool
    ) -> None:
        log = tmp_path / "a.log"
        log.write_bytes(b"x")
        _age(log, age)
        assert should_rotate(_policy(log, interval=interval), os.stat(log)) is expected

    def test_explicit_now(self, tmp_path: Path) -> None:
        log = tmp_path / "a.log"
        log.write_bytes(b"x")
        later = datetime.now(timezone.utc) + timedelta(days=8)
        assert should_rotate(_policy(log, interval=Interval.WEEKLY), os.stat(log), now=later) is True
