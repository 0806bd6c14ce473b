"""PolicySet construction and validation tests."""

import os

import pytest

from funrotate.policy import (
    ConfigError,
    DuplicatePathError,
    Interval,
    InvalidFieldError,
    PolicySet,
    RotationPolicy,
    Strategy,
    parse_policy,
    path_key,
)


def _record(**overrides) -> dict:
    record = {
        "path": "a.log",
        "interval": "daily",
        "max_files": 3,
        "compress": True,
        "size": 1024,
        "strategy": "create",
    }
    record.update(overrides)
    return record


class TestParsePolicy:
    def test_valid_record(self) -> None:
        policy = parse_policy(_record())
        assert policy == RotationPolicy(
            path="a.log",
            interval=Interval.DAILY,
            max_files=3,
            compress=True,
            size=1024,
            strategy=Strategy.CREATE,
        )

    @pytest.mark.parametrize("field", ["size", "max_files"])
    def test_non_positive_rejected(self, field: str) -> None:
        with pytest.raises(InvalidFieldError) as exc_info:
            parse_policy(_record(**{field: 0}))
        assert exc_info.value.field_name == field

    def test_bool_is_not_a_size(self) -> None:
        with pytest.raises(InvalidFieldError):
            parse_policy(_record(size=True))

    def test_unknown_interval(self) -> None:
        with pytest.raises(InvalidFieldError, match="interval"):
            parse_policy(_record(interval="fortnightly"))

    def test_unknown_strategy(self) -> None:
        with pytest.raises(InvalidFieldError, match="strategy"):
            parse_policy(_record(strategy="copy"))

    def test_missing_field(self) -> None:
        record = _record()
        del record["compress"]
        with pytest.raises(InvalidFieldError, match="missing"):
            parse_policy(record)

    def test_compress_must_be_bool(self) -> None:
        with pytest.raises(InvalidFieldError, match="compress"):
            parse_policy(_record(compress="yes"))

    def test_invalid_field_is_config_error(self) -> None:
        with pytest.raises(ConfigError):
            parse_policy(_record(size=-1))


class TestPolicySet:
    def test_preserves_order(self) -> None:
        ps = PolicySet.from_records([_record(path="z.log"), _record(path="a.log"), _record(path="m.log")])
        assert ps.paths == ["z.log", "a.log", "m.log"]
        assert len(ps) == 3

    def test_duplicate_path(self) -> None:
        with pytest.raises(DuplicatePathError) as exc_info:
            PolicySet.from_records([_record(path="x.log"), _record(path="x.log")])
        assert exc_info.value.path == "x.log"

    def test_lookup(self) -> None:
        ps = PolicySet.from_records([_record(path="x.log", size=50)])
        assert "x.log" in ps
        assert ps.get("x.log").size == 50
        assert ps.get("y.log") is None

    def test_empty(self) -> None:
        assert list(PolicySet.from_records([])) == []


class TestStrategy:
    def test_three_variants(self) -> None:
        assert {s.value for s in Strategy} == {"create", "copytruncate", "nocopytruncate"}

    def test_only_nocopytruncate_skips_truncate(self) -> None:
        assert Strategy.CREATE.truncates is True
        assert Strategy.COPYTRUNCATE.truncates is True
        assert Strategy.NOCOPYTRUNCATE.truncates is False


class TestInterval:
    def test_durations(self) -> None:
        assert Interval.HOURLY.duration.total_seconds() == 3600
        assert Interval.DAILY.duration.days == 1
        assert Interval.WEEKLY.duration.days == 7
        assert Interval.MONTHLY.duration.days == 30


class TestPathIdentity:
    def test_dot_slash_is_duplicate(self) -> None:
        with pytest.raises(DuplicatePathError):
            PolicySet.from_records([_record(path="x.log"), _record(path="./x.log")])

    def test_absolute_spelling_is_duplicate(self) -> None:
        with pytest.raises(DuplicatePathError):
            PolicySet.from_records([_record(path="x.log"), _record(path=os.path.abspath("x.log"))])

    def test_reports_original_spelling(self) -> None:
        ps = PolicySet.from_records([_record(path="./logs/../x.log")])
        assert ps.paths == ["./logs/../x.log"]
        assert "x.log" in ps
        assert path_key("./x.log") == path_key("x.log")
