"""Rotation policy definitions, enums, and PolicySet validation."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Iterable, Iterator


class ConfigError(ValueError):
    """Configuration could not be turned into a PolicySet."""


class DuplicatePathError(ConfigError):
    def __init__(self, path: str) -> None:
        super().__init__(f"Duplicate path in config: '{path}'")
        self.path = path


class InvalidFieldError(ConfigError):
    def __init__(self, index: int, field_name: str, message: str) -> None:
        super().__init__(f"files[{index}].{field_name}: {message}")
        self.index = index
        self.field_name = field_name


class Interval(str, Enum):
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @property
    def duration(self) -> timedelta:
        return INTERVAL_DURATIONS[self]


# Elapsed durations, not calendar boundaries. A month is a flat 30 days.
INTERVAL_DURATIONS: dict[Interval, timedelta] = {
    Interval.HOURLY: timedelta(hours=1),
    Interval.DAILY: timedelta(days=1),
    Interval.WEEKLY: timedelta(days=7),
    Interval.MONTHLY: timedelta(days=30),
}


class Strategy(str, Enum):
    CREATE = "create"
    COPYTRUNCATE = "copytruncate"
    NOCOPYTRUNCATE = "nocopytruncate"

    @property
    def truncates(self) -> bool:
        # CREATE is accepted but executes exactly like COPYTRUNCATE.
        # Only NOCOPYTRUNCATE changes anything: it skips the truncate step.
        return self is not Strategy.NOCOPYTRUNCATE


REQUIRED_FIELDS = ("path", "interval", "max_files", "compress", "size", "strategy")


def path_key(path: str) -> str:
    """Normalized identity of a path: "x.log", "./x.log" and its absolute form are one file."""
    return os.path.normcase(os.path.normpath(os.path.abspath(path)))


@dataclass(frozen=True)
class RotationPolicy:
    path: str
    interval: Interval
    max_files: int
    compress: bool
    size: int
    strategy: Strategy = Strategy.COPYTRUNCATE


class PolicySet:
    """Ordered, validated collection of RotationPolicy values with unique paths."""

    def __init__(self, policies: Iterable[RotationPolicy] = ()) -> None:
        self._policies: list[RotationPolicy] = []
        self._by_path: dict[str, RotationPolicy] = {}
        for policy in policies:
            key = path_key(policy.path)
            if key in self._by_path:
                raise DuplicatePathError(policy.path)
            self._policies.append(policy)
            self._by_path[key] = policy

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> PolicySet:
        """Build a PolicySet from raw config records, validating every field."""
        return cls(parse_policy(record, i) for i, record in enumerate(records))

    def __iter__(self) -> Iterator[RotationPolicy]:
        return iter(self._policies)

    def __len__(self) -> int:
        return len(self._policies)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and path_key(path) in self._by_path

    def get(self, path: str) -> RotationPolicy | None:
        return self._by_path.get(path_key(path))

    @property
    def paths(self) -> list[str]:
        return [p.path for p in self._policies]


def _positive_int(record: dict, index: int, name: str) -> int:
    value = record[name]
    # bool is an int subclass; "true" is not a byte count
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidFieldError(index, name, f"expected integer, got {value!r}")
    if value <= 0:
        raise InvalidFieldError(index, name, f"must be positive, got {value}")
    return value


def parse_policy(record: dict, index: int = 0) -> RotationPolicy:
    """Validate a single config record and convert it to a RotationPolicy."""
    if not isinstance(record, dict):
        raise InvalidFieldError(index, "*", f"expected mapping, got {type(record).__name__}")
    for name in REQUIRED_FIELDS:
        if name not in record:
            raise InvalidFieldError(index, name, "missing required field")

    path = record["path"]
    if not isinstance(path, str) or not path.strip():
        raise InvalidFieldError(index, "path", "must be a non-empty string")

    try:
        interval = Interval(record["interval"])
    except ValueError:
        valid = ", ".join(i.value for i in Interval)
        raise InvalidFieldError(
            index, "interval", f"unknown interval '{record['interval']}' (expected one of: {valid})"
        ) from None

    try:
        strategy = Strategy(record["strategy"])
    except ValueError:
        valid = ", ".join(s.value for s in Strategy)
        raise InvalidFieldError(
            index, "strategy", f"unknown strategy '{record['strategy']}' (expected one of: {valid})"
        ) from None

    compress = record["compress"]
    if not isinstance(compress, bool):
        raise InvalidFieldError(index, "compress", f"expected boolean, got {compress!r}")

    return RotationPolicy(
        path=path,
        interval=interval,
        max_files=_positive_int(record, index, "max_files"),
        compress=compress,
        size=_positive_int(record, index, "size"),
        strategy=strategy,
    )
