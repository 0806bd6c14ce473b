"""Decide whether a log file is due for rotation."""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone

from funrotate.policy import RotationPolicy

logger = logging.getLogger(__name__)


def stat_target(path: str) -> os.stat_result | None:
    """Stat the live file, returning None if it does not exist."""
    try:
        return os.stat(path)
    except FileNotFoundError:
        return None


def file_age_seconds(file_stat: os.stat_result, now: datetime | None = None) -> float:
    now = now or datetime.now(timezone.utc)
    return now.timestamp() - file_stat.st_mtime


def rotation_reason(
    policy: RotationPolicy,
    file_stat: os.stat_result | None,
    now: datetime | None = None,
) -> str | None:
    """Return "size", "interval", or None when no rotation is due.

    The last rotation time is the file's mtime; there is no separate state store.
    """
    if file_stat is None:
        return None
    if file_stat.st_size >= policy.size:
        return "size"
    age = file_age_seconds(file_stat, now)
    if age >= policy.interval.duration.total_seconds():
        return "interval"
    logger.debug(
        "%s not due (size=%d/%d, age=%.0fs)", policy.path, file_stat.st_size, policy.size, age
    )
    return None


def should_rotate(
    policy: RotationPolicy,
    file_stat: os.stat_result | None,
    now: datetime | None = None,
) -> bool:
    return rotation_reason(policy, file_stat, now) is not None
