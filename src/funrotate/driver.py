"""Rotation pass: evaluate every policy, rotate the ones that are due, report each."""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Iterable, Iterator

from funrotate.policy import PolicySet
from funrotate.rotation import RotationResult, RotationStatus, rotate
from funrotate.trigger import rotation_reason, stat_target

logger = logging.getLogger(__name__)


def run_once(policy_set: PolicySet, now: datetime | None = None) -> Iterator[RotationResult]:
    """Yield one RotationResult per policy, in config order.

    A failure on one file never stops the pass.
    """
    now = now or datetime.now(timezone.utc)
    logger.debug("starting rotation pass over %d file(s) at %s", len(policy_set), now)

    for policy in policy_set:
        try:
            file_stat = stat_target(policy.path)
        except OSError as exc:
            logger.warning("cannot stat %s: %s", policy.path, exc)
            yield RotationResult(
                path=policy.path,
                status=RotationStatus.FAILED,
                step="stat",
                error=f"stat failed for {policy.path}: {exc}",
            )
            continue

        if file_stat is None:
            logger.debug("%s does not exist, nothing to rotate", policy.path)
            yield RotationResult(path=policy.path, status=RotationStatus.SKIPPED, reason="missing")
            continue

        reason = rotation_reason(policy, file_stat, now)
        if reason is None:
            yield RotationResult(path=policy.path, status=RotationStatus.SKIPPED, reason="not due")
            continue

        yield rotate(policy, reason=reason)

    logger.debug("rotation pass done")


def summarize(results: Iterable[RotationResult]) -> dict[str, int]:
    """Count results by status."""
    counts = Counter(r.status.value for r in results)
    return {status.value: counts.get(status.value, 0) for status in RotationStatus}
