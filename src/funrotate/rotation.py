"""Copytruncate rotation: archive creation, byte-duplicating "compression", retention."""

from __future__ import annotations

import logging
import re
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from funrotate.policy import RotationPolicy

logger = logging.getLogger(__name__)

ZIP_SUFFIX = ".zip"


class RotationStatus(str, Enum):
    ROTATED = "rotated"
    SKIPPED = "skipped"
    FAILED = "failed"


class RotationError(OSError):
    """A filesystem step of a rotation failed."""

    def __init__(self, path: str, step: str, cause: OSError) -> None:
        super().__init__(f"{step} failed for {path}: {cause}")
        self.path = path
        self.step = step
        self.cause = cause


class RetentionPruneError(RotationError):
    """Deleting or renumbering an old archive failed. The rotation itself stands."""

    def __init__(self, path: str, cause: OSError, pruned: list[Path] | None = None) -> None:
        super().__init__(path, "prune", cause)
        self.pruned = pruned or []


@dataclass
class RotationResult:
    path: str
    status: RotationStatus
    reason: str = ""
    archive: str | None = None
    pruned: list[str] = field(default_factory=list)
    step: str | None = None
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status is not RotationStatus.FAILED

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "status": self.status.value,
            "reason": self.reason,
            "archive": self.archive,
            "pruned": list(self.pruned),
            "step": self.step,
            "error": self.error,
        }


@dataclass
class ArchiveFile:
    path: Path
    generation: int | None
    mtime_ns: int

    @property
    def compressed(self) -> bool:
        return self.generation is None


def duplicate_bytes(data: bytes) -> bytes:
    """Emit every byte twice, keeping line boundaries.

    b"ab\\ncd\\n" -> b"aabb\\nccdd\\n". Not reversible; there is no decompression.
    """
    return b"\n".join(
        bytes(b for byte in line for b in (byte, byte)) for line in data.split(b"\n")
    )


def list_archives(live: Path) -> list[ArchiveFile]:
    """Return existing archives of ``live``, oldest first."""
    pattern = re.compile(re.escape(live.name) + r"\.(\d+|zip)$")
    archives = []
    for candidate in live.parent.iterdir():
        m = pattern.match(candidate.name)
        if not m or not candidate.is_file():
            continue
        suffix = m.group(1)
        generation = None if suffix == "zip" else int(suffix)
        archives.append(ArchiveFile(candidate, generation, candidate.stat().st_mtime_ns))
    # Oldest by mtime; numbered archives tie-break by generation, .zip counts as newest.
    archives.sort(
        key=lambda a: (a.mtime_ns, sys.maxsize if a.generation is None else a.generation)
    )
    return archives


def next_generation(live: Path) -> int:
    generations = [a.generation for a in list_archives(live) if a.generation is not None]
    return max(generations, default=0) + 1


def truncate_in_place(live: Path) -> None:
    """Truncate to zero bytes without unlinking, so a writer's descriptor stays valid."""
    with open(live, "r+b") as fh:
        fh.truncate(0)


def prune_archives(
    live: Path, max_files: int, newest: Path | None = None
) -> tuple[Path | None, list[Path]]:
    """Delete the oldest archives beyond ``max_files`` and renumber the rest 1..n.

    Returns the (possibly renamed) path of ``newest`` and the deleted paths.
    """
    pruned: list[Path] = []
    try:
        archives = list_archives(live)
    except OSError as exc:
        raise RetentionPruneError(str(live), exc) from exc

    excess = max(len(archives) - max_files, 0)
    for archive in archives[:excess]:
        logger.debug("removing old archive %s", archive.path)
        try:
            archive.path.unlink()
        except OSError as exc:
            raise RetentionPruneError(str(live), exc, pruned) from exc
        pruned.append(archive.path)

    # Renumber in generation order: each target is <= its source, so no rename clobbers.
    numbered = sorted(
        (a for a in archives[excess:] if a.generation is not None),
        key=lambda a: a.generation,
    )
    for generation, archive in enumerate(numbered, start=1):
        target = live.with_name(f"{live.name}.{generation}")
        if archive.path == target:
            continue
        logger.debug("renumbering %s to %s", archive.path, target)
        try:
            archive.path.rename(target)
        except OSError as exc:
            raise RetentionPruneError(str(live), exc, pruned) from exc
        if newest == archive.path:
            newest = target

    return newest, pruned


def _write_archive(policy: RotationPolicy, live: Path, contents: bytes) -> Path:
    if policy.compress:
        # Not a ZIP container: the suffix is kept for the duplicated bytes.
        target = live.with_name(live.name + ZIP_SUFFIX)
        logger.debug("compressing %s to %s", live, target)
        try:
            target.write_bytes(duplicate_bytes(contents))
        except OSError as exc:
            raise RotationError(policy.path, "compress", exc) from exc
        return target

    try:
        target = live.with_name(f"{live.name}.{next_generation(live)}")
        logger.debug("copying %s to %s", live, target)
        target.write_bytes(contents)
    except OSError as exc:
        raise RotationError(policy.path, "copy", exc) from exc
    return target


def rotate(policy: RotationPolicy, reason: str = "") -> RotationResult:
    """Copy the live file to an archive, truncate it in place, then prune old archives."""
    live = Path(policy.path)
    logger.info("rotating %s", live)

    try:
        try:
            contents = live.read_bytes()
        except OSError as exc:
            raise RotationError(policy.path, "copy", exc) from exc

        archive = _write_archive(policy, live, contents)

        # Always copytruncate: "create" is an alias, only "nocopytruncate" skips this.
        if policy.strategy.truncates:
            try:
                truncate_in_place(live)
            except OSError as exc:
                raise RotationError(policy.path, "truncate", exc) from exc
        else:
            logger.debug("strategy %s: leaving %s untouched", policy.strategy.value, live)
    except RotationError as exc:
        logger.warning("%s", exc)
        return RotationResult(
            path=policy.path,
            status=RotationStatus.FAILED,
            reason=reason,
            step=exc.step,
            error=str(exc),
        )

    try:
        archive, pruned = prune_archives(live, policy.max_files, archive)
    except RetentionPruneError as exc:
        logger.warning("%s", exc)
        return RotationResult(
            path=policy.path,
            status=RotationStatus.FAILED,
            reason=reason,
            archive=str(archive),
            pruned=[str(p) for p in exc.pruned],
            step=exc.step,
            error=str(exc),
        )

    return RotationResult(
        path=policy.path,
        status=RotationStatus.ROTATED,
        reason=reason,
        archive=str(archive),
        pruned=[str(p) for p in pruned],
    )
