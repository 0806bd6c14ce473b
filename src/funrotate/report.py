"""Markdown run report generator."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from funrotate.driver import summarize
from funrotate.rotation import RotationResult


def generate_report(
    results: list[RotationResult],
    output_path: Path | None = None,
) -> str:
    """Generate a markdown summary of one rotation pass."""
    now = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    counts = summarize(results)

    lines = [
        "# funrotate Run Report",
        "",
        f"**Generated:** {now}",
        "",
        f"**{counts['rotated']} rotated** | {counts['skipped']} skipped | {counts['failed']} failed"
        f" / {len(results)} total",
        "",
        "---",
        "",
        "## Files",
        "",
        "| Status | Path | Reason | Archive | Pruned |",
        "|--------|------|--------|---------|--------|",
    ]

    for r in results:
        lines.append(
            f"| {r.status.value.upper()} | {r.path} | {r.reason or '-'} | "
            f"{r.archive or '-'} | {len(r.pruned)} |"
        )
    lines.append("")

    failures = [r for r in results if not r.ok]
    if failures:
        lines.extend([
            "---",
            "",
            "## Failures",
            "",
            "| Path | Step | Error |",
            "|------|------|-------|",
        ])
        for r in failures:
            lines.append(f"| {r.path} | {r.step} | {r.error} |")
        lines.append("")

    report_text = "\n".join(lines)

    if output_path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(report_text, encoding="utf-8")

    return report_text
