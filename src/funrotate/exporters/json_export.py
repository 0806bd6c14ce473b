"""JSON export for rotation results."""

from __future__ import annotations

import json
from datetime import datetime, timezone

from funrotate import __version__
from funrotate.driver import summarize
from funrotate.rotation import RotationResult


def results_to_json(results: list[RotationResult]) -> dict:
    """Convert rotation results to a structured JSON dict."""
    return {
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "summary": {"total": len(results), **summarize(results)},
        "files": [r.to_dict() for r in results],
    }


def results_to_json_string(results: list[RotationResult]) -> str:
    """Return formatted JSON string."""
    return json.dumps(results_to_json(results), indent=2)
