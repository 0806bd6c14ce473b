"""Config schema versioning and migration."""

from __future__ import annotations

from funrotate.policy import ConfigError

CURRENT_VERSION = 2

# v1 accepted "copy" as a spelling of copytruncate.
_LEGACY_STRATEGIES = {"copy": "copytruncate"}


def migrate_config(config: dict) -> dict:
    """Auto-upgrade config from older schema versions to current (v2).

    Returns a new config dict at the current schema version.
    """
    config = config.copy()
    version = config.get("version", 1)
    if isinstance(version, bool) or not isinstance(version, int):
        raise ConfigError(f"'version' must be an integer, got {version!r}")

    if version < 2:
        config = _migrate_v1_to_v2(config)

    return config


def _migrate_v1_to_v2(config: dict) -> dict:
    """Migrate from v1 to v2 schema.

    Rewrites legacy strategy tokens and ensures the ``files`` list exists.
    """
    config = config.copy()
    files = []
    for record in config.get("files", []) or []:
        if isinstance(record, dict):
            record = record.copy()
            strategy = record.get("strategy")
            if strategy in _LEGACY_STRATEGIES:
                record["strategy"] = _LEGACY_STRATEGIES[strategy]
        files.append(record)

    config["files"] = files
    config["version"] = CURRENT_VERSION
    return config
