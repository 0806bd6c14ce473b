"""Config discovery, loading, defaults, validation, and PolicySet construction."""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path

import yaml

from funrotate.migration import migrate_config
from funrotate.policy import ConfigError, InvalidFieldError, PolicySet, parse_policy, path_key
from funrotate.utils import deep_merge, load_json, load_yaml, save_json, save_yaml

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = ("funrotate.yaml", "funrotate.yml", "funrotate.json")

DEFAULT_CONFIG: dict = {
    "version": 2,
    "files": [],
}

EXAMPLE_FILE: dict = {
    "path": "app.log",
    "interval": "daily",
    "max_files": 5,
    "compress": False,
    "size": 10 * 1024 * 1024,
    "strategy": "copytruncate",
}


def get_config_path(start_dir: Path | None = None) -> Path:
    """Find funrotate.yaml / .yml / .json by walking up from start_dir."""
    search = start_dir or Path.cwd()
    for d in [search, *search.parents]:
        for name in CONFIG_FILENAMES:
            candidate = d / name
            if candidate.exists():
                return candidate
    return (start_dir or Path.cwd()) / CONFIG_FILENAMES[0]


def _read_config_file(config_path: Path) -> dict:
    if config_path.suffix == ".json":
        return load_json(config_path)
    return load_yaml(config_path)


def load_config(start_dir: Path | None = None, config_path: Path | None = None) -> dict:
    """Load config, migrated to the current schema and merged with defaults."""
    config_path = config_path or get_config_path(start_dir)
    if config_path.exists():
        user_config = _read_config_file(config_path)
        if not user_config:
            logger.warning(
                "Config file exists but could not be loaded (corrupt?): %s "
                "Using defaults.", config_path
            )
        return deep_merge(copy.deepcopy(DEFAULT_CONFIG), migrate_config(user_config))
    return copy.deepcopy(DEFAULT_CONFIG)


def save_config(config: dict, target_dir: Path | None = None, filename: str = CONFIG_FILENAMES[0]) -> Path:
    """Save config as YAML (or JSON for a .json filename)."""
    config_path = (target_dir or Path.cwd()) / filename
    if config_path.suffix == ".json":
        save_json(config_path, config)
    else:
        save_yaml(config_path, config)
    return config_path


def read_config(config_path: Path) -> dict:
    """Strictly load a config file, migrated and merged with defaults.

    Unlike load_config, a parse error or a non-mapping document raises ConfigError.
    """
    try:
        text = config_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Cannot read config {config_path}: {exc}") from exc
    try:
        if config_path.suffix == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot parse config {config_path}: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Config {config_path} must be a mapping, got {type(data).__name__}"
        )
    return deep_merge(copy.deepcopy(DEFAULT_CONFIG), migrate_config(data))


def resolve_paths(files: list, base_dir: Path) -> list:
    """Anchor relative ``path`` entries at the config file's directory."""
    resolved = []
    for record in files:
        if isinstance(record, dict) and isinstance(record.get("path"), str) and record["path"].strip():
            path = Path(record["path"])
            if not path.is_absolute():
                record = {**record, "path": str(base_dir / path)}
        resolved.append(record)
    return resolved


def validate_config(config: dict, base_dir: Path | None = None) -> list[str]:
    """Validate config, returning list of error messages (empty if valid)."""
    errors = []
    version = config.get("version", 1)
    if isinstance(version, bool) or not isinstance(version, int):
        errors.append(f"'version' must be an integer, got {version!r}")
    if "files" not in config:
        errors.append("Missing 'files' key")
        return errors
    files = config["files"]
    if not isinstance(files, list):
        errors.append("'files' must be a list")
        return errors
    if base_dir is not None:
        files = resolve_paths(files, base_dir)
    seen: set[str] = set()
    for i, record in enumerate(files):
        try:
            policy = parse_policy(record, i)
        except InvalidFieldError as exc:
            errors.append(str(exc))
            continue
        key = path_key(policy.path)
        if key in seen:
            errors.append(f"files[{i}].path: duplicate path '{policy.path}'")
        seen.add(key)
    return errors


def load_policies(start_dir: Path | None = None, config_path: Path | None = None) -> PolicySet:
    """Load the config file and build a validated PolicySet.

    Relative paths are resolved against the config file's directory.
    Raises ConfigError (DuplicatePathError, InvalidFieldError) before any rotation runs.
    """
    config_path = config_path or get_config_path(start_dir)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")
    config = read_config(config_path)
    files = config.get("files")
    if not isinstance(files, list):
        raise ConfigError("'files' must be a list")
    policies = PolicySet.from_records(resolve_paths(files, config_path.parent))
    logger.debug("loaded %d policies from %s", len(policies), config_path)
    return policies
