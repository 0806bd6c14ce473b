"""funrotate - per-file log rotation driven by a declarative config."""

__version__ = "0.1.0"
