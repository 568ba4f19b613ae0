"""Server configuration loaded from a JSON file."""

from __future__ import annotations

import json
from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import Any, Mapping, Union


class ConfigError(Exception):
    """Raised when the configuration file cannot be read or parsed."""


@dataclass(frozen=True)
class Config:
    """Global settings read once at start-up."""

    aof: bool
    """Whether the append-only command log is enabled."""
    rdb: bool
    """Whether periodic snapshots are enabled."""
    snapshot_interval_secs: int
    """Seconds between periodic snapshots."""
    snapshot_threshold: int
    """Number of write commands after which a snapshot is forced."""


def _bool_field(data: Mapping[str, Any], name: str) -> bool:
    if name not in data:
        raise ConfigError(f"Failed to parse config.json: missing field `{name}`")
    value = data[name]
    if not isinstance(value, bool):
        raise ConfigError(f"Failed to parse config.json: `{name}` must be a boolean")
    return value


def _unsigned_field(data: Mapping[str, Any], name: str) -> int:
    if name not in data:
        raise ConfigError(f"Failed to parse config.json: missing field `{name}`")
    value = data[name]
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value < 2**64:
        raise ConfigError(
            f"Failed to parse config.json: `{name}` must be an unsigned integer"
        )
    return value


def load(path: Union[str, PathLike]) -> Config:
    """Read and validate the JSON configuration at *path*."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read config file {str(path)!r}") from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError("Failed to parse config.json") from exc
    if not isinstance(data, dict):
        raise ConfigError("Failed to parse config.json: expected a JSON object")
    return Config(
        aof=_bool_field(data, "aof"),
        rdb=_bool_field(data, "rdb"),
        snapshot_interval_secs=_unsigned_field(data, "snapshot_interval_secs"),
        snapshot_threshold=_unsigned_field(data, "snapshot_threshold"),
    )