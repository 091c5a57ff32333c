"""
Configuration Loader (``pickup_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into the frozen dataclasses of
``pickup_config.schema``.  The single public entry point for runtime config
is ``pickup_config.get_active_config()``.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Missing keys take the schema defaults.  Present keys are type-checked;
  a wrong type raises ``ValueError`` naming the offending key.
* Unknown keys inside a section raise ``ValueError`` (typos do not silently
  fall back to defaults).

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Wrong value type or unknown key  -> ``ValueError``.
"""

from __future__ import annotations

from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from pickup_config.schema import (
    DatabaseConfig,
    LoggingConfig,
    PaginationConfig,
    PickupConfig,
)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping, got {type(data).__name__}")
    return data


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ValueError(f"'{name}' must be a mapping, got {type(value).__name__}")
    return value


def _check_keys(section: dict[str, Any], name: str, cls: type) -> None:
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ValueError(f"Unknown key(s) in '{name}': {', '.join(unknown)}")


def _expect(value: Any, kind: type | tuple[type, ...], key: str) -> Any:
    # bool is a subclass of int; reject it where an int is expected.
    if isinstance(value, bool) and kind is int:
        raise ValueError(f"'{key}' must be an integer, got {value!r}")
    if not isinstance(value, kind):
        raise ValueError(f"'{key}' has wrong type: {value!r}")
    return value


def parse_database(section: dict[str, Any]) -> DatabaseConfig:
    """Parse the ``database`` section."""
    _check_keys(section, "database", DatabaseConfig)
    defaults = DatabaseConfig()
    lock_timeout = section.get("lock_timeout_ms", defaults.lock_timeout_ms)
    if lock_timeout is not None:
        _expect(lock_timeout, int, "database.lock_timeout_ms")
    return DatabaseConfig(
        url=_expect(section.get("url", defaults.url), str, "database.url"),
        echo=_expect(section.get("echo", defaults.echo), bool, "database.echo"),
        pool_size=_expect(section.get("pool_size", defaults.pool_size), int, "database.pool_size"),
        max_overflow=_expect(
            section.get("max_overflow", defaults.max_overflow), int, "database.max_overflow"
        ),
        pool_timeout=_expect(
            section.get("pool_timeout", defaults.pool_timeout), int, "database.pool_timeout"
        ),
        lock_timeout_ms=lock_timeout,
    )


def parse_pagination(section: dict[str, Any]) -> PaginationConfig:
    """Parse the ``pagination`` section."""
    _check_keys(section, "pagination", PaginationConfig)
    defaults = PaginationConfig()
    return PaginationConfig(
        default_page=_expect(
            section.get("default_page", defaults.default_page), int, "pagination.default_page"
        ),
        default_limit=_expect(
            section.get("default_limit", defaults.default_limit), int, "pagination.default_limit"
        ),
        max_limit=_expect(
            section.get("max_limit", defaults.max_limit), int, "pagination.max_limit"
        ),
        strict=_expect(section.get("strict", defaults.strict), bool, "pagination.strict"),
    )


def parse_logging(section: dict[str, Any]) -> LoggingConfig:
    """Parse the ``logging`` section."""
    _check_keys(section, "logging", LoggingConfig)
    level = _expect(section.get("level", LoggingConfig().level), str, "logging.level").upper()
    if level not in _LOG_LEVELS:
        raise ValueError(f"'logging.level' must be one of {', '.join(_LOG_LEVELS)}, got {level!r}")
    return LoggingConfig(level=level)


def parse_config(data: dict[str, Any], source: str | None = None) -> PickupConfig:
    """Parse a full configuration mapping into a ``PickupConfig``."""
    return PickupConfig(
        database=parse_database(_section(data, "database")),
        pagination=parse_pagination(_section(data, "pagination")),
        logging=parse_logging(_section(data, "logging")),
        source=source,
    )
