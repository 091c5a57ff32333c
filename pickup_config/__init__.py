"""
pickup_config -- single public entrypoint for runtime configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads configuration files
    or environment variables directly.

Architecture position:
    Configuration -- sits above ``pickup_kernel`` and below
    ``pickup_services``.  The kernel MUST NEVER import from
    ``pickup_config``; ``pickup_config.bridges`` translates config sections
    into kernel inputs.

Invariants enforced:
    - Single entrypoint: all runtime config flows through ``get_active_config()``.
    - ``DATABASE_URL`` in the environment overrides ``database.url``.

Failure modes:
    - ``FileNotFoundError`` -- the requested configuration file is missing.
    - ``ValueError`` -- wrong value types or unknown keys.
    - ``yaml.YAMLError`` -- malformed YAML.
"""

from __future__ import annotations

import logging
import os
from dataclasses import replace
from pathlib import Path

from pickup_config.loader import load_yaml_file, parse_config
from pickup_config.schema import (
    DatabaseConfig,
    LoggingConfig,
    PaginationConfig,
    PickupConfig,
)

_logger = logging.getLogger("pickup_kernel.config")

# Default configuration sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"
DEFAULT_CONFIG_PATH = _DEFAULT_CONFIG_DIR / "default.yaml"

DATABASE_URL_ENV = "DATABASE_URL"


def get_active_config(path: Path | str | None = None) -> PickupConfig:
    """The ONLY public configuration entrypoint.

    Args:
        path: YAML file to load.  Defaults to the bundled
            ``pickup_config/sets/default.yaml``.

    Returns:
        Frozen ``PickupConfig``.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If a value has the wrong type or a key is unknown.
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    config = parse_config(load_yaml_file(config_path), source=str(config_path))

    env_url = os.environ.get(DATABASE_URL_ENV)
    if env_url:
        config = replace(config, database=replace(config.database, url=env_url))

    _logger.info(
        "config_loaded",
        extra={
            "source": config.source,
            "database_url_from_env": bool(env_url),
            "pagination_strict": config.pagination.strict,
            "log_level": config.logging.level,
        },
    )
    return config


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "DatabaseConfig",
    "LoggingConfig",
    "PaginationConfig",
    "PickupConfig",
    "get_active_config",
]
