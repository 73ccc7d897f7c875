"""Runtime settings loaded from YAML and the environment.

Resolution order for the database path:
1. An explicit path passed by the caller.
2. The `LITEBASE_DB_PATH` environment variable.
3. `db_path` in the YAML config file (`LITEBASE_CONFIG` or `<PROJECT_ROOT>/config.yaml`).
4. `global_config.DEFAULT_DB_PATH`.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from . import global_config as g

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    """Resolved runtime settings."""

    db_path: Path | None = None


def _config_path(config_path: Path | None) -> Path:
    if config_path is not None:
        return Path(config_path)
    env_path = os.environ.get(g.CONFIG_PATH_ENV_VAR)
    if env_path:
        return Path(env_path)
    return g.DEFAULT_CONFIG_PATH


def _read_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML mapping from path.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed mapping, or an empty dict for an empty document.

    Raises:
        ValueError: If the YAML is invalid or the document is not a mapping.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML in config file {path}: {exc}"
        raise ValueError(msg) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Config file {path} must contain a mapping, got {type(data).__name__}"
        raise ValueError(msg)
    return data


def load_settings(config_path: Path | None = None) -> Settings:
    """Load settings from the YAML config file and environment.

    A missing config file is not an error; defaults are used. Relative
    `db_path` values in the file are resolved against the file's directory.

    Args:
        config_path: Path to a YAML config file. Defaults to the
            `LITEBASE_CONFIG` environment variable, then
            global_config.DEFAULT_CONFIG_PATH.

    Returns:
        Settings with db_path set if configured anywhere, else None.

    Raises:
        ValueError: If the config file exists but cannot be parsed.

    Logs:
        - DEBUG: "Loaded settings from {path}" when a file is read.
    """
    path = _config_path(config_path)
    db_path: Path | None = None

    if path.is_file():
        data = _read_yaml(path)
        raw = data.get("db_path")
        if raw:
            db_path = Path(raw)
            if not db_path.is_absolute():
                db_path = path.parent / db_path
        logger.debug("Loaded settings from %s", path)

    env_db_path = os.environ.get(g.DB_PATH_ENV_VAR)
    if env_db_path:
        db_path = Path(env_db_path)

    return Settings(db_path=db_path)


def resolve_db_path(db_path: Path | str | None = None) -> Path:
    """Return the database file path to open.

    Args:
        db_path: Explicit path. When None, falls back to configured
            settings and finally global_config.DEFAULT_DB_PATH.

    Returns:
        Path to the SQLite database file.
    """
    if db_path is not None:
        return Path(db_path)
    return load_settings().db_path or g.DEFAULT_DB_PATH
