"""
Configuration loader — resolves a MigrationConfig for this host.

Sources, lowest to highest precedence:

    built-in defaults  <  pyenv-migrate.yml  <  environment  <  CLI flags

The YAML file is optional.  It is looked up by walking up from the
current directory, unless an explicit path is given.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from pyenv_migrate.core.models.config import MigrationConfig

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "pyenv-migrate.yml"

# Environment variable → config field
_ENV_OVERRIDES = {
    "PYENV_ROOT": "pyenv_root",
    "PYENV_MIGRATE_PROFILE": "profile_path",
    "PYENV_MIGRATE_CACHE_FILE": "cache_file",
    "PYENV_MIGRATE_LOG_FILE": "log_file",
}


class ConfigError(Exception):
    """Raised when the migration configuration is invalid or unreadable."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for pyenv-migrate.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to pyenv-migrate.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading migration config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The file may nest everything under a "migration" key or be flat
    if isinstance(data.get("migration"), dict):
        data = data["migration"]
    return dict(data)


def load_config(
    path: Path | None = None,
    overrides: dict[str, Any] | None = None,
    search: bool = True,
) -> MigrationConfig:
    """Load and validate the migration configuration.

    Args:
        path: Explicit path to pyenv-migrate.yml.  If None and ``search``
            is true, searches upward from the cwd; a missing file is fine.
        overrides: Values from CLI flags; ``None`` values are ignored.
        search: Whether to look for a config file when ``path`` is None.

    Returns:
        Validated MigrationConfig.

    Raises:
        ConfigError: If an explicit file is missing, or any source is invalid.
    """
    data: dict[str, Any] = {}

    if path is None and search:
        path = find_config_file()
    if path is not None:
        data.update(_read_yaml(path))

    for env_var, key in _ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            data[key] = value

    for key, value in (overrides or {}).items():
        if value is not None:
            data[key] = value

    try:
        config = MigrationConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid migration configuration: {e}") from e

    logger.debug(
        "Config: pyenv_root=%s profile=%s cache=%s",
        config.pyenv_root,
        config.profile_path,
        config.cache_file,
    )
    return config
