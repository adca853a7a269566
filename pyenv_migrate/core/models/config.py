"""
Migration configuration model.

Everything the migration needs to know about the host: where pyenv
lives, which shell profile to patch, which executables to call, and
where the formula cache and log file go.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_STATE_DIR = Path("~/.cache/pyenv-migrate")


def default_pyenv_root() -> Path:
    """``$PYENV_ROOT``, falling back to ``~/.pyenv``."""
    env_root = os.environ.get("PYENV_ROOT")
    if env_root:
        return Path(env_root)
    return Path.home() / ".pyenv"


class MigrationConfig(BaseModel):
    """Host-specific settings for one migration run."""

    model_config = ConfigDict(extra="forbid", validate_default=True)

    pyenv_root: Path = Field(default_factory=default_pyenv_root)
    profile_path: Path = Path("~/.zshrc")
    brew_bin: str = "brew"
    pyenv_bin: str = "pyenv"
    cache_file: Path = DEFAULT_STATE_DIR / "formulae.json"
    cache_expiry_days: int = Field(default=7, ge=0)
    log_file: Path | None = DEFAULT_STATE_DIR / "pyenv_migration.log"

    @field_validator("pyenv_root", "profile_path", "cache_file", "log_file")
    @classmethod
    def _expand_user(cls, v: Path | None) -> Path | None:
        if v is None:
            return None
        return Path(os.path.expandvars(str(v))).expanduser()
