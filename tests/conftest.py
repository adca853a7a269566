"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from pyenv_migrate.adapters.mock import MockCommandRunner
from pyenv_migrate.core.models.config import MigrationConfig

_ENV_VARS = (
    "PYENV_ROOT",
    "PYENV_MIGRATE_PROFILE",
    "PYENV_MIGRATE_CACHE_FILE",
    "PYENV_MIGRATE_LOG_FILE",
    "PYENV_MIGRATE_LOG_FILE_LEVEL",
    "PYENV_MIGRATE_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep tests away from the real home, env, and any pyenv-migrate.yml."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("PYENV_MIGRATE_LOG_FILE", str(tmp_path / "logs" / "migration.log"))
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    return home


@pytest.fixture
def mock_runner() -> MockCommandRunner:
    """A runner where every command succeeds with empty output."""
    return MockCommandRunner()


@pytest.fixture
def config(tmp_path: Path) -> MigrationConfig:
    """Config pointing every path into the temp directory."""
    return MigrationConfig(
        pyenv_root=tmp_path / "pyenv",
        profile_path=tmp_path / "home" / ".zshrc",
        cache_file=tmp_path / "cache" / "formulae.json",
        log_file=None,
    )


@pytest.fixture
def cellar(tmp_path: Path) -> Path:
    """A fake Homebrew Cellar with python@3.9 (3.9.0) and python@3.8 (3.8.5)."""
    root = tmp_path / "Cellar"
    (root / "python@3.9" / "3.9.0").mkdir(parents=True)
    (root / "python@3.8" / "3.8.5").mkdir(parents=True)
    return root
