"""
Migrate use case — run the full Homebrew → pyenv migration.

Loads config, checks that brew and pyenv are installed, runs the
orchestrator's pipeline, and turns any migration failure into an error
string for the CLI.  A failure part-way leaves earlier stages applied.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pyenv_migrate.adapters.base import CommandRunner
from pyenv_migrate.core.config.loader import ConfigError, load_config
from pyenv_migrate.core.errors import (
    CommandError,
    FormulaFetchError,
    MigrationError,
    PartialInstallError,
    ProfileUpdateError,
)
from pyenv_migrate.core.models.config import MigrationConfig
from pyenv_migrate.core.services.migration import MigrationReport
from pyenv_migrate.core.use_cases.plan import build_orchestrator, missing_tools

logger = logging.getLogger(__name__)


@dataclass
class MigrateResult:
    """Result of running a migration."""

    report: MigrationReport | None = None
    config: MigrationConfig | None = None
    error: str | None = None
    failed_stage: str | None = None

    def to_dict(self) -> dict:
        result: dict[str, Any] = {}
        if self.error:
            result["error"] = self.error
            if self.failed_stage:
                result["failed_stage"] = self.failed_stage
            return result

        if self.report is not None:
            result.update(self.report.to_dict())
        return result


def _stage_of(error: MigrationError) -> str:
    """Name of the pipeline stage that raised ``error``."""
    if isinstance(error, FormulaFetchError):
        return "fetch"
    if isinstance(error, PartialInstallError):
        return "install"
    if isinstance(error, ProfileUpdateError):
        return "profile"
    if isinstance(error, CommandError):
        return "command"
    return "unknown"


def run_migration(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
    dry_run: bool = False,
    refresh: bool = False,
    use_cache: bool = True,
    runner: CommandRunner | None = None,
) -> MigrateResult:
    """Execute the migration end to end.

    Args:
        config_path: Optional explicit path to pyenv-migrate.yml.
        overrides: Config values from CLI flags (e.g. ``profile_path``).
        dry_run: Plan only.
        refresh: Ignore a valid formula cache.
        use_cache: Read and write the formula cache at all.
        runner: Optional pre-configured command runner.

    Returns:
        MigrateResult with the migration report, or ``error`` set.
    """
    result = MigrateResult()

    try:
        config = load_config(config_path, overrides)
    except ConfigError as e:
        result.error = str(e)
        return result
    result.config = config

    orchestrator = build_orchestrator(config, runner, use_cache=use_cache)
    missing = missing_tools(config, orchestrator.runner)
    if missing:
        result.error = f"Required tools not found on PATH: {', '.join(missing)}"
        return result

    logger.info(
        "Migrating Homebrew Python to pyenv (root=%s, profile=%s)",
        config.pyenv_root,
        config.profile_path,
    )

    try:
        result.report = asyncio.run(
            orchestrator.run(config.profile_path, dry_run=dry_run, refresh=refresh)
        )
    except MigrationError as e:
        result.failed_stage = _stage_of(e)
        logger.error("Migration failed at %s stage: %s", result.failed_stage, e)
        result.error = str(e)
        return result

    logger.info("Migration finished: %s", result.report.status)
    return result
