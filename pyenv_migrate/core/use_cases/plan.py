"""
Plan use case — show what a migration would touch, without touching it.

Also home of the wiring shared with the migrate use case: resolving the
config, checking the tools are installed, and building the orchestrator.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pyenv_migrate.adapters.base import CommandRunner
from pyenv_migrate.core.config.loader import ConfigError, load_config
from pyenv_migrate.core.errors import MigrationError
from pyenv_migrate.core.models.config import MigrationConfig
from pyenv_migrate.core.services.cache import FormulaCache
from pyenv_migrate.core.services.migration import MigrationOrchestrator, MigrationPlan
from pyenv_migrate.core.services.profile import has_pyenv_init

logger = logging.getLogger(__name__)


@dataclass
class PlanResult:
    """Result of planning a migration."""

    plan: MigrationPlan | None = None
    config: MigrationConfig | None = None
    profile_ready: bool = False
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}

        result: dict[str, Any] = {}
        if self.config is not None:
            result["pyenv_root"] = str(self.config.pyenv_root)
            result["profile_path"] = str(self.config.profile_path)
        result["profile_ready"] = self.profile_ready
        if self.plan is not None:
            result.update(self.plan.to_dict())
        return result


def missing_tools(config: MigrationConfig, runner: CommandRunner) -> list[str]:
    """Executables the migration needs but cannot find."""
    return [b for b in (config.brew_bin, config.pyenv_bin) if not runner.is_available(b)]


def build_orchestrator(
    config: MigrationConfig,
    runner: CommandRunner | None = None,
    use_cache: bool = True,
) -> MigrationOrchestrator:
    """Wire an orchestrator for ``config`` (real shell runner by default)."""
    if runner is None:
        from pyenv_migrate.adapters.shell.command import ShellCommandAdapter

        runner = ShellCommandAdapter()

    cache = FormulaCache(config.cache_file, config.cache_expiry_days) if use_cache else None
    return MigrationOrchestrator(runner, config, cache=cache)


def run_plan(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
    refresh: bool = False,
    use_cache: bool = True,
    runner: CommandRunner | None = None,
) -> PlanResult:
    """Inspect installed formulae and compute the migration plan.

    Args:
        config_path: Optional explicit path to pyenv-migrate.yml.
        overrides: Config values from CLI flags.
        refresh: Ignore a valid formula cache.
        use_cache: Read and write the formula cache at all.
        runner: Optional pre-configured command runner.

    Returns:
        PlanResult; ``error`` is set instead of raising.
    """
    result = PlanResult()

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

    try:
        result.plan = asyncio.run(orchestrator.plan(refresh=refresh))
    except MigrationError as e:
        logger.error("Planning failed: %s", e)
        result.error = str(e)
        return result

    result.profile_ready = has_pyenv_init(config.profile_path)
    return result
