"""
Migration orchestrator — move Homebrew Python dependents onto pyenv.

The workflow is a linear pipeline; each stage feeds the next:

    fetch formulae → classify → extract versions          (plan)
    → pyenv install (concurrent)
    → symlink Homebrew runtimes into pyenv, rehash
    → brew reinstall dependents
    → append pyenv init to the shell profile
    → brew uninstall the old runtimes

Stage failures propagate and halt the run.  Per-package reinstall and
uninstall failures are tolerated: they usually mean "already removed"
or "not installed", and the loop moves on.  Nothing is rolled back.

Every completed unit of work is reported through ``log.info`` with a
fixed message, so callers may pass any object with an ``info`` method.
"""

from __future__ import annotations

import asyncio
import logging
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from pyenv_migrate.adapters.base import CommandRunner
from pyenv_migrate.core.errors import CommandError, PartialInstallError
from pyenv_migrate.core.models.config import MigrationConfig
from pyenv_migrate.core.models.formula import ClassifiedPackage, Formula
from pyenv_migrate.core.services.brew import BrewClient
from pyenv_migrate.core.services.cache import FormulaCache
from pyenv_migrate.core.services.formulae import (
    bare_version,
    extract_python_versions,
    generate_symlink_commands,
    identify_python_packages,
)
from pyenv_migrate.core.services.profile import append_pyenv_init
from pyenv_migrate.core.services.pyenv import PyenvClient

logger = logging.getLogger(__name__)


class InfoSink(Protocol):
    def info(self, msg: str, *args: object) -> None: ...


@dataclass
class MigrationPlan:
    """What a migration would do on this host."""

    formulae_scanned: int = 0
    packages: list[ClassifiedPackage] = field(default_factory=list)
    versions: list[str] = field(default_factory=list)
    python_dirs: list[str] = field(default_factory=list)
    symlink_commands: list[str] = field(default_factory=list)
    from_cache: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.versions

    def to_dict(self) -> dict:
        return {
            "formulae_scanned": self.formulae_scanned,
            "from_cache": self.from_cache,
            "packages": [p.model_dump(mode="json") for p in self.packages],
            "versions": self.versions,
            "python_dirs": self.python_dirs,
            "symlink_commands": self.symlink_commands,
        }


@dataclass
class MigrationReport:
    """What a migration run actually did."""

    plan: MigrationPlan = field(default_factory=MigrationPlan)
    dry_run: bool = False
    installed: list[str] = field(default_factory=list)
    symlinks_created: int = 0
    reinstalled: list[str] = field(default_factory=list)
    reinstall_failed: list[str] = field(default_factory=list)
    profile_updated: bool = False
    uninstalled: list[str] = field(default_factory=list)
    uninstall_failed: list[str] = field(default_factory=list)

    @property
    def status(self) -> str:
        if self.dry_run:
            return "planned"
        if self.plan.is_empty:
            return "nothing-to-do"
        if self.reinstall_failed or self.uninstall_failed:
            return "partial"
        return "ok"

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "dry_run": self.dry_run,
            "plan": self.plan.to_dict(),
            "installed": self.installed,
            "symlinks_created": self.symlinks_created,
            "reinstalled": self.reinstalled,
            "reinstall_failed": self.reinstall_failed,
            "profile_updated": self.profile_updated,
            "uninstalled": self.uninstalled,
            "uninstall_failed": self.uninstall_failed,
        }


class MigrationOrchestrator:
    """Run the Homebrew → pyenv migration through a command runner.

    Args:
        runner: Command gateway used for every external process.
        config: Host settings (pyenv root, executables).
        log: Sink for the per-step progress messages.  Defaults to this
            module's logger.
        cache: Optional formula cache consulted by ``fetch_formulae``.
    """

    def __init__(
        self,
        runner: CommandRunner,
        config: MigrationConfig | None = None,
        log: InfoSink | None = None,
        cache: FormulaCache | None = None,
    ):
        self._runner = runner
        self._config = config or MigrationConfig()
        self._log = log or logger
        self._cache = cache
        self._brew = BrewClient(runner, self._config.brew_bin)
        self._pyenv = PyenvClient(runner, self._config.pyenv_bin)

    @property
    def config(self) -> MigrationConfig:
        return self._config

    @property
    def runner(self) -> CommandRunner:
        return self._runner

    # ── Stage 1: fetch ──────────────────────────────────────────

    async def fetch_formulae(self, refresh: bool = False) -> list[Formula]:
        """Metadata for every installed formula, in ``brew list`` order.

        One ``brew info`` per formula, sequentially.  Any failure aborts
        the whole fetch.
        """
        formulae, _ = await self._fetch(refresh)
        return formulae

    async def _fetch(self, refresh: bool) -> tuple[list[Formula], bool]:
        if self._cache is not None and not refresh:
            cached = self._cache.load()
            if cached is not None:
                return cached, True

        names = await self._brew.list_formulae()
        logger.debug("Fetching info for %d formulae", len(names))

        formulae: list[Formula] = []
        for name in names:
            formulae.append(await self._brew.info(name))

        if self._cache is not None:
            try:
                self._cache.save(formulae)
            except OSError as e:
                logger.warning("Could not write formula cache %s: %s", self._cache.path, e)

        return formulae, False

    async def locate_python_dirs(self, versions: list[str]) -> list[str]:
        """Installed Cellar directories of the given ``python@`` formulae.

        Each version subdirectory of ``brew --cellar python@X.Y`` is one
        runtime, listed in name order.  Formulae with no cellar on disk
        contribute nothing.
        """
        dirs: list[str] = []
        for version in versions:
            cellar = await self._brew.cellar(version)
            if not cellar.is_dir():
                logger.debug("No cellar for %s at %s", version, cellar)
                continue
            dirs.extend(str(p) for p in sorted(cellar.iterdir()) if p.is_dir())
        return dirs

    async def plan(self, refresh: bool = False) -> MigrationPlan:
        """Stages 1–3 plus symlink planning.  Installs nothing; may refresh the cache."""
        formulae, from_cache = await self._fetch(refresh)
        packages = identify_python_packages(formulae)
        versions = extract_python_versions(packages)
        python_dirs = await self.locate_python_dirs(versions)

        return MigrationPlan(
            formulae_scanned=len(formulae),
            packages=packages,
            versions=versions,
            python_dirs=python_dirs,
            symlink_commands=generate_symlink_commands(
                python_dirs, str(self._config.pyenv_root)
            ),
            from_cache=from_cache,
        )

    # ── Stage 4: install ────────────────────────────────────────

    async def install_pyenv_versions(self, versions: list[str]) -> list[str]:
        """``pyenv install -s`` every version, all at once.

        Waits for every install to settle before reporting.  Versions
        that installed are kept even when others fail.

        Returns:
            The bare versions installed (e.g. ``["3.11", "3.12"]``).

        Raises:
            PartialInstallError: If any install failed.
        """
        bare = [bare_version(v) for v in versions]
        results = await asyncio.gather(
            *(self._pyenv.install(v) for v in bare),
            return_exceptions=True,
        )

        failed: dict[str, CommandError] = {}
        succeeded: list[str] = []
        for version, outcome in zip(bare, results):
            if isinstance(outcome, CommandError):
                failed[version] = outcome
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                succeeded.append(version)

        if failed:
            raise PartialInstallError(failed, succeeded)

        self._log.info("Installed equivalent pyenv-managed Python versions.")
        return succeeded

    # ── Stage 5: symlink + reinstall ────────────────────────────

    async def create_symlinks(self, symlink_commands: list[str]) -> int:
        """Run symlink commands one by one, then ``pyenv rehash`` once."""
        for cmd in symlink_commands:
            await self._runner.run(shlex.split(cmd), quiet=True)
            self._log.info(f"Executed symlink command: {cmd}")
        await self._pyenv.rehash()
        return len(symlink_commands)

    async def reinstall_brew_packages(
        self, packages: list[ClassifiedPackage]
    ) -> tuple[list[str], list[str]]:
        """``brew reinstall`` each package in order.

        A failing reinstall does not stop the loop.

        Returns:
            (reinstalled, failed) package names.
        """
        reinstalled: list[str] = []
        failed: list[str] = []
        for pkg in packages:
            try:
                await self._brew.reinstall(pkg.name)
                reinstalled.append(pkg.name)
            except CommandError as e:
                logger.warning("brew reinstall %s failed (exit %d), continuing", pkg.name, e.exit_code)
                failed.append(pkg.name)
            self._log.info(f"Reinstalled Brew package: {pkg.name}")
        return reinstalled, failed

    # ── Stage 6: profile + removal ──────────────────────────────

    async def update_profile(self, profile_path: Path) -> None:
        """Append the pyenv init block to the shell profile."""
        append_pyenv_init(profile_path)
        self._log.info("Updated .zshrc to prioritize pyenv over Brew-managed Python.")

    async def uninstall_brew_python_versions(
        self, versions: list[str]
    ) -> tuple[list[str], list[str]]:
        """``brew uninstall --ignore-dependencies`` each runtime in order.

        Returns:
            (uninstalled, failed) formula names.
        """
        uninstalled: list[str] = []
        failed: list[str] = []
        for version in versions:
            try:
                await self._brew.uninstall(version)
                uninstalled.append(version)
            except CommandError as e:
                logger.warning("brew uninstall %s failed (exit %d), continuing", version, e.exit_code)
                failed.append(version)
            self._log.info(f"Uninstalled Brew-managed Python version: {version}")
        return uninstalled, failed

    # ── Full run ────────────────────────────────────────────────

    async def run(
        self,
        profile_path: Path | None = None,
        dry_run: bool = False,
        refresh: bool = False,
    ) -> MigrationReport:
        """Plan, then execute every stage in order.

        Args:
            profile_path: Shell profile to patch (default: config's).
            dry_run: Stop after planning.
            refresh: Ignore the formula cache.
        """
        plan = await self.plan(refresh=refresh)
        report = MigrationReport(plan=plan, dry_run=dry_run)

        if dry_run:
            return report
        if plan.is_empty:
            logger.info("No formula depends on a Homebrew Python — nothing to migrate")
            return report

        report.installed = await self.install_pyenv_versions(plan.versions)
        report.symlinks_created = await self.create_symlinks(plan.symlink_commands)
        report.reinstalled, report.reinstall_failed = await self.reinstall_brew_packages(
            plan.packages
        )

        await self.update_profile(profile_path or self._config.profile_path)
        report.profile_updated = True

        report.uninstalled, report.uninstall_failed = await self.uninstall_brew_python_versions(
            plan.versions
        )

        # Installed set has changed; the snapshot no longer describes it
        if self._cache is not None:
            try:
                self._cache.clear()
            except OSError as e:
                logger.warning("Could not clear formula cache %s: %s", self._cache.path, e)

        return report
