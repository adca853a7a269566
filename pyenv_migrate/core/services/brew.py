"""
Homebrew client — the ``brew`` commands the migration issues.

Thin async wrappers over a ``CommandRunner``.  Fetch operations translate
failures into ``FormulaFetchError``; mutating operations (reinstall,
uninstall) let ``CommandError`` through so the caller decides whether to
tolerate it.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from pyenv_migrate.adapters.base import CommandRunner
from pyenv_migrate.core.errors import (
    CommandError,
    FormulaFetchError,
    MalformedFormulaInfoError,
)
from pyenv_migrate.core.models.command import CommandResult
from pyenv_migrate.core.models.formula import Formula

logger = logging.getLogger(__name__)


class BrewClient:
    """Issue ``brew`` commands through a runner."""

    def __init__(self, runner: CommandRunner, brew_bin: str = "brew"):
        self._runner = runner
        self._bin = brew_bin

    async def list_formulae(self) -> list[str]:
        """Names of installed formulae (``brew list --formula``)."""
        try:
            result = await self._runner.run([self._bin, "list", "--formula"], quiet=True)
        except CommandError as e:
            raise FormulaFetchError(f"Cannot list installed formulae: {e}") from e

        return [line.strip() for line in result.text().split("\n") if line.strip()]

    async def info(self, name: str) -> Formula:
        """Metadata for one formula (``brew info <name> --json=v2``).

        Homebrew may return several matches for a name; the first
        formula record is used.

        Raises:
            FormulaFetchError: If the command fails.
            MalformedFormulaInfoError: If the output holds no usable
                formula record.
        """
        try:
            result = await self._runner.run(
                [self._bin, "info", name, "--json=v2"], quiet=True
            )
        except CommandError as e:
            raise FormulaFetchError(f"Cannot fetch info for '{name}': {e}") from e

        try:
            data = result.json()
        except json.JSONDecodeError as e:
            raise MalformedFormulaInfoError(
                f"brew info for '{name}' is not valid JSON: {e}"
            ) from e

        records = data.get("formulae") if isinstance(data, dict) else None
        if not isinstance(records, list) or not records:
            raise MalformedFormulaInfoError(f"brew info returned no formula record for '{name}'")

        try:
            return Formula.model_validate(records[0])
        except ValidationError as e:
            raise MalformedFormulaInfoError(
                f"brew info record for '{name}' is malformed: {e}"
            ) from e

    async def cellar(self, name: str) -> Path:
        """Cellar directory of a formula (``brew --cellar <name>``)."""
        result = await self._runner.run([self._bin, "--cellar", name], quiet=True)
        return Path(result.text().strip())

    async def reinstall(self, name: str) -> CommandResult:
        return await self._runner.run([self._bin, "reinstall", name], quiet=True)

    async def uninstall(self, name: str) -> CommandResult:
        """Remove a formula even if other formulae still depend on it."""
        return await self._runner.run(
            [self._bin, "uninstall", "--ignore-dependencies", name], quiet=True
        )
