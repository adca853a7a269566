"""
pyenv client — install interpreters and refresh shims.
"""

from __future__ import annotations

from pyenv_migrate.adapters.base import CommandRunner
from pyenv_migrate.core.models.command import CommandResult


class PyenvClient:
    """Issue ``pyenv`` commands through a runner."""

    def __init__(self, runner: CommandRunner, pyenv_bin: str = "pyenv"):
        self._runner = runner
        self._bin = pyenv_bin

    async def install(self, version: str) -> CommandResult:
        """``pyenv install -s <version>`` (``-s`` skips if already installed)."""
        return await self._runner.run([self._bin, "install", "-s", version])

    async def rehash(self) -> CommandResult:
        """Regenerate shims after versions were added."""
        return await self._runner.run([self._bin, "rehash"])
