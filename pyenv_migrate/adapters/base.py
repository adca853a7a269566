"""
Adapter base — the contract between the migration core and external tools.

The core never spawns processes itself.  Every ``brew``, ``pyenv`` and
``ln`` invocation goes through a ``CommandRunner``, which keeps the
orchestrator testable with a scripted runner.

Commands are argv lists, never shell strings, so formula names and
paths are passed through without any shell interpretation.
"""

from __future__ import annotations

import shutil
from abc import ABC, abstractmethod
from collections.abc import Sequence

from pyenv_migrate.core.models.command import CommandResult


class CommandRunner(ABC):
    """Abstract base class for command runners.

    Contract for ``run``:
        - ``quiet=True`` keeps the child's output off the console; it is
          still captured in the returned ``CommandResult``.
        - ``check=True`` raises ``CommandError`` when the process exits
          non-zero.  With ``check=False`` the result is returned as-is
          and the caller inspects ``exit_code``.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The runner identifier (e.g., 'shell', 'mock')."""

    def is_available(self, program: str) -> bool:
        """Check whether ``program`` can be found on PATH."""
        return shutil.which(program) is not None

    @abstractmethod
    async def run(
        self,
        argv: Sequence[str],
        *,
        quiet: bool = False,
        check: bool = True,
    ) -> CommandResult:
        """Run ``argv`` to completion and capture its output."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
