"""
Shell command adapter — run external programs and capture their output.

The SINGLE PLACE where processes are spawned.  Uses
``asyncio.create_subprocess_exec`` so the orchestrator can launch
independent commands concurrently and await them together.
"""

from __future__ import annotations

import asyncio
import logging
import sys
import time
from collections.abc import Sequence

from pyenv_migrate.adapters.base import CommandRunner
from pyenv_migrate.core.errors import CommandError
from pyenv_migrate.core.models.command import CommandResult

logger = logging.getLogger(__name__)


class ShellCommandAdapter(CommandRunner):
    """Execute commands as child processes (no shell)."""

    @property
    def name(self) -> str:
        return "shell"

    async def run(
        self,
        argv: Sequence[str],
        *,
        quiet: bool = False,
        check: bool = True,
    ) -> CommandResult:
        cmd = [str(arg) for arg in argv]
        logger.debug("Executing: %s", " ".join(cmd))
        start = time.monotonic()

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            # Shell convention: 127 = not found, 126 = found but not executable
            code = 127 if isinstance(e, FileNotFoundError) else 126
            if check:
                raise CommandError(cmd, code, str(e)) from e
            return CommandResult(argv=cmd, stderr=str(e), exit_code=code)

        stdout_b, stderr_b = await proc.communicate()
        elapsed_ms = int((time.monotonic() - start) * 1000)

        result = CommandResult(
            argv=cmd,
            stdout=stdout_b.decode("utf-8", errors="replace"),
            stderr=stderr_b.decode("utf-8", errors="replace"),
            exit_code=proc.returncode if proc.returncode is not None else -1,
            duration_ms=elapsed_ms,
        )

        if not quiet:
            _relay(result)

        logger.debug("%s → exit %d (%d ms)", cmd[0], result.exit_code, elapsed_ms)

        if check and not result.ok:
            raise CommandError(cmd, result.exit_code, result.stderr)

        return result


def _relay(result: CommandResult) -> None:
    """Echo captured output to our own console."""
    if result.stdout:
        sys.stdout.write(result.stdout)
        sys.stdout.flush()
    if result.stderr:
        sys.stderr.write(result.stderr)
        sys.stderr.flush()
