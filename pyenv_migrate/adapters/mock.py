"""
Mock runner — scripted test double for the command gateway.

Returns canned ``CommandResult`` objects per argv without touching the
system.  By default every command succeeds with empty output.
"""

from __future__ import annotations

from collections.abc import Sequence

from pyenv_migrate.adapters.base import CommandRunner
from pyenv_migrate.core.errors import CommandError
from pyenv_migrate.core.models.command import CommandResult


class MockCommandRunner(CommandRunner):
    """Universal mock runner for testing.

    Responses are matched on the exact argv.  Unmatched commands get the
    default response.
    """

    def __init__(
        self,
        runner_name: str = "mock",
        available: bool = True,
        default_output: str = "",
    ):
        self._name = runner_name
        self._available = available
        self._default = CommandResult(stdout=default_output)
        self._responses: dict[tuple[str, ...], CommandResult] = {}
        self._call_log: list[list[str]] = []
        self._quiet_log: list[bool] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[list[str]]:
        """Every argv this mock has received, in call order."""
        return self._call_log

    @property
    def call_count(self) -> int:
        """Number of times run has been called."""
        return len(self._call_log)

    @property
    def quiet_log(self) -> list[bool]:
        """The ``quiet`` flag of each call, parallel to ``call_log``."""
        return self._quiet_log

    def is_available(self, program: str) -> bool:
        return self._available

    def set_response(self, argv: Sequence[str], stdout: str = "", exit_code: int = 0, stderr: str = "") -> None:
        """Set a custom response for a specific argv."""
        self._responses[tuple(argv)] = CommandResult(
            argv=list(argv), stdout=stdout, stderr=stderr, exit_code=exit_code
        )

    def set_failure(self, argv: Sequence[str], stderr: str = "Mock failure", exit_code: int = 1) -> None:
        """Configure a specific argv to exit non-zero."""
        self.set_response(argv, stderr=stderr, exit_code=exit_code)

    def set_default(self, stdout: str = "", exit_code: int = 0, stderr: str = "") -> None:
        """Response for every argv without a custom one."""
        self._default = CommandResult(stdout=stdout, stderr=stderr, exit_code=exit_code)

    def calls_to(self, program: str) -> list[list[str]]:
        """Calls whose first argument is ``program``."""
        return [argv for argv in self._call_log if argv and argv[0] == program]

    async def run(
        self,
        argv: Sequence[str],
        *,
        quiet: bool = False,
        check: bool = True,
    ) -> CommandResult:
        cmd = [str(arg) for arg in argv]
        self._call_log.append(cmd)
        self._quiet_log.append(quiet)

        canned = self._responses.get(tuple(cmd), self._default)
        result = CommandResult(
            argv=cmd,
            stdout=canned.stdout,
            stderr=canned.stderr,
            exit_code=canned.exit_code,
        )

        if check and not result.ok:
            raise CommandError(cmd, result.exit_code, result.stderr)
        return result

    def reset(self) -> None:
        """Clear call log and custom responses."""
        self._call_log.clear()
        self._quiet_log.clear()
        self._responses.clear()
