"""
Migration errors — the failures a migration run can surface.

Stage-level failures (fetching formula metadata, installing pyenv
versions, writing the shell profile) propagate to the caller and halt
the workflow.  Per-item failures inside the reinstall and uninstall
loops are caught at the call site and never reach this far.
"""

from __future__ import annotations

from collections.abc import Sequence


class MigrationError(Exception):
    """Base class for every failure raised by the migration core."""


class CommandError(MigrationError):
    """An external command exited non-zero (or could not be started)."""

    def __init__(self, argv: Sequence[str], exit_code: int, stderr: str = ""):
        self.argv = list(argv)
        self.exit_code = exit_code
        self.stderr = stderr
        detail = f": {stderr.strip()}" if stderr.strip() else ""
        super().__init__(
            f"Command `{' '.join(self.argv)}` exited with code {exit_code}{detail}"
        )


class FormulaFetchError(MigrationError):
    """`brew list` / `brew info` failed — no partial result is returned."""


class MalformedFormulaInfoError(FormulaFetchError):
    """`brew info --json=v2` returned something other than a formula record."""


class PartialInstallError(MigrationError):
    """One or more concurrent `pyenv install` runs failed.

    Versions that did install are left in place.
    """

    def __init__(self, failed: dict[str, CommandError], succeeded: list[str]):
        self.failed = failed
        self.succeeded = succeeded
        super().__init__(
            f"pyenv install failed for {', '.join(sorted(failed))} "
            f"({len(succeeded)} succeeded)"
        )


class ProfileUpdateError(MigrationError):
    """Appending the pyenv init snippet to the shell profile failed."""
