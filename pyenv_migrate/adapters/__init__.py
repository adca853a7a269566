"""Adapters — bindings for the external commands the migration runs.

Public re-exports for convenient access.
"""

from pyenv_migrate.adapters.base import CommandRunner
from pyenv_migrate.adapters.mock import MockCommandRunner
from pyenv_migrate.adapters.shell.command import ShellCommandAdapter

__all__ = [
    "CommandRunner",
    "MockCommandRunner",
    "ShellCommandAdapter",
]
