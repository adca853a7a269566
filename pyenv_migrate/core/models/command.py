"""
Command result model — the output contract of the command gateway.

Adapters return a ``CommandResult`` for every completed process.  Callers
read stdout either as plain text (``text()``) or as parsed JSON
(``json()``).
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any


@dataclass
class CommandResult:
    """Captured outcome of one external command."""

    argv: list[str] = field(default_factory=list)
    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        """Whether the process exited cleanly."""
        return self.exit_code == 0

    def text(self) -> str:
        """Raw stdout."""
        return self.stdout

    def json(self) -> Any:
        """Stdout parsed as JSON.

        Raises:
            json.JSONDecodeError: If stdout is not valid JSON.
        """
        return json.loads(self.stdout)

    def to_dict(self) -> dict:
        return {
            "argv": self.argv,
            "exit_code": self.exit_code,
            "duration_ms": self.duration_ms,
        }
