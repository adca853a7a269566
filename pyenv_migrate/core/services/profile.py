"""
Shell profile update — make pyenv's shims win over Homebrew's python.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pyenv_migrate.core.errors import ProfileUpdateError

logger = logging.getLogger(__name__)

# Appended verbatim, leading and trailing newline included
PYENV_INIT_SNIPPET = (
    "\n"
    "if command -v pyenv 1>/dev/null 2>&1; then\n"
    '  eval "$(pyenv init --path)"\n'
    '  eval "$(pyenv init -)"\n'
    "fi\n"
)


def append_pyenv_init(profile_path: Path) -> None:
    """Append the pyenv init block to ``profile_path``.

    The file is created if missing, but its directory must exist.

    Raises:
        ProfileUpdateError: If the file cannot be written.
    """
    try:
        with Path(profile_path).open("a", encoding="utf-8") as f:
            f.write(PYENV_INIT_SNIPPET)
    except OSError as e:
        raise ProfileUpdateError(f"Cannot update {profile_path}: {e}") from e

    logger.debug("Appended pyenv init block to %s", profile_path)


def has_pyenv_init(profile_path: Path) -> bool:
    """Whether the profile already initialises pyenv (for ``plan``)."""
    try:
        return "pyenv init" in Path(profile_path).read_text(encoding="utf-8")
    except OSError:
        return False
