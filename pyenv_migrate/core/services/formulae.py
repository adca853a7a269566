"""
Formula analysis — decide what the migration touches.

Pure functions only: no subprocesses, no filesystem.  They take the
formula metadata fetched from Homebrew and answer three questions:

    which installed formulae depend on a Homebrew Python?
    which Python runtimes do they depend on?
    which symlinks make those runtimes visible to pyenv?
"""

from __future__ import annotations

import os
import shlex
from collections.abc import Iterable, Sequence

from pyenv_migrate.core.models.formula import (
    PYTHON_DEP_PREFIX,
    ClassifiedPackage,
    Formula,
)

# Suffix appended to symlinked Homebrew runtimes under $PYENV_ROOT/versions
BREW_VERSION_SUFFIX = "-brew"


def identify_python_packages(formulae: Iterable[Formula]) -> list[ClassifiedPackage]:
    """Keep the formulae that depend on a ``python@`` runtime.

    Input order is preserved.  Each match is projected to its name,
    stable version, and full dependency list.
    """
    return [
        ClassifiedPackage(
            name=formula.name,
            version=formula.versions.stable,
            dependencies=list(formula.dependencies),
        )
        for formula in formulae
        if formula.depends_on_python
    ]


def extract_python_versions(packages: Iterable[ClassifiedPackage]) -> list[str]:
    """Collect the distinct ``python@X.Y`` identifiers, in first-seen order."""
    seen: set[str] = set()
    versions: list[str] = []
    for pkg in packages:
        for dep in pkg.dependencies:
            if dep.startswith(PYTHON_DEP_PREFIX) and dep not in seen:
                seen.add(dep)
                versions.append(dep)
    return versions


def bare_version(identifier: str) -> str:
    """``python@3.11`` → ``3.11``."""
    if identifier.startswith(PYTHON_DEP_PREFIX):
        return identifier[len(PYTHON_DEP_PREFIX):]
    return identifier


def symlink_target(version_path: str, pyenv_root: str) -> str:
    """Where pyenv should see a Homebrew runtime directory."""
    version_name = os.path.basename(os.path.normpath(version_path))
    return os.path.join(pyenv_root, "versions", f"{version_name}{BREW_VERSION_SUFFIX}")


def generate_symlink_commands(python_dirs: Sequence[str], pyenv_root: str) -> list[str]:
    """Build one ``ln -s -f <src> <dst>`` command per Homebrew runtime dir.

    Pure string construction: nothing is checked on disk.  Arguments are
    shell-quoted, so ordinary paths come out verbatim while paths with
    spaces survive a later ``shlex.split``.

    Args:
        python_dirs: Installed runtime directories, e.g.
            ``/usr/local/Cellar/python@3.9/3.9.0``.
        pyenv_root: pyenv's root directory.

    Returns:
        Commands in input order (no dedup).
    """
    return [
        shlex.join(["ln", "-s", "-f", str(path), symlink_target(str(path), str(pyenv_root))])
        for path in python_dirs
    ]
