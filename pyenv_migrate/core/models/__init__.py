"""
Domain models for the migration.

All models are re-exported here for convenient access:

    from pyenv_migrate.core.models import Formula, ClassifiedPackage, CommandResult
"""

from pyenv_migrate.core.models.command import CommandResult
from pyenv_migrate.core.models.config import MigrationConfig
from pyenv_migrate.core.models.formula import (
    PYTHON_DEP_PREFIX,
    ClassifiedPackage,
    Formula,
    FormulaSnapshot,
    FormulaVersions,
)

__all__ = [
    # command.py
    "CommandResult",
    # config.py
    "MigrationConfig",
    # formula.py
    "PYTHON_DEP_PREFIX",
    "ClassifiedPackage",
    "Formula",
    "FormulaSnapshot",
    "FormulaVersions",
]
