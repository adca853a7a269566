"""
Formula models — Homebrew metadata and its Python-dependent projection.

A ``Formula`` is the subset of one ``brew info --json=v2`` record that
the migration reads.  A ``ClassifiedPackage`` is the compact view kept
for formulae that depend on a Homebrew Python.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Dependencies naming a Homebrew Python runtime look like "python@3.11"
PYTHON_DEP_PREFIX = "python@"


class FormulaVersions(BaseModel):
    """Version block of a formula record.

    HEAD-only formulae report ``"stable": null``; that reads as "".
    """

    model_config = ConfigDict(extra="ignore")

    stable: str = ""

    @field_validator("stable", mode="before")
    @classmethod
    def _null_stable(cls, v: object) -> object:
        return "" if v is None else v


class Formula(BaseModel):
    """One installed Homebrew formula, as reported by ``brew info``."""

    model_config = ConfigDict(extra="ignore")

    name: str
    versions: FormulaVersions = Field(default_factory=FormulaVersions)
    dependencies: list[str] = Field(default_factory=list)

    @property
    def depends_on_python(self) -> bool:
        return any(dep.startswith(PYTHON_DEP_PREFIX) for dep in self.dependencies)


class ClassifiedPackage(BaseModel):
    """A formula that links against a Homebrew Python.

    ``dependencies`` is the formula's full dependency list, unfiltered.
    """

    name: str
    version: str = ""
    dependencies: list[str] = Field(default_factory=list)

    @property
    def python_dependencies(self) -> list[str]:
        return [dep for dep in self.dependencies if dep.startswith(PYTHON_DEP_PREFIX)]


class FormulaSnapshot(BaseModel):
    """Cached formula metadata, stamped with its refresh time (epoch ms)."""

    last_modified: int = 0
    formulae: list[Formula] = Field(default_factory=list)
