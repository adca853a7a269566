"""
Formula cache — age arithmetic plus an on-disk snapshot of brew metadata.

Fetching ``brew info`` for every installed formula is slow (one process
per formula), so ``plan`` and ``migrate`` reuse a JSON snapshot while it
is younger than the configured expiry.

Timestamps are epoch milliseconds.  Writes are atomic (write to temp
file, then rename) so an interrupted run never leaves a torn snapshot.
"""

from __future__ import annotations

import json
import logging
import tempfile
import time
from pathlib import Path

from pydantic import ValidationError

from pyenv_migrate.core.models.formula import Formula, FormulaSnapshot

logger = logging.getLogger(__name__)

MS_PER_DAY = 1000 * 60 * 60 * 24


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def days_old(last_modified: int, now: int | None = None) -> int:
    """Whole days elapsed since ``last_modified`` (floored).

    Future timestamps give negative values.
    """
    if now is None:
        now = now_ms()
    return (now - last_modified) // MS_PER_DAY


def is_cache_valid(last_modified: int, expiry_days: int) -> bool:
    """True while the cache is strictly younger than ``expiry_days``."""
    return days_old(last_modified) < expiry_days


class FormulaCache:
    """JSON snapshot of fetched formula metadata.

    The file holds a single ``FormulaSnapshot``.  A missing or corrupt
    file reads as "no cache".
    """

    def __init__(self, path: Path, expiry_days: int = 7):
        self._path = path
        self._expiry_days = expiry_days

    @property
    def path(self) -> Path:
        return self._path

    @property
    def expiry_days(self) -> int:
        return self._expiry_days

    def load_snapshot(self) -> FormulaSnapshot | None:
        """Read the snapshot regardless of age, or None if unusable."""
        if not self._path.is_file():
            return None

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            return FormulaSnapshot.model_validate(data)
        except json.JSONDecodeError as e:
            logger.warning("Corrupt formula cache %s: %s — ignoring", self._path, e)
            return None
        except (OSError, ValidationError) as e:
            logger.warning("Cannot load formula cache %s: %s — ignoring", self._path, e)
            return None

    def load(self) -> list[Formula] | None:
        """Cached formulae if the snapshot is still valid, else None."""
        snapshot = self.load_snapshot()
        if snapshot is None:
            return None

        if not is_cache_valid(snapshot.last_modified, self._expiry_days):
            logger.info(
                "Formula cache is %d days old (expiry %d) — refetching",
                days_old(snapshot.last_modified),
                self._expiry_days,
            )
            return None

        logger.debug("Using %d cached formulae from %s", len(snapshot.formulae), self._path)
        return snapshot.formulae

    def save(self, formulae: list[Formula], last_modified: int | None = None) -> None:
        """Write a fresh snapshot (atomic)."""
        snapshot = FormulaSnapshot(
            last_modified=now_ms() if last_modified is None else last_modified,
            formulae=formulae,
        )

        self._path.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps(snapshot.model_dump(mode="json"), indent=2) + "\n"

        _fd, tmp_path = tempfile.mkstemp(
            dir=self._path.parent,
            prefix=".formulae_",
            suffix=".tmp",
        )
        tmp = Path(tmp_path)
        try:
            with open(_fd, "w", encoding="utf-8") as f:
                f.write(content)
            tmp.replace(self._path)
            logger.debug("Formula cache saved to %s", self._path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise

    def clear(self) -> bool:
        """Drop the snapshot. Returns whether a file was removed."""
        if not self._path.is_file():
            return False
        self._path.unlink()
        logger.debug("Formula cache %s cleared", self._path)
        return True

    def status(self) -> dict:
        """Summary for ``pyenv-migrate cache status``."""
        snapshot = self.load_snapshot()
        if snapshot is None:
            return {"path": str(self._path), "exists": False}

        age = days_old(snapshot.last_modified)
        return {
            "path": str(self._path),
            "exists": True,
            "formulae": len(snapshot.formulae),
            "last_modified": snapshot.last_modified,
            "age_days": age,
            "expiry_days": self._expiry_days,
            "valid": is_cache_valid(snapshot.last_modified, self._expiry_days),
        }
