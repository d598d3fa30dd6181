"""Scoped backup / restore of a single source file around a minimization pass."""

from __future__ import annotations

import os
import shutil
from pathlib import Path


class BackupError(Exception):
    """Raised when a backup cannot be created, committed or restored."""


def suffixed_path(path: Path, suffix: str) -> Path:
    """Insert *suffix* before the extension: ``foo.cpp`` -> ``foo_backup.cpp``."""
    return path.with_name(f"{path.stem}{suffix}{path.suffix}")


def is_suffixed(path: Path, suffix: str) -> bool:
    return path.stem.endswith(suffix)


def _atomic_copy(source: Path, target: Path) -> None:
    """Copy *source* over *target* so that *target* is either untouched or complete."""
    tmp = target.with_name(target.name + ".tmp")
    shutil.copyfile(source, tmp)
    with open(tmp, "rb+") as fh:
        os.fsync(fh.fileno())
    os.replace(tmp, target)


class BackupManager:
    """Keeps a byte-for-byte sibling copy of a file while it is being mutated.

    Backup files live next to the original under a deterministic name so
    that recovery after a crash can find them without extra bookkeeping.
    A backup file only ever appears fully written.
    """

    def __init__(self, suffix: str = "_backup") -> None:
        self.suffix = suffix

    def backup_path(self, path: Path) -> Path:
        return suffixed_path(path, self.suffix)

    def has_backup(self, path: Path) -> bool:
        return self.backup_path(path).is_file()

    def backup(self, path: Path) -> Path:
        """Snapshot *path*. Must be called before the first mutation.

        Refuses to replace an existing backup: that one still holds the
        content from before an unreconciled pass.
        """
        target = self.backup_path(path)
        if target.exists():
            raise BackupError(f"Unreconciled backup already exists: {target}")
        try:
            _atomic_copy(path, target)
        except OSError as exc:
            raise BackupError(f"Failed to back up {path}: {exc}") from exc
        return target

    def commit(self, path: Path) -> None:
        """The mutation of *path* is final; drop its backup."""
        try:
            self.backup_path(path).unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise BackupError(f"Failed to delete backup of {path}: {exc}") from exc

    def restore(self, path: Path) -> None:
        """Put the pre-pass content back into *path* and drop the backup."""
        source = self.backup_path(path)
        try:
            _atomic_copy(source, path)
            source.unlink()
        except OSError as exc:
            raise BackupError(f"Failed to restore {path} from {source}: {exc}") from exc
