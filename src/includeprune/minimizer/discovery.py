"""Find the source files a run will minimize."""

from __future__ import annotations

import os
from fnmatch import fnmatch
from pathlib import Path
from typing import List

from includeprune.config.schema import FilesConfig
from includeprune.state.backup import is_suffixed


class EnumerationError(Exception):
    """Raised when the source directory cannot be walked."""


def _walk_error(exc: OSError) -> None:
    raise exc


def find_source_files(root: Path, files: FilesConfig, backup_suffix: str = "_backup") -> List[Path]:
    """Return eligible files under *root*, sorted by absolute path string.

    The order must be stable between runs: resuming compares paths
    against the one stored in the progress file.
    """
    root = root.resolve()
    if not root.is_dir():
        raise EnumerationError(f"Not a directory: {root}")

    extensions = {e.lower() for e in files.extensions}
    found: List[Path] = []
    try:
        for dirpath, _dirnames, filenames in os.walk(root, onerror=_walk_error):
            for name in filenames:
                path = Path(dirpath) / name
                if path.suffix.lower() not in extensions:
                    continue
                if is_suffixed(path, backup_suffix):
                    continue
                rel = path.relative_to(root).as_posix()
                if any(fnmatch(rel, g) for g in files.exclude):
                    continue
                found.append(path)
    except OSError as exc:
        raise EnumerationError(f"Failed to get source files from directory {root}: {exc}") from exc

    return sorted(found, key=str)
