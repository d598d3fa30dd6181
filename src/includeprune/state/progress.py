"""Durable progress marker: which file, if any, has an unreconciled backup.

The progress file is a tiny state machine persisted as plain text::

    EMPTY ──mark_in_progress(f)──> IN_PROGRESS(f) ──clear()──> EMPTY
      │                                                          │
      └────────────────────────mark_done()───────────────────> DONE

An empty file (or no file at all) is EMPTY, the done sentinel is DONE,
anything else is the path of the file being minimized.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

DONE_SENTINEL = "<<DONE>>"


class ProgressKind(str, Enum):
    EMPTY = "empty"
    IN_PROGRESS = "in_progress"
    DONE = "done"


@dataclass(frozen=True)
class ProgressState:
    kind: ProgressKind
    path: Optional[str] = None

    @classmethod
    def empty(cls) -> "ProgressState":
        return cls(ProgressKind.EMPTY)

    @classmethod
    def done(cls) -> "ProgressState":
        return cls(ProgressKind.DONE)

    @classmethod
    def in_progress(cls, path: str) -> "ProgressState":
        return cls(ProgressKind.IN_PROGRESS, path)

    @property
    def is_done(self) -> bool:
        return self.kind is ProgressKind.DONE


class ProgressTracker:
    def __init__(self, path: Path, sentinel: str = DONE_SENTINEL) -> None:
        self.path = path
        self.sentinel = sentinel

    def _write(self, text: str) -> None:
        """Replace the progress file atomically; durable once this returns."""
        tmp = self.path.with_name(self.path.name + ".tmp")
        with open(tmp, "w", encoding="utf-8", newline="") as fh:
            fh.write(text)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp, self.path)

    def mark_in_progress(self, file_path: Path) -> None:
        self._write(str(file_path))

    def clear(self) -> None:
        self._write("")

    def mark_done(self) -> None:
        self._write(self.sentinel)

    def read_resume_point(self) -> ProgressState:
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return ProgressState.empty()
        if text == self.sentinel:
            return ProgressState.done()
        if not text:
            return ProgressState.empty()
        return ProgressState.in_progress(text)
