"""Throwaway copy of the project file used for every trial build."""

from __future__ import annotations

import shutil
from pathlib import Path

from includeprune.state.backup import suffixed_path


class WorkspaceError(Exception):
    """Raised when the working project copy cannot be created."""


class ProjectWorkspace:
    """Owns ``proj_copy.sln`` next to ``proj.sln`` for the length of a run.

    The copy sits beside the original so relative paths inside the
    project file still resolve.
    """

    def __init__(self, project: Path, suffix: str = "_copy") -> None:
        self.project = project
        self.path = suffixed_path(project, suffix)

    def create(self) -> Path:
        try:
            shutil.copyfile(self.project, self.path)
        except OSError as exc:
            raise WorkspaceError(
                f"Failed to make a copy of the project file {self.project}: {exc}"
            ) from exc
        return self.path

    def discard(self) -> None:
        """Delete the copy. Raises OSError; callers treat that as non-fatal."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
