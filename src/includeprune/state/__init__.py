"""Crash-recovery state: file backups and the progress marker."""

from includeprune.state.backup import BackupError, BackupManager, suffixed_path
from includeprune.state.progress import ProgressKind, ProgressState, ProgressTracker

__all__ = [
    "BackupError",
    "BackupManager",
    "ProgressKind",
    "ProgressState",
    "ProgressTracker",
    "suffixed_path",
]
