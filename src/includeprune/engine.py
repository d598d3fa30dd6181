"""Run orchestration: baseline check, resume, and the per-file loop.

Recovery relies on two pieces of on-disk state: the progress file names
the file whose pass is in flight, and that file's backup holds its
pre-pass content. A crash at any point leaves both behind; the next run
restores the file and redoes its whole pass.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from rich.markup import escape
from rich.table import Table

from includeprune.build.oracle import Oracle
from includeprune.build.workspace import ProjectWorkspace, WorkspaceError
from includeprune.config.schema import RunConfig
from includeprune.minimizer.discovery import EnumerationError, find_source_files
from includeprune.minimizer.lines import LineMinimizer, MinimizationResult
from includeprune.output.reporter import Reporter
from includeprune.state.backup import BackupError, BackupManager
from includeprune.state.progress import ProgressKind, ProgressTracker


class RunOutcome(str, Enum):
    COMPLETED = "completed"
    ALREADY_COMPLETE = "already_complete"
    BASELINE_FAILED = "baseline_failed"
    ENUMERATION_FAILED = "enumeration_failed"
    WORKSPACE_FAILED = "workspace_failed"
    RECOVERY_FAILED = "recovery_failed"


class FilePassOutcome(str, Enum):
    COMMITTED = "committed"
    RESTORED = "restored"
    RESTORE_FAILED = "restore_failed"


@dataclass(frozen=True)
class FileReport:
    path: Path
    outcome: FilePassOutcome
    result: Optional[MinimizationResult] = None
    error: Optional[str] = None


@dataclass
class RunSummary:
    outcome: RunOutcome
    files: List[FileReport] = field(default_factory=list)
    resumed_from: Optional[Path] = None
    duration_s: float = 0.0

    def _with(self, outcome: FilePassOutcome) -> List[FileReport]:
        return [f for f in self.files if f.outcome is outcome]

    @property
    def committed(self) -> List[FileReport]:
        return self._with(FilePassOutcome.COMMITTED)

    @property
    def restored(self) -> List[FileReport]:
        return self._with(FilePassOutcome.RESTORED)

    @property
    def restore_failed(self) -> List[FileReport]:
        return self._with(FilePassOutcome.RESTORE_FAILED)

    @property
    def removed_total(self) -> int:
        return sum(f.result.removed_count for f in self.files if f.result is not None)


class Orchestrator:
    """Drive one run over the source tree. Not safe to run concurrently on the same tree."""

    def __init__(self, config: RunConfig, oracle: Oracle, reporter: Reporter) -> None:
        self.config = config
        self.oracle = oracle
        self.reporter = reporter
        state = config.settings.state
        self.backups = BackupManager(state.backup_suffix)
        self.progress = ProgressTracker(config.progress_file, state.done_sentinel)
        self.workspace = ProjectWorkspace(config.project, state.project_copy_suffix)

    # ---- startup ----

    def _recover(self, marker: str) -> Path:
        """Undo whatever an interrupted pass left in *marker*'s file.

        Raises BackupError if the backup cannot be put back; the marker and
        the backup then stay in place for the next attempt.
        """
        path = Path(marker)
        self.reporter.info(f"Resuming from {escape(marker)} file")
        if self.backups.has_backup(path):
            self.backups.restore(path)
        return path

    def _baseline_builds(self) -> bool:
        self.reporter.info("Performing initial compilation...")
        try:
            return self.oracle.verify(self.config.project, self.config.configuration)
        except Exception as exc:
            self.reporter.error(
                f"Failed to perform initial compilation of {self.config.project} "
                f"for configuration {self.config.configuration}, reason: {exc}"
            )
            return False

    # ---- per-file pass ----

    def _process_file(self, path: Path, minimizer: LineMinimizer) -> FileReport:
        self.reporter.info(f"Optimizing {escape(str(path))}...")
        try:
            self.progress.mark_in_progress(path)
            self.backups.backup(path)
            result = minimizer.run(path)
            self.progress.clear()
            self.backups.commit(path)
        except Exception as exc:
            self.reporter.error(f"Failed to optimize file {escape(str(path))}: {escape(str(exc))}")
            return self._rollback(path, str(exc))
        return FileReport(path, FilePassOutcome.COMMITTED, result=result)

    def _rollback(self, path: Path, reason: str) -> FileReport:
        try:
            if self.backups.has_backup(path):
                self.backups.restore(path)
        except BackupError as exc:
            self.reporter.error(
                f"Failed to revert original copy of the {escape(str(path))} file, "
                f"reason: {escape(str(exc))}. The file may be left partially optimized."
            )
            return FileReport(path, FilePassOutcome.RESTORE_FAILED, error=reason)
        try:
            self.progress.clear()
        except OSError as exc:
            # file is back to its original content; a stale marker only causes a redo
            self.reporter.warning(
                f"Failed to clear progress marker for {escape(str(path))}: {escape(str(exc))}"
            )
        return FileReport(path, FilePassOutcome.RESTORED, error=reason)

    # ---- main loop ----

    def run(self) -> RunSummary:
        start = time.perf_counter()
        cfg = self.config

        state = self.progress.read_resume_point()
        if state.is_done:
            self.reporter.info(
                f"Optimization already completed. Delete progress file "
                f"'{escape(str(self.progress.path))}' to start from scratch."
            )
            return RunSummary(RunOutcome.ALREADY_COMPLETE)

        resume_from: Optional[Path] = None
        if state.kind is ProgressKind.IN_PROGRESS and state.path:
            try:
                resume_from = self._recover(state.path)
            except BackupError as exc:
                self.reporter.error(
                    f"{escape(str(exc))}. Restore {escape(state.path)} by hand from its backup, "
                    f"then rerun."
                )
                return RunSummary(RunOutcome.RECOVERY_FAILED)

        if not self._baseline_builds():
            self.reporter.error(
                f"Project {escape(str(cfg.project))} doesn't compile for specified configuration "
                f"{escape(cfg.configuration)} even without any optimizations."
            )
            return RunSummary(RunOutcome.BASELINE_FAILED, resumed_from=resume_from)

        try:
            trial_project = self.workspace.create()
        except WorkspaceError as exc:
            self.reporter.error(str(exc))
            return RunSummary(RunOutcome.WORKSPACE_FAILED, resumed_from=resume_from)

        try:
            sources = find_source_files(cfg.source_root, cfg.settings.files, cfg.settings.state.backup_suffix)
        except EnumerationError as exc:
            self.reporter.error(str(exc))
            self._discard_workspace()
            return RunSummary(RunOutcome.ENUMERATION_FAILED, resumed_from=resume_from)

        if resume_from is not None:
            marker = str(resume_from)
            sources = [p for p in sources if str(p) >= marker]

        minimizer = LineMinimizer(
            self.oracle,
            trial_project,
            cfg.configuration,
            cfg.settings.directives,
            encoding=cfg.settings.files.encoding,
            on_removed=self.reporter.redundant,
        )

        summary = RunSummary(RunOutcome.COMPLETED, resumed_from=resume_from)
        for path in sources:
            report = self._process_file(path, minimizer)
            summary.files.append(report)
            if report.outcome is FilePassOutcome.RESTORE_FAILED:
                self.reporter.warning(f"{escape(str(path))} could not be restored; check it by hand.")

        self.progress.mark_done()
        self._discard_workspace()

        summary.duration_s = time.perf_counter() - start
        self._print_summary(summary)
        self.reporter.info("[bold green]DONE![/bold green]")
        return summary

    def _discard_workspace(self) -> None:
        try:
            self.workspace.discard()
        except OSError as exc:
            self.reporter.warning(f"Failed to delete {escape(str(self.workspace.path))}: {exc}")

    def _print_summary(self, summary: RunSummary) -> None:
        table = Table(title="includeprune summary", title_style="bold", border_style="dim")
        table.add_column("Files", justify="right")
        table.add_column("Committed", justify="right", style="green")
        table.add_column("Restored", justify="right", style="yellow")
        table.add_column("Restore failed", justify="right", style="red")
        table.add_column("Removed directives", justify="right", style="cyan")
        table.add_column("Duration", justify="right")
        table.add_row(
            str(len(summary.files)),
            str(len(summary.committed)),
            str(len(summary.restored)),
            str(len(summary.restore_failed)),
            str(summary.removed_total),
            f"{summary.duration_s:.1f}s",
        )
        self.reporter.table(table)
        for report in summary.restore_failed:
            self.reporter.error(f"Inconsistent file left behind: {escape(str(report.path))}")
