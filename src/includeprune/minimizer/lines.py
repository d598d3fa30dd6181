"""Greedy line-by-line minimization of one source file.

Each candidate directive is blanked in turn, the file is written to disk
and the oracle decides: if the project still builds the line is dropped
for good, otherwise its text is put back. Decisions are made top to
bottom and never revisited, so the result depends on line order and is
not guaranteed to be globally minimal when directives depend on each
other.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from includeprune.build.oracle import Oracle
from includeprune.config.schema import DirectivesConfig


class LineDecision(str, Enum):
    UNTESTED = "untested"
    KEPT = "kept"
    REMOVED = "removed"


@dataclass(frozen=True)
class MinimizationResult:
    """Outcome of one committed pass over a file."""

    path: Path
    decisions: Tuple[LineDecision, ...]  # one per candidate line, in file order
    removed_lines: Tuple[str, ...]

    @property
    def removed_count(self) -> int:
        return sum(1 for d in self.decisions if d is LineDecision.REMOVED)

    @property
    def kept_count(self) -> int:
        return sum(1 for d in self.decisions if d is LineDecision.KEPT)


def is_candidate_line(line: str, directives: DirectivesConfig) -> bool:
    """True if *line* holds an inclusion directive and is not a comment."""
    if directives.marker not in line:
        return False
    stripped = line.lstrip()
    return not any(stripped.startswith(p) for p in directives.comment_prefixes if p)


def _line_ending(line: str) -> str:
    body = line.rstrip("\r\n")
    return line[len(body):]


class LineMinimizer:
    """Run the trial-and-error pass over one file.

    *on_removed* is called with the text of every line found redundant.
    I/O errors propagate; the caller owns the backup and restores it.
    """

    def __init__(
        self,
        oracle: Oracle,
        project: Path,
        configuration: str,
        directives: DirectivesConfig,
        *,
        encoding: str = "utf-8",
        on_removed: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.oracle = oracle
        self.project = project
        self.configuration = configuration
        self.directives = directives
        self.encoding = encoding
        self.on_removed = on_removed

    def _read(self, path: Path) -> List[str]:
        with open(path, "r", encoding=self.encoding, errors="surrogateescape", newline="") as fh:
            return fh.read().splitlines(keepends=True)

    def _write(self, path: Path, lines: Sequence[str]) -> None:
        with open(path, "w", encoding=self.encoding, errors="surrogateescape", newline="") as fh:
            fh.write("".join(lines))

    def run(self, path: Path) -> MinimizationResult:
        lines = self._read(path)
        candidates = [i for i, line in enumerate(lines) if is_candidate_line(line, self.directives)]
        decisions = [LineDecision.UNTESTED] * len(candidates)
        removed: List[str] = []
        if not candidates:
            return MinimizationResult(path=path, decisions=(), removed_lines=())

        for slot, index in enumerate(candidates):
            original = lines[index]
            lines[index] = _line_ending(original)
            self._write(path, lines)

            if self.oracle.verify(self.project, self.configuration):
                decisions[slot] = LineDecision.REMOVED
                removed.append(original)
                if self.on_removed is not None:
                    self.on_removed(original)
            else:
                decisions[slot] = LineDecision.KEPT
                lines[index] = original

        dropped = {index for slot, index in enumerate(candidates) if decisions[slot] is LineDecision.REMOVED}
        final = [line for i, line in enumerate(lines) if i not in dropped]
        self._write(path, final)

        return MinimizationResult(
            path=path,
            decisions=tuple(decisions),
            removed_lines=tuple(removed),
        )
