"""Source file discovery and per-file line minimization."""

from includeprune.minimizer.discovery import EnumerationError, find_source_files
from includeprune.minimizer.lines import (
    LineDecision,
    LineMinimizer,
    MinimizationResult,
    is_candidate_line,
)

__all__ = [
    "EnumerationError",
    "LineDecision",
    "LineMinimizer",
    "MinimizationResult",
    "find_source_files",
    "is_candidate_line",
]
