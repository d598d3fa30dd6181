"""Terminal and log-file reporting."""

from includeprune.output.reporter import Reporter

__all__ = ["Reporter"]
