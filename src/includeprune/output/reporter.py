"""Rich terminal reporter that mirrors every message into the run log."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text


class Reporter:
    """Prints to the terminal and appends the same text to *log_file*.

    Messages use Rich markup; the log gets the plain text with a timestamp.
    Errors go to stderr, everything else to stdout.
    """

    def __init__(
        self,
        log_file: Optional[Path] = None,
        *,
        verbose: bool = False,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
    ) -> None:
        self.log_file = log_file
        self.verbose = verbose
        self.console = console or Console(highlight=False)
        self.err_console = err_console or Console(stderr=True, highlight=False)

    def _log(self, message: str, *, markup: bool = True) -> None:
        if self.log_file is None:
            return
        plain = Text.from_markup(message).plain if markup else message
        stamp = time.strftime("%Y-%m-%d %H:%M:%S")
        with open(self.log_file, "a", encoding="utf-8") as fh:
            for line in plain.splitlines() or [""]:
                fh.write(f"{stamp} {line}\n")

    def info(self, message: str) -> None:
        self.console.print(message)
        self._log(message)

    def debug(self, message: str) -> None:
        if self.verbose:
            self.info(f"[dim]{message}[/dim]")

    def warning(self, message: str) -> None:
        self.err_console.print(f"[bold yellow]Warning:[/bold yellow] {message}")
        self._log(f"WARNING: {message}")

    def error(self, message: str) -> None:
        self.err_console.print(f"[bold red]Error:[/bold red] {message}")
        self._log(f"ERROR: {message}")

    # ---- domain events ----

    def redundant(self, line: str) -> None:
        self.info(f"  [green]Redundant[/green] {escape(line.rstrip())}")

    def table(self, table: Table) -> None:
        self.console.print(table)
        if self.log_file is not None:
            capture = Console(width=120, no_color=True)
            with capture.capture() as cap:
                capture.print(table)
            self._log(cap.get(), markup=False)

