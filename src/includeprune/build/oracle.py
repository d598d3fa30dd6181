"""Build-tool subprocess wrapper: the pass/fail oracle for every removal."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import List, Optional, Protocol


class Oracle(Protocol):
    """Anything that can tell whether *project* builds in *configuration*."""

    def verify(self, project: Path, configuration: str) -> bool: ...


class BuildOracle:
    """Runs the external build tool and reports success as a boolean.

    Success means the process exited with status 0. Launch failures,
    timeouts and non-zero exits are all reported as ``False``; nothing
    is raised, so an inconclusive build never causes a line to be removed.
    """

    def __init__(
        self,
        tool: Path,
        args: List[str],
        *,
        timeout: Optional[float] = None,
        show_output: bool = False,
    ) -> None:
        self.tool = tool
        self.args = list(args)
        self.timeout = timeout or None  # 0 means no limit
        self.show_output = show_output
        self.invocations = 0

    def command(self, project: Path, configuration: str) -> List[str]:
        return [str(self.tool)] + [
            a.format(project=project, configuration=configuration) for a in self.args
        ]

    def verify(self, project: Path, configuration: str) -> bool:
        self.invocations += 1
        sink = None if self.show_output else subprocess.DEVNULL
        try:
            result = subprocess.run(
                self.command(project, configuration),
                stdin=subprocess.DEVNULL,
                stdout=sink,
                stderr=sink,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            return False
        except (OSError, ValueError):
            # tool missing, not executable, or a malformed command line
            return False
        return result.returncode == 0
