"""Build tool interface: the oracle and the working project copy."""

from includeprune.build.oracle import BuildOracle, Oracle
from includeprune.build.workspace import ProjectWorkspace, WorkspaceError

__all__ = [
    "BuildOracle",
    "Oracle",
    "ProjectWorkspace",
    "WorkspaceError",
]
