"""Shared test fixtures: temporary source trees, scripted oracles, run configs."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

from includeprune.config.schema import RunConfig, Settings
from includeprune.output.reporter import Reporter

Snapshot = Dict[str, str]


class ScriptedOracle:
    """Deterministic stand-in for the build tool.

    On every call it reads the current text of each ``.cpp`` file under
    *root* (backups excluded) and asks *predicate* whether that tree
    "builds". *fail_on_call* makes the n-th call (1-based) raise *exc*.
    """

    def __init__(
        self,
        root: Path,
        predicate: Callable[[Snapshot], bool],
        *,
        fail_on_call: Optional[int] = None,
        exc: Optional[BaseException] = None,
    ) -> None:
        self.root = root
        self.predicate = predicate
        self.fail_on_call = fail_on_call
        self.exc = exc
        self.calls: List[Path] = []
        self.snapshots: List[Snapshot] = []

    def snapshot(self) -> Snapshot:
        return {
            p.relative_to(self.root).as_posix(): p.read_text(encoding="utf-8")
            for p in sorted(self.root.rglob("*.cpp"))
            if not p.stem.endswith("_backup")
        }

    def verify(self, project: Path, configuration: str) -> bool:
        self.calls.append(project)
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            assert self.exc is not None
            raise self.exc
        snap = self.snapshot()
        self.snapshots.append(snap)
        return self.predicate(snap)


class SimulatedCrash(BaseException):
    """Escapes the per-file error handling, like the process being killed."""


def always(_snap: Snapshot) -> bool:
    return True


def never(_snap: Snapshot) -> bool:
    return False


def requires(needed: Dict[str, List[str]]) -> Callable[[Snapshot], bool]:
    """Build succeeds only while each named file still contains its listed lines."""

    def predicate(snap: Snapshot) -> bool:
        return all(
            line in snap.get(name, "").splitlines()
            for name, lines in needed.items()
            for line in lines
        )

    return predicate


MAIN_CPP = textwrap.dedent("""\
    #include "main.h"
    #include <vector>
    // #include "commented.h"
    #include <string>

    int main() { return 0; }
""")

UTIL_CPP = textwrap.dedent("""\
    #include "util.h"
    #include <vector>

    int twice(int x) { return 2 * x; }
""")

PLAIN_CPP = "int nothing_included() { return 1; }\n"


@pytest.fixture
def project_tree(tmp_path: Path) -> Path:
    """A fake project: ``app.sln`` plus three .cpp files under ``src/``."""
    (tmp_path / "app.sln").write_text("solution\n")
    src = tmp_path / "src"
    (src / "lib").mkdir(parents=True)
    (src / "main.cpp").write_text(MAIN_CPP)
    (src / "lib" / "util.cpp").write_text(UTIL_CPP)
    (src / "plain.cpp").write_text(PLAIN_CPP)
    (src / "notes.txt").write_text('#include "not_a_source.h"\n')
    return tmp_path


@pytest.fixture
def run_config(project_tree: Path) -> RunConfig:
    settings = Settings()
    settings.state.progress_file = str(project_tree / "run.progress")
    settings.state.log_file = str(project_tree / "run.log")
    return RunConfig(
        build_tool=Path("devenv.exe"),
        project=project_tree / "app.sln",
        configuration="Debug",
        source_root=(project_tree / "src").resolve(),
        settings=settings,
    )


@pytest.fixture
def reporter(run_config: RunConfig) -> Reporter:
    return Reporter(run_config.log_file)


@pytest.fixture
def oracle_for(project_tree: Path):
    """Factory: ``oracle_for(predicate, **kw)`` -> ScriptedOracle over ``src/``."""

    def make(predicate: Callable[[Snapshot], bool], **kwargs) -> ScriptedOracle:
        return ScriptedOracle(project_tree / "src", predicate, **kwargs)

    return make


def tree_bytes(root: Path) -> Dict[str, bytes]:
    """Every file under *root*, keyed by relative path."""
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }
