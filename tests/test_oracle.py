"""Tests for the build-tool oracle and the working project copy.

The running Python interpreter stands in for the build tool and the
"project" is a small script deciding the exit status.
"""

import sys
from pathlib import Path

import pytest

from includeprune.build.oracle import BuildOracle
from includeprune.build.workspace import ProjectWorkspace, WorkspaceError

DEFAULT_ARGS = ["{project}", "/Build", "{configuration}"]


def _script(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "build.py"
    path.write_text(body)
    return path


class TestBuildOracle:
    def test_zero_exit_is_success(self, tmp_path: Path):
        project = _script(tmp_path, "import sys\nsys.exit(0)\n")
        assert BuildOracle(Path(sys.executable), DEFAULT_ARGS).verify(project, "Debug") is True

    def test_nonzero_exit_is_failure(self, tmp_path: Path):
        project = _script(tmp_path, "import sys\nsys.exit(3)\n")
        assert BuildOracle(Path(sys.executable), DEFAULT_ARGS).verify(project, "Debug") is False

    def test_configuration_passed_through(self, tmp_path: Path):
        project = _script(
            tmp_path,
            "import sys\nsys.exit(0 if sys.argv[1:] == ['/Build', 'Release'] else 1)\n",
        )
        oracle = BuildOracle(Path(sys.executable), DEFAULT_ARGS)
        assert oracle.verify(project, "Release") is True
        assert oracle.verify(project, "Debug") is False
        assert oracle.invocations == 2

    def test_missing_tool_is_failure(self, tmp_path: Path):
        oracle = BuildOracle(tmp_path / "no-such-devenv", DEFAULT_ARGS)
        assert oracle.verify(tmp_path / "app.sln", "Debug") is False

    def test_timeout_is_failure(self, tmp_path: Path):
        project = _script(tmp_path, "import time\ntime.sleep(30)\n")
        oracle = BuildOracle(Path(sys.executable), DEFAULT_ARGS, timeout=0.5)
        assert oracle.verify(project, "Debug") is False

    def test_command_formatting(self):
        oracle = BuildOracle(Path("devenv.exe"), DEFAULT_ARGS)
        assert oracle.command(Path("app.sln"), "Debug") == ["devenv.exe", "app.sln", "/Build", "Debug"]

    def test_zero_timeout_means_unlimited(self):
        assert BuildOracle(Path("make"), [], timeout=0).timeout is None


class TestProjectWorkspace:
    def test_create_and_discard(self, tmp_path: Path):
        project = tmp_path / "app.sln"
        project.write_text("solution\n")
        ws = ProjectWorkspace(project)

        copy = ws.create()
        assert copy == tmp_path / "app_copy.sln"
        assert copy.read_text() == "solution\n"

        ws.discard()
        assert not copy.exists()
        assert project.exists()

    def test_missing_project_raises(self, tmp_path: Path):
        with pytest.raises(WorkspaceError):
            ProjectWorkspace(tmp_path / "missing.sln").create()

    def test_discard_twice_is_fine(self, tmp_path: Path):
        project = tmp_path / "app.sln"
        project.write_text("x")
        ws = ProjectWorkspace(project)
        ws.create()
        ws.discard()
        ws.discard()
