"""includeprune CLI: Typer entry point and exit codes."""

from __future__ import annotations

from enum import IntEnum
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from includeprune import __version__

app = typer.Typer(
    name="includeprune",
    help="Remove #include directives your build does not need.",
    add_completion=False,
)

console = Console(stderr=True)


class ExitCode(IntEnum):
    COMPLETED = 0
    ALREADY_COMPLETE = 1
    BAD_ARGUMENTS = 2
    BASELINE_FAILED = 3
    ENUMERATION_FAILED = 4
    WORKSPACE_FAILED = 5
    RECOVERY_FAILED = 6


USAGE = """\
Usage:
  includeprune <build-tool> <project> <config> <src-dir>
Info:
  <build-tool> - path to the build tool, e.g. C:\\Program Files (x86)\\Microsoft Visual Studio 11.0\\Common7\\IDE\\devenv.exe
  <project>    - path to your project/solution, e.g. C:\\my_project\\my_project.sln
  <config>     - build configuration to use, e.g. Debug
  <src-dir>    - directory containing all source files to be optimized, e.g. C:\\my_project\\src
Example command line:
  includeprune "C:\\...\\devenv.exe" "C:\\my_project\\my_project.sln" Debug "C:\\my_project\\src"
"""


def _exit_code_for(outcome) -> ExitCode:
    from includeprune.engine import RunOutcome

    return {
        RunOutcome.COMPLETED: ExitCode.COMPLETED,
        RunOutcome.ALREADY_COMPLETE: ExitCode.ALREADY_COMPLETE,
        RunOutcome.BASELINE_FAILED: ExitCode.BASELINE_FAILED,
        RunOutcome.ENUMERATION_FAILED: ExitCode.ENUMERATION_FAILED,
        RunOutcome.WORKSPACE_FAILED: ExitCode.WORKSPACE_FAILED,
        RunOutcome.RECOVERY_FAILED: ExitCode.RECOVERY_FAILED,
    }[outcome]


def _usage_error(message: Optional[str] = None) -> typer.Exit:
    if message:
        console.print(f"[bold red]Error:[/bold red] {message}")
    console.print(f"includeprune {__version__}", highlight=False)
    console.print(USAGE, markup=False, highlight=False)
    return typer.Exit(code=ExitCode.BAD_ARGUMENTS)


def _version_callback(value: bool) -> None:
    if value:
        print(f"includeprune {__version__}")
        raise typer.Exit()


@app.command()
def main(
    build_tool: Optional[str] = typer.Argument(None, help="Build tool executable, e.g. devenv.exe"),
    project: Optional[str] = typer.Argument(None, help="Project or solution file to build"),
    configuration: Optional[str] = typer.Argument(None, help="Build configuration, e.g. Debug"),
    source_dir: Optional[str] = typer.Argument(None, help="Directory with the source files to optimize"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .includeprune.toml"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Per-build timeout in seconds (0 = none)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
) -> None:
    """Try removing every #include under SOURCE_DIR, keeping only those the build needs.

    Runs can take hours; interrupt at any time and rerun with the same
    arguments to resume. Do not run two instances on the same tree.
    """
    from includeprune.build.oracle import BuildOracle
    from includeprune.config.loader import ConfigError, load_config
    from includeprune.config.schema import RunConfig
    from includeprune.engine import Orchestrator
    from includeprune.output.reporter import Reporter

    if None in (build_tool, project, configuration, source_dir):
        raise _usage_error()

    # --- Load config ---
    try:
        settings = load_config(Path.cwd(), config)
    except ConfigError as exc:
        raise _usage_error(f"Config error: {exc}") from exc

    if timeout is not None:
        if timeout < 0:
            raise _usage_error(f"Invalid timeout: {timeout}")
        settings.build.timeout_seconds = timeout

    run_config = RunConfig(
        build_tool=Path(build_tool),
        project=Path(project).resolve(),
        configuration=configuration,
        source_root=Path(source_dir).resolve(),
        settings=settings,
    )

    reporter = Reporter(run_config.log_file, verbose=verbose)
    reporter.info("=== includeprune ===")
    reporter.debug(f"Project: {run_config.project}")
    reporter.debug(f"Configuration: {run_config.configuration}")
    reporter.debug(f"Sources: {run_config.source_root}")
    reporter.debug(f"Progress file: {run_config.progress_file}")

    oracle = BuildOracle(
        run_config.build_tool,
        settings.build.args,
        timeout=settings.build.timeout_seconds,
        show_output=settings.build.show_output,
    )
    summary = Orchestrator(run_config, oracle, reporter).run()
    reporter.debug(f"Build invocations: {oracle.invocations}")

    raise typer.Exit(code=_exit_code_for(summary.outcome))
