"""Configuration schema: dataclasses for every config section."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List


@dataclass
class FilesConfig:
    extensions: List[str] = field(default_factory=lambda: [".cpp"])
    exclude: List[str] = field(default_factory=list)  # globs, matched against the relative path
    encoding: str = "utf-8"


@dataclass
class DirectivesConfig:
    marker: str = "#include"
    comment_prefixes: List[str] = field(default_factory=lambda: ["//"])


@dataclass
class BuildConfig:
    # Visual Studio devenv convention: devenv <sln> /Build <config>
    args: List[str] = field(default_factory=lambda: ["{project}", "/Build", "{configuration}"])
    timeout_seconds: float = 3600.0  # 0 disables the timeout
    show_output: bool = False


@dataclass
class StateConfig:
    progress_file: str = "includeprune.progress"
    log_file: str = "includeprune.log"
    backup_suffix: str = "_backup"
    project_copy_suffix: str = "_copy"
    done_sentinel: str = "<<DONE>>"


@dataclass
class Settings:
    """Everything that can come from .includeprune.toml."""

    files: FilesConfig = field(default_factory=FilesConfig)
    directives: DirectivesConfig = field(default_factory=DirectivesConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    state: StateConfig = field(default_factory=StateConfig)


@dataclass(frozen=True)
class RunConfig:
    """One run's configuration, built once at startup and shared by every component.

    A single run owns the project and source tree exclusively; running two
    instances against the same tree is not supported.
    """

    build_tool: Path
    project: Path
    configuration: str
    source_root: Path
    settings: Settings = field(default_factory=Settings)

    @property
    def progress_file(self) -> Path:
        return Path(self.settings.state.progress_file)

    @property
    def log_file(self) -> Path:
        return Path(self.settings.state.log_file)
