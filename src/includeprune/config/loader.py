"""Load and merge configuration from .includeprune.toml, CLI flags, and env vars."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from includeprune.config.schema import (
    BuildConfig,
    DirectivesConfig,
    FilesConfig,
    Settings,
    StateConfig,
)

CONFIG_FILENAME = ".includeprune.toml"


class ConfigError(Exception):
    """Raised when config is malformed or unreadable."""


def find_config_file(base_dir: Path, override: Optional[str] = None) -> Optional[Path]:
    """Locate the config file. *override* takes precedence."""
    if override:
        p = Path(override)
        if not p.is_file():
            raise ConfigError(f"Config file not found: {override}")
        return p
    candidate = base_dir / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def _parse_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc


def _build_section(data: Dict[str, Any], cls: type, section: str):
    """Build a dataclass from a TOML section dict, ignoring unknown keys."""
    import dataclasses

    raw = data.get(section, {})
    if not isinstance(raw, dict):
        raise ConfigError(f"[{section}] must be a table")
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in raw.items() if k in valid_fields}
    return cls(**filtered)


def _require_str_list(value: Any, name: str) -> None:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{name} must be a list of strings")


def _require_str(value: Any, name: str) -> None:
    if not isinstance(value, str):
        raise ConfigError(f"{name} must be a string")


def _validate(settings: Settings) -> None:
    _require_str_list(settings.files.extensions, "files.extensions")
    _require_str_list(settings.files.exclude, "files.exclude")
    _require_str_list(settings.directives.comment_prefixes, "directives.comment_prefixes")
    _require_str_list(settings.build.args, "build.args")
    _require_str(settings.files.encoding, "files.encoding")
    _require_str(settings.directives.marker, "directives.marker")
    for name in ("progress_file", "log_file", "backup_suffix", "project_copy_suffix", "done_sentinel"):
        _require_str(getattr(settings.state, name), f"state.{name}")
    if not isinstance(settings.build.show_output, bool):
        raise ConfigError("build.show_output must be true or false")
    if not settings.directives.marker:
        raise ConfigError("directives.marker must not be empty")
    if not settings.files.extensions:
        raise ConfigError("files.extensions must list at least one extension")
    if not settings.state.backup_suffix or not settings.state.project_copy_suffix:
        raise ConfigError("state.backup_suffix and state.project_copy_suffix must not be empty")
    timeout = settings.build.timeout_seconds
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout < 0:
        raise ConfigError("build.timeout_seconds must be >= 0")


def _merge_env_overrides(settings: Settings) -> None:
    """Apply INCLUDEPRUNE_* environment variable overrides."""
    if val := os.environ.get("INCLUDEPRUNE_TIMEOUT"):
        try:
            timeout = float(val)
        except ValueError:
            pass
        else:
            if timeout >= 0:
                settings.build.timeout_seconds = timeout
    if val := os.environ.get("INCLUDEPRUNE_PROGRESS_FILE"):
        settings.state.progress_file = val
    if val := os.environ.get("INCLUDEPRUNE_LOG_FILE"):
        settings.state.log_file = val


def load_config(
    base_dir: Path,
    config_override: Optional[str] = None,
) -> Settings:
    """Load, validate, and return the Settings for a run."""
    config_path = find_config_file(base_dir, config_override)

    if config_path is None:
        settings = Settings()
    else:
        raw = _parse_toml(config_path)
        try:
            settings = Settings(
                files=_build_section(raw, FilesConfig, "files"),
                directives=_build_section(raw, DirectivesConfig, "directives"),
                build=_build_section(raw, BuildConfig, "build"),
                state=_build_section(raw, StateConfig, "state"),
            )
        except TypeError as exc:
            raise ConfigError(f"Invalid config in {config_path}: {exc}") from exc

    _merge_env_overrides(settings)
    _validate(settings)
    return settings
