"""Configuration loading and schema."""

from includeprune.config.loader import ConfigError, load_config
from includeprune.config.schema import (
    BuildConfig,
    DirectivesConfig,
    FilesConfig,
    RunConfig,
    Settings,
    StateConfig,
)

__all__ = [
    "BuildConfig",
    "ConfigError",
    "DirectivesConfig",
    "FilesConfig",
    "RunConfig",
    "Settings",
    "StateConfig",
    "load_config",
]
