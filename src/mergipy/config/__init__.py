"""Application configuration helpers."""

from __future__ import annotations

from .diagnostics import DEFAULT_SNAPSHOT_LIMIT, DiagnosticsConfig, get_diagnostics_config
from .env import read_env_int, read_env_str
from .errors import ConfigurationError, InvalidConfigurationError
from .logging import LoggingConfig, configure_logging, get_logging_config, parse_log_level

__all__ = [
    "DEFAULT_SNAPSHOT_LIMIT",
    "ConfigurationError",
    "DiagnosticsConfig",
    "InvalidConfigurationError",
    "LoggingConfig",
    "configure_logging",
    "get_diagnostics_config",
    "get_logging_config",
    "parse_log_level",
    "read_env_int",
    "read_env_str",
]
