"""Shared logging helpers for mergipy."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .env import read_env_str
from .errors import InvalidConfigurationError


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    level: int = logging.INFO


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger once with sensible defaults.

    Parameters mirror ``logging.basicConfig`` with a simplified contract: we default
    to INFO level and a terse format suitable for CLI output. Pass ``force=True`` to
    reconfigure during tests or specialised entry points.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )


def parse_log_level(name: str) -> int:
    """Translate a level name such as ``"debug"`` into its ``logging`` constant."""

    level = logging.getLevelNamesMapping().get(name.strip().upper())
    if level is None:
        raise InvalidConfigurationError(f"Unknown log level: {name}")
    return level


def get_logging_config() -> LoggingConfig:
    raw = read_env_str("MERGIPY_LOG_LEVEL")
    if raw is None:
        return LoggingConfig()
    return LoggingConfig(level=parse_log_level(raw))
