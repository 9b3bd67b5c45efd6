"""Diagnostics settings for reconciliation failures."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .env import read_env_int

DEFAULT_SNAPSHOT_LIMIT: Final[int] = 4096


@dataclass(frozen=True, slots=True)
class DiagnosticsConfig:
    """How much of the source/target state is kept on a wrapped failure."""

    snapshot_limit: int = DEFAULT_SNAPSHOT_LIMIT


def get_diagnostics_config() -> DiagnosticsConfig:
    limit = read_env_int(
        "MERGIPY_SNAPSHOT_LIMIT",
        default=DEFAULT_SNAPSHOT_LIMIT,
        minimum=3,
    )
    return DiagnosticsConfig(snapshot_limit=limit)
