"""Errors raised around reconciliation calls."""

from __future__ import annotations

from typing import Final

ELLIPSIS: Final[str] = "..."


def abbreviate(text: str, limit: int) -> str:
    """Shorten ``text`` to at most ``limit`` characters, marking the cut with ``...``."""

    if limit < len(ELLIPSIS):
        raise ValueError(f"Limit must be >= {len(ELLIPSIS)}")
    if len(text) <= limit:
        return text
    return text[: limit - len(ELLIPSIS)] + ELLIPSIS


def snapshot(value: object, limit: int) -> str:
    """Diagnostic ``repr`` of ``value`` that never exceeds ``limit`` characters."""

    return abbreviate(repr(value), limit)


class ReconciliationError(RuntimeError):
    """Raised when merging sources into targets fails.

    Carries truncated snapshots of both sides so the failing call can be
    reconstructed from a log line. The original exception is chained as
    ``__cause__``.
    """

    def __init__(self, message: str, *, source_snapshot: str, target_snapshot: str) -> None:
        self.source_snapshot = source_snapshot
        self.target_snapshot = target_snapshot
        super().__init__(f"{message}: {source_snapshot} => {target_snapshot}")
