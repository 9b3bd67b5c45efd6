"""Working set of target elements displaced during one ordered merge."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .contracts import MatchPredicate


@dataclass(slots=True)
class RescuePool[T]:
    """Insertion-ordered pool of removed targets, consulted before creating new ones.

    A pool lives for a single merge call. Entries are scanned linearly; the first
    entry that is the source itself or matches it is handed back and forgotten.
    """

    _entries: list[T] = field(default_factory=list["T"])

    def __len__(self) -> int:
        return len(self._entries)

    def push(self, target: T) -> None:
        self._entries.append(target)

    def rescue[S](self, source: S, matches: MatchPredicate[S, T]) -> T | None:
        for index, candidate in enumerate(self._entries):
            if candidate is source or (
                source is not None and candidate is not None and matches(source, candidate)
            ):
                del self._entries[index]
                return candidate
        return None
