"""Merger over plain ``dict`` records identified by a key field."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Any

from mergipy.domain.merging import Merger

from .schema import Record

if TYPE_CHECKING:
    from mergipy.domain.merging import MergeHints

log = getLogger(__name__)


class RecordChange(StrEnum):
    SAME = "same"
    UPDATED = "updated"
    ADDED = "added"
    REMOVED = "removed"


@dataclass(frozen=True, slots=True)
class RecordChangeEntry:
    key: Any
    change: RecordChange


@dataclass(slots=True)
class ChangeLog:
    """What happened to each target record during one merge.

    Entries are tracked per target object: a record removed and later rescued
    by the ordered merge ends up with its final outcome only. The log holds on to
    every record it has seen so their ids stay unique while it lives.
    """

    _entries: dict[int, tuple[Record, RecordChangeEntry]] = field(
        default_factory=dict[int, tuple[Record, RecordChangeEntry]]
    )

    def record(self, target: Record, key: Any, change: RecordChange) -> None:
        self._entries[id(target)] = (target, RecordChangeEntry(key=key, change=change))

    @property
    def entries(self) -> list[RecordChangeEntry]:
        return [entry for _, entry in self._entries.values()]

    def count(self, change: RecordChange) -> int:
        return sum(1 for entry in self.entries if entry.change is change)

    def counts(self) -> dict[RecordChange, int]:
        return {change: self.count(change) for change in RecordChange}

    def summary(self) -> str:
        return ", ".join(f"{change}={count}" for change, count in self.counts().items())


class RecordMerger(Merger[Record, Record]):
    """Replaces the fields of matching target records with the source fields, in place."""

    def __init__(self, key: str, changes: ChangeLog | None = None) -> None:
        self.key = key
        self.changes = changes if changes is not None else ChangeLog()
        self._created: dict[int, Record] = {}

    def is_unique_key_matching(self, source: Record, target: Record, hints: MergeHints) -> bool:
        return self.key in target and source.get(self.key) == target.get(self.key)

    def create(self, source: Record, hints: MergeHints) -> Record:
        target: Record = {}
        self._created[id(target)] = target
        return target

    def merge_non_null(self, source: Record, target: Record, hints: MergeHints) -> Record | None:
        key = source.get(self.key)
        if id(target) in self._created:
            del self._created[id(target)]
            target.update(source)
            self.changes.record(target, key, RecordChange.ADDED)
            return target

        if target == source:
            self.changes.record(target, key, RecordChange.SAME)
            return target

        target.clear()
        target.update(source)
        self.changes.record(target, key, RecordChange.UPDATED)
        log.debug("Updated record %r", key)
        return target

    def merge_null(self, target: Record, hints: MergeHints) -> Record | None:
        self.changes.record(target, target.get(self.key), RecordChange.REMOVED)
        return None

    def merge_missing(self, target: Record, hints: MergeHints) -> Record | None:
        self.changes.record(target, target.get(self.key), RecordChange.SAME)
        return target
