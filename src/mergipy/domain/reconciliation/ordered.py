"""Order-preserving merge of a source sequence into a target sequence.

The walk follows an alignment table over the original target order. Targets
removed along the way go to a rescue pool so a source appearing later can pick
them up again instead of creating a fresh element.
"""

from __future__ import annotations

from collections.abc import MutableSequence, MutableSet
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any

from .alignment import build_alignment_table, prefers_insertion
from .contracts import is_rejected, is_removed, pair_matches
from .rescue import RescuePool

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .alignment import AlignmentTable
    from .contracts import AfterHook, KeepFilter, MatchPredicate, MergeFunction

log = getLogger(__name__)


@dataclass(slots=True)
class _WalkStats:
    matched: int = 0
    added: int = 0
    rescued: int = 0
    relocated: int = 0
    removed: int = 0


@dataclass(slots=True)
class _OrderedWalk[S, T]:
    sources: Sequence[S]
    targets: MutableSequence[T]
    table: AlignmentTable
    matches: MatchPredicate[S, T]
    merge: MergeFunction[S, T]
    keep: KeepFilter[T] | None
    pool: RescuePool[T]
    stats: _WalkStats
    source_index: int = 0
    read_index: int = 0
    write_index: int = 0

    def run(self) -> None:
        while self.source_index < len(self.sources) and self.write_index < len(self.targets):
            source = self.sources[self.source_index]
            target = self.targets[self.write_index]

            if pair_matches(self.matches, source, target):
                self._update(source, target)
            elif prefers_insertion(self.table, self.source_index, self.read_index):
                self._insert(source, self._rescue_or_relocate(source))
            else:
                self._remove(target)

        while self.write_index < len(self.targets):
            self._remove(self.targets[self.write_index])

        while self.source_index < len(self.sources):
            source = self.sources[self.source_index]
            self._insert(source, self._rescue(source))

    def _update(self, source: S, target: T) -> None:
        merged = self.merge(source, target)
        self.source_index += 1
        self.read_index += 1

        if is_rejected(merged, self.keep):
            del self.targets[self.write_index]
            self.pool.push(target)
            self.stats.removed += 1
            return

        self.targets[self.write_index] = merged  # pyright: ignore[reportArgumentType]
        self.write_index += 1
        self.stats.matched += 1

    def _insert(self, source: S, target: T | None) -> None:
        merged = self.merge(source, target)
        self.source_index += 1

        if is_rejected(merged, self.keep):
            return

        self.targets.insert(self.write_index, merged)  # pyright: ignore[reportArgumentType]
        self.write_index += 1
        if target is None:
            self.stats.added += 1

    def _remove(self, target: T) -> None:
        tombstone = self.merge(None, target)
        self.read_index += 1

        if is_removed(tombstone, self.keep):
            del self.targets[self.write_index]
            self.pool.push(target)
            self.stats.removed += 1
            return

        self.targets[self.write_index] = tombstone  # pyright: ignore[reportArgumentType]
        self.write_index += 1

    def _rescue(self, source: S) -> T | None:
        rescued = self.pool.rescue(source, self.matches)
        if rescued is not None:
            self.stats.rescued += 1
        return rescued

    def _rescue_or_relocate(self, source: S) -> T | None:
        rescued = self._rescue(source)
        if rescued is not None:
            return rescued

        for index in range(self.write_index + 1, len(self.targets)):
            if pair_matches(self.matches, source, self.targets[index]):
                self.stats.relocated += 1
                return self.targets.pop(index)
        return None


def merge_ordered[S, T, C: MutableSequence[Any]](
    sources: Iterable[S] | None,
    targets: C,
    matches: MatchPredicate[S, T],
    merge: MergeFunction[S, T],
    keep: KeepFilter[T] | None = None,
    after: AfterHook[C] | None = None,
) -> C:
    """Merge ``sources`` into ``targets`` in place, keeping the source order.

    Matched targets are updated where they stand, unmatched sources are inserted
    at the write cursor and unmatched targets are tombstoned with
    ``merge(None, target)``. ``None`` sources count as an empty sequence.
    """

    if targets is None:
        raise TypeError("Target collection must not be None")
    if not isinstance(targets, MutableSequence):
        raise TypeError(
            f"Target collection must be a mutable sequence, got {type(targets).__name__}"
        )

    source_list: list[S] = [] if sources is None else list(sources)
    table = build_alignment_table(source_list, targets, matches)
    stats = _WalkStats()

    _OrderedWalk(
        sources=source_list,
        targets=targets,
        table=table,
        matches=matches,
        merge=merge,
        keep=keep,
        pool=RescuePool(),
        stats=stats,
    ).run()

    log.debug(
        "Ordered merge finished: matched=%d, added=%d, rescued=%d, relocated=%d, removed=%d",
        stats.matched,
        stats.added,
        stats.rescued,
        stats.relocated,
        stats.removed,
    )

    if after is not None:
        after(targets)

    return targets


def merge_ordered_collection[S, T, C: MutableSequence[Any] | MutableSet[Any]](
    sources: Iterable[S] | None,
    targets: C,
    matches: MatchPredicate[S, T],
    merge: MergeFunction[S, T],
    keep: KeepFilter[T] | None = None,
    after: AfterHook[C] | None = None,
) -> C:
    """Ordered merge into any mutable collection, keeping the caller's instance.

    Sequences are merged in place. Other collections are merged through a list
    copy and then rebuilt with ``clear()`` and re-adding the result.
    """

    if isinstance(targets, MutableSequence):
        return merge_ordered(sources, targets, matches, merge, keep, after)
    if not isinstance(targets, MutableSet):
        raise TypeError(
            f"Target collection must be a mutable sequence or set, got {type(targets).__name__}"
        )

    working: list[T] = list(targets)
    merge_ordered(sources, working, matches, merge, keep)
    targets.clear()
    for value in working:
        targets.add(value)

    if after is not None:
        after(targets)
    return targets
