"""Unordered ("mixed") merge of a source iterable into a target collection.

Order is ignored: every source claims the first unclaimed matching target. Claims
are tracked by object identity so value-equal duplicates stay distinct.
"""

from __future__ import annotations

from collections.abc import MutableSequence, MutableSet
from logging import getLogger
from typing import TYPE_CHECKING, Any

from .contracts import is_rejected, is_removed, pair_matches

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .contracts import AfterHook, KeepFilter, MatchPredicate, MergeFunction

log = getLogger(__name__)

type MixedTargets[T] = MutableSequence[T] | MutableSet[T]


class _Claims[T]:
    """Identity-keyed set of targets already paired during one merge."""

    __slots__ = ("_by_id",)

    def __init__(self) -> None:
        self._by_id: dict[int, T] = {}

    def __contains__(self, target: object) -> bool:
        return id(target) in self._by_id

    def add(self, target: T) -> None:
        self._by_id[id(target)] = target


def merge_mixed[S, T, C: MutableSequence[Any] | MutableSet[Any]](
    sources: Iterable[S] | None,
    targets: C,
    matches: MatchPredicate[S, T],
    merge: MergeFunction[S, T],
    keep: KeepFilter[T] | None = None,
    after: AfterHook[C] | None = None,
) -> C:
    """Merge ``sources`` into ``targets`` in place, ignoring order.

    ``None`` sources mean "no items": the collection is cleared and returned.
    Targets nobody claimed are passed through ``merge(None, target)`` and removed
    unless the tombstone result survives ``keep``.
    """

    _require_mixed_targets(targets)

    if sources is None:
        targets.clear()
        return targets

    claims: _Claims[T] = _Claims()
    created, replaced = _merge_updates(sources, targets, claims, matches, merge, keep)
    removed = _merge_deletes(targets, claims, merge, keep)

    log.debug(
        "Mixed merge finished: created=%d, replaced=%d, removed=%d, size=%d",
        created,
        replaced,
        removed,
        len(targets),
    )

    if after is not None:
        after(targets)

    return targets


def _require_mixed_targets(targets: object) -> None:
    if targets is None:
        raise TypeError("Target collection must not be None")
    if not isinstance(targets, MutableSequence | MutableSet):
        raise TypeError(
            f"Target collection must be a mutable sequence or set, got {type(targets).__name__}"
        )


def _merge_updates[S, T](
    sources: Iterable[S],
    targets: MixedTargets[T],
    claims: _Claims[T],
    matches: MatchPredicate[S, T],
    merge: MergeFunction[S, T],
    keep: KeepFilter[T] | None,
) -> tuple[int, int]:
    created = 0
    replaced = 0
    for source in sources:
        index, target = _find_unclaimed(source, targets, claims, matches)
        merged = merge(source, target)

        if is_rejected(merged, keep):
            continue

        if index is None:
            _add(targets, merged)
            created += 1
        elif merged is not target:
            _replace(targets, index, target, merged)
            replaced += 1

        claims.add(merged)  # pyright: ignore[reportArgumentType]
    return created, replaced


def _find_unclaimed[S, T](
    source: S,
    targets: MixedTargets[T],
    claims: _Claims[T],
    matches: MatchPredicate[S, T],
) -> tuple[int | None, T | None]:
    for index, candidate in enumerate(targets):
        if candidate in claims:
            continue
        if pair_matches(matches, source, candidate):
            return index, candidate
    return None, None


def _add[T](targets: MixedTargets[T], value: T | None) -> None:
    if isinstance(targets, MutableSequence):
        targets.append(value)  # pyright: ignore[reportArgumentType]
    else:
        targets.add(value)  # pyright: ignore[reportArgumentType]


def _replace[T](targets: MixedTargets[T], index: int, old: T | None, new: T | None) -> None:
    if isinstance(targets, MutableSequence):
        targets[index] = new  # pyright: ignore[reportArgumentType]
        return
    targets.discard(old)  # pyright: ignore[reportArgumentType]
    targets.add(new)  # pyright: ignore[reportArgumentType]


def _merge_deletes[S, T](
    targets: MixedTargets[T],
    claims: _Claims[T],
    merge: MergeFunction[S, T],
    keep: KeepFilter[T] | None,
) -> int:
    if isinstance(targets, MutableSequence):
        return _merge_sequence_deletes(targets, claims, merge, keep)
    return _merge_set_deletes(targets, claims, merge, keep)


def _merge_sequence_deletes[S, T](
    targets: MutableSequence[T],
    claims: _Claims[T],
    merge: MergeFunction[S, T],
    keep: KeepFilter[T] | None,
) -> int:
    removed = 0
    index = 0
    while index < len(targets):
        target = targets[index]
        if target in claims:
            index += 1
            continue

        tombstone = merge(None, target)
        if is_removed(tombstone, keep):
            del targets[index]
            removed += 1
            continue

        if tombstone is not target:
            targets[index] = tombstone  # pyright: ignore[reportArgumentType]
        index += 1
    return removed


def _merge_set_deletes[S, T](
    targets: MutableSet[T],
    claims: _Claims[T],
    merge: MergeFunction[S, T],
    keep: KeepFilter[T] | None,
) -> int:
    removed = 0
    tombstones: list[T] = []
    for target in list(targets):
        if target in claims:
            continue

        tombstone = merge(None, target)
        if is_removed(tombstone, keep):
            targets.discard(target)
            removed += 1
            continue

        if tombstone is not target:
            targets.discard(target)
            tombstones.append(tombstone)  # pyright: ignore[reportArgumentType]

    for tombstone in tombstones:
        targets.add(tombstone)
    return removed
