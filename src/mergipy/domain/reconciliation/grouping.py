"""Grouped merges: sources bucketed by key into a map of target collections."""

from __future__ import annotations

from collections.abc import Callable, MutableMapping, MutableSequence, MutableSet
from logging import getLogger
from typing import TYPE_CHECKING, Any

from .ordered import merge_ordered_collection
from .unordered import merge_mixed

if TYPE_CHECKING:
    from collections.abc import Hashable, Iterable, Mapping

    from .contracts import AfterHook, KeepFilter, MatchPredicate, MergeFunction

log = getLogger(__name__)

type GroupedTargets[K, C] = MutableMapping[K, C]
type GroupEngine = Callable[..., Any]


def group_by_key[K: Hashable, S](sources: Iterable[S], key: Callable[[S], K]) -> dict[K, list[S]]:
    """Bucket ``sources`` by ``key``, keeping first-seen key order. ``None`` is a valid key."""

    groups: dict[K, list[S]] = {}
    for source in sources:
        groups.setdefault(key(source), []).append(source)
    return groups


def flatten_groups[K, S](mapping: Mapping[K, Iterable[S]] | None) -> list[tuple[K, S]]:
    """Turn ``{key: [a, b]}`` into ``[(key, a), (key, b)]``; ``None`` groups are skipped."""

    if mapping is None:
        return []
    return [
        (key, value) for key, values in mapping.items() if values is not None for value in values
    ]


def merge_mixed_groups[S, T, K: Hashable, C: MutableSequence[Any] | MutableSet[Any]](
    sources: Iterable[S] | None,
    target_map: MutableMapping[K, C],
    key: Callable[[S], K],
    new_collection: Callable[[], C],
    matches: MatchPredicate[S, T],
    merge: MergeFunction[S, T],
    keep: KeepFilter[T] | None = None,
    after: AfterHook[MutableMapping[K, C]] | None = None,
) -> MutableMapping[K, C]:
    """Merge each source group into its target collection, ignoring order."""

    return _merge_groups(
        merge_mixed, sources, target_map, key, new_collection, matches, merge, keep, after
    )


def merge_ordered_groups[S, T, K: Hashable, C: MutableSequence[Any] | MutableSet[Any]](
    sources: Iterable[S] | None,
    target_map: MutableMapping[K, C],
    key: Callable[[S], K],
    new_collection: Callable[[], C],
    matches: MatchPredicate[S, T],
    merge: MergeFunction[S, T],
    keep: KeepFilter[T] | None = None,
    after: AfterHook[MutableMapping[K, C]] | None = None,
) -> MutableMapping[K, C]:
    """Merge each source group into its target collection, keeping source order."""

    return _merge_groups(
        merge_ordered_collection,
        sources,
        target_map,
        key,
        new_collection,
        matches,
        merge,
        keep,
        after,
    )


def _merge_groups[S, T, K: Hashable, C: MutableSequence[Any] | MutableSet[Any]](
    engine: GroupEngine,
    sources: Iterable[S] | None,
    target_map: MutableMapping[K, C],
    key: Callable[[S], K],
    new_collection: Callable[[], C],
    matches: MatchPredicate[S, T],
    merge: MergeFunction[S, T],
    keep: KeepFilter[T] | None,
    after: AfterHook[MutableMapping[K, C]] | None,
) -> MutableMapping[K, C]:
    if target_map is None:
        raise TypeError("Target map must not be None")

    if sources is None:
        target_map.clear()
        return target_map

    groups = group_by_key(sources, key)
    # keys only present in the target still need their members tombstoned
    for existing_key in list(target_map):
        groups.setdefault(existing_key, [])

    for group_key, group in groups.items():
        collection = target_map.get(group_key)
        if collection is None:
            collection = new_collection()

        engine(group, collection, matches, merge, keep)

        if collection:
            target_map[group_key] = collection
        elif group_key in target_map:
            del target_map[group_key]

    log.debug("Grouped merge finished: groups=%d", len(target_map))

    if after is not None:
        after(target_map)
    return target_map
