"""Merger base class: per-element merge rules plus collection entry points.

A concrete merger answers three questions about one source/target pair (does it
match, how is a target created, how is it updated). The collection methods feed
those answers to the reconciliation engine and take care of ``None`` handling,
hints and error wrapping.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from logging import getLogger
from typing import TYPE_CHECKING, Any

from mergipy.config.diagnostics import get_diagnostics_config
from mergipy.domain.reconciliation import (
    ReconciliationError,
    flatten_groups,
    merge_mixed,
    merge_mixed_groups,
    merge_ordered_collection,
    merge_ordered_groups,
    snapshot,
)

from .collections import CollectionKind, OrderedSet, freeze, is_ordered, new_collection
from .hints import DEFAULT_HINTS, MergeHints

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable, Iterable, Mapping, MutableMapping

    from mergipy.domain.reconciliation import MatchPredicate, MergeFunction

log = getLogger(__name__)

type TargetCollection[T] = list[T] | set[T] | OrderedSet[T]
type SortKey[T] = Callable[[T], Any]


class Merger[S, T](ABC):
    """Merges source records of type ``S`` into target records of type ``T``."""

    # -- single element ---------------------------------------------------

    def merge(
        self,
        source: S | None,
        target: T | None,
        hints: MergeHints = DEFAULT_HINTS,
    ) -> T | None:
        if source is None:
            if target is None:
                return None
            return self.merge_null(target, hints)

        if target is None or not self.is_unique_key_matching(source, target, hints):
            target = self.create(source, hints)

        return self.merge_non_null(source, target, hints.with_extras(target))

    def matches(
        self,
        source: S | None,
        target: T | None,
        hints: MergeHints = DEFAULT_HINTS,
    ) -> bool:
        if source is target:
            return True
        if source is None or target is None:
            return False
        return self.is_unique_key_matching(source, target, hints)

    @abstractmethod
    def is_unique_key_matching(self, source: S, target: T, hints: MergeHints) -> bool:
        """Whether ``source`` and ``target`` describe the same record."""

    @abstractmethod
    def create(self, source: S, hints: MergeHints) -> T:
        """Return a fresh target for ``source``; ``merge_non_null`` fills it afterwards."""

    @abstractmethod
    def merge_non_null(self, source: S, target: T, hints: MergeHints) -> T | None: ...

    def merge_null(self, target: T, hints: MergeHints) -> T | None:
        """Called for targets without a source. Returning ``None`` deletes them."""

        return None

    def merge_missing(self, target: T, hints: MergeHints) -> T | None:
        """Called instead of ``merge_null`` when ``keep_missing`` is set. Keeps ``target``."""

        return target

    def after_merge(self, targets: Any, hints: MergeHints) -> None:
        """Hook called once with the merged collection."""

    # -- collections -------------------------------------------------------

    def merge_into_list(
        self,
        sources: Iterable[S] | None,
        targets: list[T] | None,
        hints: MergeHints = DEFAULT_HINTS,
    ) -> Any:
        return self.merge_into_collection(sources, targets, CollectionKind.LIST, hints)

    def merge_into_set(
        self,
        sources: Iterable[S] | None,
        targets: set[T] | None,
        hints: MergeHints = DEFAULT_HINTS,
    ) -> Any:
        return self.merge_into_collection(sources, targets, CollectionKind.SET, hints)

    def merge_into_ordered_set(
        self,
        sources: Iterable[S] | None,
        targets: OrderedSet[T] | None,
        hints: MergeHints = DEFAULT_HINTS,
    ) -> Any:
        return self.merge_into_collection(sources, targets, CollectionKind.ORDERED_SET, hints)

    def merge_into_sorted(
        self,
        sources: Iterable[S] | None,
        targets: list[T] | None,
        *,
        key: SortKey[T] | None = None,
        reverse: bool = False,
        hints: MergeHints = DEFAULT_HINTS,
    ) -> Any:
        return self.merge_into_collection(
            sources, targets, CollectionKind.SORTED, hints, sort_key=key, reverse=reverse
        )

    def merge_into_collection(
        self,
        sources: Iterable[S] | None,
        targets: TargetCollection[T] | None,
        kind: CollectionKind,
        hints: MergeHints = DEFAULT_HINTS,
        *,
        sort_key: SortKey[T] | None = None,
        reverse: bool = False,
        ordered: bool | None = None,
    ) -> Any:
        """Merge ``sources`` into ``targets`` using the engine that fits ``kind``.

        ``ordered`` overrides the engine choice, e.g. to merge into a list while
        ignoring order. Returns the (possibly new) collection, a frozen copy for ``unmodifiable``
        hints, or ``None`` when both sides are ``None`` and ``or_empty`` is unset.
        """

        return self._merge_collection(
            None if sources is None else list(sources),
            targets,
            kind,
            hints,
            matches=_matches_for(self, hints),
            merge=_merge_for(self, hints),
            sort_key=sort_key,
            reverse=reverse,
            ordered=ordered,
        )

    def merge_map_into_collection[K](
        self,
        sources: Mapping[K, S] | None,
        targets: TargetCollection[T] | None,
        kind: CollectionKind,
        hints: MergeHints = DEFAULT_HINTS,
    ) -> Any:
        """Merge the values of ``sources``; each key is passed on as an extra hint."""

        pairs = None if sources is None else list(sources.items())
        return self._merge_pairs(pairs, targets, kind, hints)

    def merge_grouped_map_into_collection[K](
        self,
        sources: Mapping[K, Iterable[S]] | None,
        targets: TargetCollection[T] | None,
        kind: CollectionKind,
        hints: MergeHints = DEFAULT_HINTS,
    ) -> Any:
        """Flatten ``{key: [sources]}`` and merge it; the group key becomes an extra hint."""

        pairs = None if sources is None else flatten_groups(sources)
        return self._merge_pairs(pairs, targets, kind, hints)

    def merge_into_grouped_map[K: Hashable](
        self,
        sources: Iterable[S] | None,
        targets: MutableMapping[K, Any] | None,
        group_key: Callable[[S], K],
        kind: CollectionKind,
        hints: MergeHints = DEFAULT_HINTS,
        *,
        sort_key: SortKey[T] | None = None,
        reverse: bool = False,
    ) -> Any:
        """Group ``sources`` by ``group_key`` and merge each group into ``targets[key]``."""

        source_list = None if sources is None else list(sources)
        if source_list is None:
            if targets is None:
                return _finish({}, hints) if hints.or_empty else None
            source_list = []

        if targets is None:
            targets = {}
        elif hints.unmodifiable:
            targets = {key: _copy_collection(value, kind) for key, value in targets.items()}

        matches = _matches_for(self, hints)
        merge = _merge_for(self, hints)
        if hints.keep_missing:
            merge = _keeping_missing(merge, self, hints)
        grouped = merge_ordered_groups if is_ordered(kind) else merge_mixed_groups

        log.debug(
            "Merging %d sources into grouped %s map with %d keys",
            len(source_list),
            kind,
            len(targets),
        )
        try:
            grouped(
                source_list,
                targets,
                group_key,
                lambda: new_collection(kind),
                matches,
                merge,
                hints.keep_filter(),
            )
            for collection in targets.values():
                if kind is CollectionKind.SORTED:
                    collection.sort(key=sort_key, reverse=reverse)
                self.after_merge(collection, hints)
        except Exception as exc:
            raise _wrap_failure("grouped map", source_list, targets, exc) from exc

        return _finish(targets, hints)

    # -- internals ---------------------------------------------------------

    def _merge_pairs[K](
        self,
        pairs: list[tuple[K, S]] | None,
        targets: TargetCollection[T] | None,
        kind: CollectionKind,
        hints: MergeHints,
    ) -> Any:
        def matches(pair: tuple[K, S], target: T) -> bool:
            return self.matches(pair[1], target, hints.with_extras(pair[0]))

        def merge(pair: tuple[K, S] | None, target: T | None) -> T | None:
            if pair is None:
                return self.merge(None, target, hints)
            return self.merge(pair[1], target, hints.with_extras(pair[0]))

        return self._merge_collection(pairs, targets, kind, hints, matches=matches, merge=merge)

    def _merge_collection[P](
        self,
        sources: list[P] | None,
        targets: TargetCollection[T] | None,
        kind: CollectionKind,
        hints: MergeHints,
        *,
        matches: MatchPredicate[P, T],
        merge: MergeFunction[P, T],
        sort_key: SortKey[T] | None = None,
        reverse: bool = False,
        ordered: bool | None = None,
    ) -> Any:
        if sources is None:
            if targets is None:
                return _finish(new_collection(kind), hints) if hints.or_empty else None
            sources = []

        if targets is None:
            targets = new_collection(kind)
        elif hints.unmodifiable:
            targets = _copy_collection(targets, kind)

        if hints.keep_missing:
            merge = _keeping_missing(merge, self, hints)

        use_ordered = is_ordered(kind) if ordered is None else ordered
        log.debug("Merging %d sources into %s of %d targets", len(sources), kind, len(targets))
        try:
            if use_ordered:
                merge_ordered_collection(sources, targets, matches, merge, hints.keep_filter())
            else:
                merge_mixed(sources, targets, matches, merge, hints.keep_filter())
            if kind is CollectionKind.SORTED and isinstance(targets, list):
                targets.sort(key=sort_key, reverse=reverse)
            self.after_merge(targets, hints)
        except Exception as exc:
            raise _wrap_failure(str(kind), sources, targets, exc) from exc

        return _finish(targets, hints)


def _matches_for[S, T](merger: Merger[S, T], hints: MergeHints) -> MatchPredicate[S, T]:
    return lambda source, target: merger.matches(source, target, hints)


def _merge_for[S, T](merger: Merger[S, T], hints: MergeHints) -> MergeFunction[S, T]:
    return lambda source, target: merger.merge(source, target, hints)


def _keeping_missing[P, T](
    merge: MergeFunction[P, T],
    merger: Merger[Any, T],
    hints: MergeHints,
) -> MergeFunction[P, T]:
    def merge_keeping_missing(source: P | None, target: T | None) -> T | None:
        if source is None:
            return None if target is None else merger.merge_missing(target, hints)
        return merge(source, target)

    return merge_keeping_missing


def _copy_collection(collection: Any, kind: CollectionKind) -> Any:
    copy = new_collection(kind)
    if isinstance(copy, list):
        copy.extend(collection)
    else:
        for value in collection:
            copy.add(value)
    return copy


def _finish(collection: Any, hints: MergeHints) -> Any:
    if hints.unmodifiable:
        return freeze(collection)
    return collection


def _wrap_failure(
    what: str,
    sources: object,
    targets: object,
    exc: Exception,
) -> ReconciliationError:
    limit = get_diagnostics_config().snapshot_limit
    log.warning("Failed to merge sources into %s: %s", what, exc)
    return ReconciliationError(
        f"Failed to merge sources into {what}",
        source_snapshot=snapshot(sources, limit),
        target_snapshot=snapshot(targets, limit),
    )
