"""Transformer base class: the read direction next to ``Merger``.

A transformer turns entities into values one at a time; the collection methods
build fresh lists, sets, sorted lists and keyed maps from the results. Unlike a
merge nothing is reconciled: the result is always a new collection. ``None``
results are dropped unless ``keep_null`` is set, ``unmodifiable`` freezes the
result and ``or_empty`` turns a ``None`` input into an empty result.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import MutableSequence
from logging import getLogger
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from mergipy.config.diagnostics import get_diagnostics_config
from mergipy.domain.reconciliation import (
    ReconciliationError,
    flatten_groups,
    group_by_key,
    snapshot,
)

from .collections import CollectionKind, freeze, new_collection
from .hints import DEFAULT_HINTS, MergeHints
from .merger import Merger

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable, Iterable, Iterator, Mapping

    from .merger import SortKey

log = getLogger(__name__)


class Transformer[E, D](ABC):
    """Transforms entities of type ``E`` into values of type ``D``."""

    def transform(self, entity: E | None, hints: MergeHints = DEFAULT_HINTS) -> D | None:
        if entity is None:
            return self.transform_null(hints)
        return self.transform_non_null(entity, hints)

    @abstractmethod
    def transform_non_null(self, entity: E, hints: MergeHints) -> D | None:
        """Return the value for ``entity``; ``None`` drops it from collections."""

    def transform_null(self, hints: MergeHints) -> D | None:
        return None

    def transform_each(
        self,
        entities: Iterable[E | None] | None,
        hints: MergeHints = DEFAULT_HINTS,
    ) -> Iterator[D | None] | None:
        """Lazily transform ``entities``. Failures surface while iterating."""

        if entities is None:
            return iter(()) if hints.or_empty else None
        return self._transformed(entities, hints, "stream")

    def transform_to_list(
        self,
        entities: Iterable[E | None] | None,
        hints: MergeHints = DEFAULT_HINTS,
    ) -> Any:
        return self.transform_to_collection(entities, CollectionKind.LIST, hints)

    def transform_to_set(
        self,
        entities: Iterable[E | None] | None,
        hints: MergeHints = DEFAULT_HINTS,
    ) -> Any:
        return self.transform_to_collection(entities, CollectionKind.SET, hints)

    def transform_to_ordered_set(
        self,
        entities: Iterable[E | None] | None,
        hints: MergeHints = DEFAULT_HINTS,
    ) -> Any:
        return self.transform_to_collection(entities, CollectionKind.ORDERED_SET, hints)

    def transform_to_sorted(
        self,
        entities: Iterable[E | None] | None,
        *,
        key: SortKey[D] | None = None,
        reverse: bool = False,
        hints: MergeHints = DEFAULT_HINTS,
    ) -> Any:
        return self.transform_to_collection(
            entities, CollectionKind.SORTED, hints, sort_key=key, reverse=reverse
        )

    def transform_to_collection(
        self,
        entities: Iterable[E | None] | None,
        kind: CollectionKind,
        hints: MergeHints = DEFAULT_HINTS,
        *,
        sort_key: SortKey[D] | None = None,
        reverse: bool = False,
    ) -> Any:
        if entities is None:
            if not hints.or_empty:
                return None
            entities = ()

        collection = self._collect(entities, kind, hints, sort_key, reverse)
        return freeze(collection) if hints.unmodifiable else collection

    def transform_grouped_map_to_collection[K](
        self,
        entities: Mapping[K, Iterable[E | None] | None] | None,
        kind: CollectionKind,
        hints: MergeHints = DEFAULT_HINTS,
        *,
        sort_key: SortKey[D] | None = None,
        reverse: bool = False,
    ) -> Any:
        """Flatten ``{key: [entities]}`` into one collection; the key becomes an extra hint."""

        if entities is None:
            if not hints.or_empty:
                return None
            entities = {}

        collection = new_collection(kind)
        pairs = flatten_groups(entities)
        try:
            for group_key, entity in pairs:
                value = self.transform(entity, hints.with_extras(group_key))
                if value is not None or hints.keep_null:
                    _add(collection, value)
            _sort(collection, kind, sort_key, reverse)
        except Exception as exc:
            raise _transform_failure(str(kind), pairs, collection, exc) from exc

        return freeze(collection) if hints.unmodifiable else collection

    def transform_to_map[K: Hashable](
        self,
        entities: Iterable[E | None] | None,
        key: Callable[[E], K],
        hints: MergeHints = DEFAULT_HINTS,
    ) -> Any:
        """Map ``key(entity)`` to the transformed entity. ``None`` entities are skipped."""

        if entities is None:
            if not hints.or_empty:
                return None
            entities = ()

        result: dict[K, D | None] = {}
        try:
            for entity in entities:
                if entity is None:
                    continue
                value = self.transform(entity, hints)
                if value is not None or hints.keep_null:
                    result[key(entity)] = value
        except Exception as exc:
            raise _transform_failure("map", entities, result, exc) from exc

        return MappingProxyType(result) if hints.unmodifiable else result

    def transform_to_grouped_map[K: Hashable](
        self,
        entities: Iterable[E | None] | None,
        group_key: Callable[[E], K],
        kind: CollectionKind,
        hints: MergeHints = DEFAULT_HINTS,
        *,
        sort_key: SortKey[D] | None = None,
        reverse: bool = False,
    ) -> Any:
        """Group entities by ``group_key`` and transform every group into a ``kind`` collection.

        A group whose entities all transform to ``None`` stays in the map as an
        empty collection.
        """

        if entities is None:
            if not hints.or_empty:
                return None
            entities = ()

        present = [entity for entity in entities if entity is not None]
        try:
            groups = group_by_key(present, group_key)
        except Exception as exc:
            raise _transform_failure("grouped map", present, None, exc) from exc

        result = {
            key: self._collect(group, kind, hints, sort_key, reverse)
            for key, group in groups.items()
        }
        return freeze(result) if hints.unmodifiable else result

    def transform_grouped_map[K](
        self,
        entities: Mapping[K, Iterable[E | None] | None] | None,
        kind: CollectionKind,
        hints: MergeHints = DEFAULT_HINTS,
        *,
        sort_key: SortKey[D] | None = None,
        reverse: bool = False,
    ) -> Any:
        """Transform ``{key: [entities]}`` group by group, passing each key as an extra hint.

        ``None`` groups are left out of the result.
        """

        if entities is None:
            if not hints.or_empty:
                return None
            entities = {}

        result = {
            key: self._collect(group, kind, hints.with_extras(key), sort_key, reverse)
            for key, group in entities.items()
            if group is not None
        }
        return freeze(result) if hints.unmodifiable else result

    # -- internals ---------------------------------------------------------

    def _transformed(
        self,
        entities: Iterable[E | None],
        hints: MergeHints,
        what: str,
    ) -> Iterator[D | None]:
        for entity in entities:
            try:
                value = self.transform(entity, hints)
            except Exception as exc:
                raise _transform_failure(what, entity, None, exc) from exc
            if value is not None or hints.keep_null:
                yield value

    def _collect(
        self,
        entities: Iterable[E | None],
        kind: CollectionKind,
        hints: MergeHints,
        sort_key: SortKey[D] | None,
        reverse: bool,
    ) -> Any:
        collection = new_collection(kind)
        for value in self._transformed(entities, hints, str(kind)):
            _add(collection, value)
        try:
            _sort(collection, kind, sort_key, reverse)
        except Exception as exc:
            raise _transform_failure(str(kind), entities, collection, exc) from exc
        log.debug("Transformed %d values into %s", len(collection), kind)
        return collection


class Mapper[S, T](Transformer[T, S], Merger[S, T]):
    """Both directions at once: targets transform into sources, sources merge into targets."""


def _add(collection: Any, value: object) -> None:
    if isinstance(collection, MutableSequence):
        collection.append(value)
    else:
        collection.add(value)


def _sort(
    collection: Any,
    kind: CollectionKind,
    sort_key: SortKey[Any] | None,
    reverse: bool,
) -> None:
    if kind is CollectionKind.SORTED:
        collection.sort(key=sort_key, reverse=reverse)


def _transform_failure(
    what: str,
    entities: object,
    partial: object,
    exc: Exception,
) -> ReconciliationError:
    limit = get_diagnostics_config().snapshot_limit
    log.warning("Failed to transform entities into %s: %s", what, exc)
    return ReconciliationError(
        f"Failed to transform entities into {what}",
        source_snapshot=snapshot(entities, limit),
        target_snapshot=snapshot(partial, limit),
    )
