"""Target collection kinds and their factories."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, MutableSet, Set
from enum import StrEnum
from types import MappingProxyType
from typing import Any


class CollectionKind(StrEnum):
    LIST = "list"
    SET = "set"
    ORDERED_SET = "ordered_set"
    SORTED = "sorted"


_ORDERED_KINDS = frozenset({CollectionKind.LIST, CollectionKind.ORDERED_SET})


class OrderedSet[T](MutableSet[T]):
    """Mutable set that iterates in insertion order."""

    __slots__ = ("_items",)

    def __init__(self, values: Iterable[T] = ()) -> None:
        self._items: dict[T, None] = dict.fromkeys(values)

    def __contains__(self, value: object) -> bool:
        return value in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def add(self, value: T) -> None:
        self._items[value] = None

    def discard(self, value: T) -> None:
        self._items.pop(value, None)

    def clear(self) -> None:
        self._items.clear()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self._items)!r})"


def is_ordered(kind: CollectionKind) -> bool:
    """Whether merges into ``kind`` go through the order-preserving engine."""

    return kind in _ORDERED_KINDS


def new_collection(kind: CollectionKind) -> list[Any] | set[Any] | OrderedSet[Any]:
    match kind:
        case CollectionKind.LIST | CollectionKind.SORTED:
            return []
        case CollectionKind.SET:
            return set()
        case CollectionKind.ORDERED_SET:
            return OrderedSet()


def freeze(collection: object) -> object:
    """Return an immutable snapshot of a merge result.

    Sequences and ordered sets become tuples, plain sets become frozensets and
    mappings become read-only proxies over frozen values. ``None`` passes through.
    """

    if collection is None:
        return None
    if isinstance(collection, Mapping):
        items = collection.items()  # pyright: ignore[reportUnknownVariableType]
        frozen = {key: freeze(value) for key, value in items}  # pyright: ignore[reportUnknown]
        return MappingProxyType(frozen)
    if isinstance(collection, OrderedSet):
        return tuple(collection)  # pyright: ignore[reportUnknownArgumentType]
    if isinstance(collection, Set):
        return frozenset(collection)  # pyright: ignore[reportUnknownArgumentType]
    if isinstance(collection, Iterable) and not isinstance(collection, str | bytes):
        return tuple(collection)  # pyright: ignore[reportUnknownArgumentType]
    raise TypeError(f"Cannot freeze {type(collection).__name__}")
