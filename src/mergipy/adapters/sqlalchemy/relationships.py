"""Reconcile mapped one-to-many relationship collections in place."""

from __future__ import annotations

from collections.abc import MutableSequence, MutableSet
from logging import getLogger
from typing import TYPE_CHECKING, Any

from sqlalchemy import inspect
from sqlalchemy.exc import NoInspectionAvailable

from mergipy.domain.merging import DEFAULT_HINTS, CollectionKind

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.orm import Session
    from sqlalchemy.orm.state import InstanceState

    from mergipy.domain.merging import MergeHints, Merger

log = getLogger(__name__)


def reconcile_relationship[S, T](
    session: Session,
    parent: object,
    attribute: str,
    sources: Iterable[S] | None,
    merger: Merger[S, T],
    *,
    hints: MergeHints = DEFAULT_HINTS,
    flush: bool = False,
) -> Any:
    """Merge ``sources`` into ``parent.<attribute>`` without replacing the collection.

    List relationships keep the source order, set relationships ignore it. The
    collection is mutated through its instrumented methods so the unit of work
    records additions and removals as usual. Nothing is committed here.
    """

    state = _instance_state(parent)
    if state.session is not session:
        raise ValueError(f"{type(parent).__name__} instance is not attached to the given session")

    relationship = state.mapper.relationships.get(attribute)
    if relationship is None:
        raise TypeError(f"{type(parent).__name__}.{attribute} is not a mapped relationship")
    if not relationship.uselist:
        raise TypeError(f"{type(parent).__name__}.{attribute} is a scalar relationship")

    collection = getattr(parent, attribute)
    kind = _collection_kind(collection, f"{type(parent).__name__}.{attribute}")
    # a copy would detach the result from the instrumented collection
    in_place = hints.with_flags(unmodifiable=False)

    with session.no_autoflush:
        merger.merge_into_collection(sources, collection, kind, in_place)

    log.info(
        "Reconciled %s.%s (%s): %d items",
        type(parent).__name__,
        attribute,
        kind,
        len(collection),
    )

    if flush:
        session.flush()
    return collection


def _instance_state(parent: object) -> InstanceState[Any]:
    try:
        return inspect(parent)
    except NoInspectionAvailable as exc:
        raise TypeError(f"{type(parent).__name__} is not a mapped class") from exc


def _collection_kind(collection: object, label: str) -> CollectionKind:
    if isinstance(collection, MutableSequence):
        return CollectionKind.LIST
    if isinstance(collection, MutableSet):
        return CollectionKind.SET
    raise TypeError(f"{label} uses an unsupported collection class {type(collection).__name__}")
