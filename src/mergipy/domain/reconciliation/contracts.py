"""Callable contracts shared by the reconciliation engines.

The engines never inspect source or target elements themselves. Everything they
know about the elements is what these callables report.
"""

from __future__ import annotations

from collections.abc import Callable

type MatchPredicate[S, T] = Callable[[S, T], bool]
type MergeFunction[S, T] = Callable[[S | None, T | None], T | None]
type KeepFilter[T] = Callable[[T | None], bool]
type AfterHook[C] = Callable[[C], None]


def pair_matches[S, T](
    matches: MatchPredicate[S, T],
    source: S | None,
    target: T | None,
) -> bool:
    """Apply ``matches`` unless both sides are absent, which always pair up."""

    if source is None and target is None:
        return True
    return matches(source, target)  # pyright: ignore[reportArgumentType]


def is_rejected[T](result: T | None, keep: KeepFilter[T] | None) -> bool:
    return keep is not None and not keep(result)


def is_removed[T](result: T | None, keep: KeepFilter[T] | None) -> bool:
    """Tombstone results vanish when they are ``None`` or rejected by ``keep``."""

    return result is None or is_rejected(result, keep)
