"""Build mergers and transformers from plain callables instead of subclassing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, NoReturn

from .merger import Merger
from .transformer import Transformer

if TYPE_CHECKING:
    from collections.abc import Callable

    from .hints import MergeHints

type CreateFn[S, T] = Callable[[S, MergeHints], T]
type UpdateFn[S, T] = Callable[[S, T, MergeHints], T | None]
type KeyMatchFn[S, T] = Callable[[S, T, MergeHints], bool]
type MissingFn[T] = Callable[[T, MergeHints], T | None]
type AfterMergeFn = Callable[[Any, MergeHints], None]
type TransformFn[E, D] = Callable[[E, MergeHints], D | None]
type NullTransformFn[D] = Callable[[MergeHints], D | None]


@dataclass(frozen=True, slots=True)
class FunctionMerger[S, T](Merger[S, T]):
    """Merger whose steps are supplied as callables.

    ``on_missing`` defaults to deleting targets without a source; pass a callable
    returning the (modified) target to soft-delete instead.
    """

    create_fn: CreateFn[S, T]
    update_fn: UpdateFn[S, T]
    key_matches_fn: KeyMatchFn[S, T]
    on_missing: MissingFn[T] | None = None
    after_merge_fn: AfterMergeFn | None = None

    def is_unique_key_matching(self, source: S, target: T, hints: MergeHints) -> bool:
        return self.key_matches_fn(source, target, hints)

    def create(self, source: S, hints: MergeHints) -> T:
        return self.create_fn(source, hints)

    def merge_non_null(self, source: S, target: T, hints: MergeHints) -> T | None:
        return self.update_fn(source, target, hints)

    def merge_null(self, target: T, hints: MergeHints) -> T | None:
        if self.on_missing is None:
            return None
        return self.on_missing(target, hints)

    def after_merge(self, targets: Any, hints: MergeHints) -> None:
        if self.after_merge_fn is not None:
            self.after_merge_fn(targets, hints)


@dataclass(frozen=True, slots=True)
class FunctionTransformer[E, D](Transformer[E, D]):
    """Transformer backed by a callable; ``on_null`` supplies the value for ``None`` entities."""

    transform_fn: TransformFn[E, D]
    on_null: NullTransformFn[D] | None = None

    def transform_non_null(self, entity: E, hints: MergeHints) -> D | None:
        return self.transform_fn(entity, hints)

    def transform_null(self, hints: MergeHints) -> D | None:
        if self.on_null is None:
            return None
        return self.on_null(hints)


def key_equality[S, T](
    source_key: Callable[[S], object],
    target_key: Callable[[T], object],
) -> KeyMatchFn[S, T]:
    """Unique-key predicate comparing ``source_key(source) == target_key(target)``."""

    def matches(source: S, target: T, hints: MergeHints) -> bool:
        return source_key(source) == target_key(target)

    return matches


def unsupported(name: str) -> Callable[..., NoReturn]:
    """Placeholder callback for a merger step that must never run."""

    def fail(*args: object) -> NoReturn:
        raise NotImplementedError(f"{name} is not supported")

    return fail
