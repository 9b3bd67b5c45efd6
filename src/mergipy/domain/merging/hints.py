"""Typed hints steering how a merger treats missing and empty values.

Hints never reach the reconciliation engine. The merger reads the flags and
forwards ``extras`` to the merge callbacks, appending context (the current
target, a map key) on the way down.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from mergipy.domain.reconciliation.contracts import KeepFilter


class MissingHintError(LookupError):
    """Raised when a required extra of a given type is absent."""


@dataclass(frozen=True, slots=True)
class MergeHints:
    keep_null: bool = False
    keep_missing: bool = False
    or_empty: bool = False
    unmodifiable: bool = False
    extras: tuple[object, ...] = field(default_factory=tuple)

    def with_extras(self, *values: object) -> MergeHints:
        """Return a copy with ``values`` appended to the extras."""

        if not values:
            return self
        return replace(self, extras=(*self.extras, *values))

    def with_flags(
        self,
        *,
        keep_null: bool | None = None,
        keep_missing: bool | None = None,
        or_empty: bool | None = None,
        unmodifiable: bool | None = None,
    ) -> MergeHints:
        return replace(
            self,
            keep_null=self.keep_null if keep_null is None else keep_null,
            keep_missing=self.keep_missing if keep_missing is None else keep_missing,
            or_empty=self.or_empty if or_empty is None else or_empty,
            unmodifiable=self.unmodifiable if unmodifiable is None else unmodifiable,
        )

    def find[V](self, kind: type[V]) -> V | None:
        """Return the most recently appended extra of type ``kind``."""

        for value in reversed(self.extras):
            if isinstance(value, kind):
                return value
        return None

    def require[V](self, kind: type[V]) -> V:
        value = self.find(kind)
        if value is None:
            available = ", ".join(type(extra).__name__ for extra in self.extras) or "none"
            raise MissingHintError(
                f"The hint of type {kind.__name__} is missing. Available hints are: {available}"
            )
        return value

    def contains(self, value: object) -> bool:
        return any(extra == value for extra in self.extras)

    def keep_filter[T](self) -> KeepFilter[T] | None:
        """Engine filter matching ``keep_null``: drop ``None`` results unless told otherwise."""

        if self.keep_null:
            return None
        return _is_not_none

    def describe(self) -> str:
        flags = [
            name
            for name, enabled in (
                ("keep_null", self.keep_null),
                ("keep_missing", self.keep_missing),
                ("or_empty", self.or_empty),
                ("unmodifiable", self.unmodifiable),
            )
            if enabled
        ]
        flags.extend(type(extra).__name__ for extra in self.extras)
        return f"Hints[{', '.join(flags)}]"


def _is_not_none(value: object) -> bool:
    return value is not None


DEFAULT_HINTS: Final[MergeHints] = MergeHints()
