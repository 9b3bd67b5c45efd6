"""Mergers and transformers: per-record rules on top of the reconciliation engine."""

from __future__ import annotations

from .collections import CollectionKind, OrderedSet, freeze, is_ordered, new_collection
from .functional import FunctionMerger, FunctionTransformer, key_equality, unsupported
from .hints import DEFAULT_HINTS, MergeHints, MissingHintError
from .merger import Merger
from .transformer import Mapper, Transformer

__all__ = [
    "DEFAULT_HINTS",
    "CollectionKind",
    "FunctionMerger",
    "FunctionTransformer",
    "Mapper",
    "MergeHints",
    "Merger",
    "MissingHintError",
    "OrderedSet",
    "Transformer",
    "freeze",
    "is_ordered",
    "key_equality",
    "new_collection",
    "unsupported",
]
