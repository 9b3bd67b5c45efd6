"""Reconciliation engine: merge source records into target collections in place.

Two engines share the same callable contracts:
1) ``merge_mixed`` pairs sources and targets regardless of order
2) ``merge_ordered`` aligns both sides on a longest-common-subsequence table,
   keeps the source order and rescues displaced targets

``grouping`` lifts both engines to maps of collections keyed by a source key.
"""

from __future__ import annotations

from .alignment import AlignmentTable, build_alignment_table, prefers_insertion
from .contracts import (
    AfterHook,
    KeepFilter,
    MatchPredicate,
    MergeFunction,
    is_rejected,
    is_removed,
    pair_matches,
)
from .errors import ReconciliationError, abbreviate, snapshot
from .grouping import flatten_groups, group_by_key, merge_mixed_groups, merge_ordered_groups
from .ordered import merge_ordered, merge_ordered_collection
from .rescue import RescuePool
from .unordered import merge_mixed

__all__ = [
    "AfterHook",
    "AlignmentTable",
    "KeepFilter",
    "MatchPredicate",
    "MergeFunction",
    "ReconciliationError",
    "RescuePool",
    "abbreviate",
    "build_alignment_table",
    "flatten_groups",
    "group_by_key",
    "is_rejected",
    "is_removed",
    "merge_mixed",
    "merge_mixed_groups",
    "merge_ordered",
    "merge_ordered_collection",
    "merge_ordered_groups",
    "pair_matches",
    "prefers_insertion",
    "snapshot",
]
