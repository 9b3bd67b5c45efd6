"""Alignment table for the ordered merge.

``table[i][j]`` is the length of the longest common subsequence of
``sources[i:]`` and ``targets[j:]`` where "common" means ``matches`` says so.
The last row and the last column are zero.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .contracts import pair_matches

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .contracts import MatchPredicate

type AlignmentTable = list[list[int]]


def build_alignment_table[S, T](
    sources: Sequence[S],
    targets: Sequence[T],
    matches: MatchPredicate[S, T],
) -> AlignmentTable:
    """Build the ``(len(sources) + 1) x (len(targets) + 1)`` table bottom-up."""

    source_count = len(sources)
    target_count = len(targets)
    table = [[0] * (target_count + 1) for _ in range(source_count + 1)]

    for source_index in range(source_count - 1, -1, -1):
        row = table[source_index]
        below = table[source_index + 1]
        source = sources[source_index]
        for target_index in range(target_count - 1, -1, -1):
            if pair_matches(matches, source, targets[target_index]):
                row[target_index] = below[target_index + 1] + 1
            else:
                row[target_index] = max(below[target_index], row[target_index + 1])

    return table


def prefers_insertion(table: AlignmentTable, source_index: int, target_index: int) -> bool:
    """Decide between "added" and "removed" for a mismatch at the given cursor.

    Ties go to insertion.
    """

    return table[source_index + 1][target_index] >= table[source_index][target_index + 1]
