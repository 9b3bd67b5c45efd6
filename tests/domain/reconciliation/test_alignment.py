from __future__ import annotations

from mergipy.domain.reconciliation.alignment import build_alignment_table, prefers_insertion
from tests.helpers.items import matches, source_items, target_items


def test_table_has_zero_last_row_and_column() -> None:
    table = build_alignment_table(source_items("A", "B"), target_items("A", "B", "C"), matches)

    assert len(table) == 3
    assert all(len(row) == 4 for row in table)
    assert table[2] == [0, 0, 0, 0]
    assert [row[3] for row in table] == [0, 0, 0]


def test_table_counts_longest_common_subsequence() -> None:
    table = build_alignment_table(
        source_items("1", "A", "2", "B", "3", "C"),
        target_items("A", "B", "C"),
        matches,
    )

    assert table[0][0] == 3
    assert table[2][0] == 2
    assert table[5][2] == 1


def test_empty_sides_yield_single_cell_dimension() -> None:
    assert build_alignment_table([], target_items("A", "B"), matches) == [[0, 0, 0]]
    assert build_alignment_table(source_items("A"), [], matches) == [[0], [0]]


def test_none_pairs_match_without_calling_predicate() -> None:
    calls: list[tuple[object, object]] = []

    def recording_matches(source: object, target: object) -> bool:
        calls.append((source, target))
        return False

    table = build_alignment_table([None], [None], recording_matches)

    assert table[0][0] == 1
    assert calls == []


def test_ties_prefer_insertion() -> None:
    table = build_alignment_table(source_items("A"), target_items("B"), matches)

    assert table[1][0] == table[0][1] == 0
    assert prefers_insertion(table, 0, 0)


def test_longer_remaining_target_prefers_removal() -> None:
    table = build_alignment_table(
        source_items("A", "B", "C"),
        target_items("1", "A", "B", "C"),
        matches,
    )

    assert not prefers_insertion(table, 0, 0)
