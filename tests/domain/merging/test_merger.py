from __future__ import annotations

from typing import Any

import pytest

from mergipy.domain.merging import CollectionKind, MergeHints, Merger, OrderedSet
from mergipy.domain.reconciliation import ReconciliationError
from tests.helpers.items import Change, SourceItem, TargetItem, describe, source_items, target_items


class ItemMerger(Merger[SourceItem, TargetItem]):
    def __init__(self) -> None:
        self.seen_hints: list[MergeHints] = []
        self.after_calls: list[Any] = []
        self.tombstoned: list[str] = []

    def is_unique_key_matching(
        self, source: SourceItem, target: TargetItem, hints: MergeHints
    ) -> bool:
        return source.key == target.key

    def create(self, source: SourceItem, hints: MergeHints) -> TargetItem:
        return TargetItem(source.text, Change.ADDED)

    def merge_non_null(
        self, source: SourceItem, target: TargetItem, hints: MergeHints
    ) -> TargetItem | None:
        self.seen_hints.append(hints)
        if source.key == "!":
            return None
        if target.change is not Change.ADDED:
            target.change = Change.SAME if target.text == source.text else Change.UPDATED
        target.text = source.text
        return target

    def merge_null(self, target: TargetItem, hints: MergeHints) -> TargetItem | None:
        self.tombstoned.append(target.text)
        return None

    def after_merge(self, targets: Any, hints: MergeHints) -> None:
        self.after_calls.append(targets)


def test_merge_handles_missing_sides() -> None:
    merger = ItemMerger()
    target = TargetItem("A")

    assert merger.merge(None, None) is None
    assert merger.merge(None, target) is None
    assert merger.tombstoned == ["A"]


def test_merge_creates_when_target_does_not_match() -> None:
    merger = ItemMerger()
    stale = TargetItem("B")

    merged = merger.merge(SourceItem("A"), stale)

    assert merged is not stale
    assert merged is not None
    assert (merged.text, merged.change) == ("A", Change.ADDED)
    assert merger.seen_hints[-1].extras == (merged,)


def test_matches_handles_identity_and_none() -> None:
    merger = ItemMerger()
    item = TargetItem("A")

    assert merger.matches(item, item)  # type: ignore[arg-type]
    assert not merger.matches(SourceItem("A"), None)
    assert not merger.matches(None, item)
    assert merger.matches(SourceItem("A1"), TargetItem("A2"))


def test_merge_into_list_keeps_source_order_and_identity() -> None:
    merger = ItemMerger()
    targets = target_items("B", "A")
    original_a = targets[1]

    result = merger.merge_into_list(source_items("A", "C"), targets)

    assert result is targets
    assert describe(targets) == [("A", Change.SAME), ("C", Change.ADDED)]
    assert targets[0] is original_a
    assert merger.tombstoned == ["B"]
    assert merger.after_calls == [targets]


def test_merge_into_set_ignores_order() -> None:
    merger = ItemMerger()
    kept = TargetItem("A")
    targets = {kept, TargetItem("B")}

    result = merger.merge_into_set(source_items("C", "A"), targets)

    assert result is targets
    assert kept in targets
    assert sorted(item.text for item in targets) == ["A", "C"]


def test_merge_into_ordered_set_follows_source_order() -> None:
    merger = ItemMerger()
    targets: OrderedSet[TargetItem] = OrderedSet(target_items("A", "B"))

    merger.merge_into_ordered_set(source_items("B", "A"), targets)

    assert [item.text for item in targets] == ["B", "A"]


def test_merge_into_sorted_sorts_after_merge() -> None:
    merger = ItemMerger()

    result = merger.merge_into_sorted(
        source_items("B", "C", "A"),
        None,
        key=lambda item: item.text,
        reverse=True,
    )

    assert [item.text for item in result] == ["C", "B", "A"]


@pytest.mark.parametrize(
    ("hints", "expected"),
    [
        (MergeHints(), None),
        (MergeHints(or_empty=True), []),
        (MergeHints(or_empty=True, unmodifiable=True), ()),
    ],
)
def test_null_sources_and_targets(hints: MergeHints, expected: object) -> None:
    assert ItemMerger().merge_into_list(None, None, hints) == expected


def test_null_sources_tombstone_existing_targets() -> None:
    merger = ItemMerger()
    targets = target_items("A", "B")

    result = merger.merge_into_list(None, targets)

    assert result is targets
    assert targets == []
    assert merger.tombstoned == ["A", "B"]


def test_keep_missing_leaves_unmatched_targets_alone() -> None:
    merger = ItemMerger()
    targets = target_items("A", "B")
    untouched = list(targets)

    assert merger.merge_into_list(None, targets, MergeHints(keep_missing=True)) is targets
    assert targets == untouched

    merger.merge_into_set(source_items("C"), set(targets), MergeHints(keep_missing=True))

    assert merger.tombstoned == []


def test_keep_missing_passes_untouched_targets_to_merge_missing() -> None:
    class MarkingMerger(ItemMerger):
        def merge_missing(self, target: TargetItem, hints: MergeHints) -> TargetItem | None:
            target.change = Change.UPDATED
            return target

    merger = MarkingMerger()
    targets = target_items("A", "B")

    merger.merge_into_list(source_items("B"), targets, MergeHints(keep_missing=True))

    assert describe(targets) == [("A", Change.UPDATED), ("B", Change.SAME)]
    assert merger.tombstoned == []


def test_unmodifiable_returns_frozen_copy() -> None:
    merger = ItemMerger()
    targets = target_items("A")

    result = merger.merge_into_list(source_items("A", "B"), targets, MergeHints(unmodifiable=True))

    assert isinstance(result, tuple)
    assert [item.text for item in result] == ["A", "B"]
    assert [item.text for item in targets] == ["A"]


def test_keep_null_keeps_none_results() -> None:
    merger = ItemMerger()

    dropped = merger.merge_into_list(source_items("!", "A"), [])
    kept = merger.merge_into_list(source_items("!", "A"), [], MergeHints(keep_null=True))

    assert [item.text for item in dropped] == ["A"]
    assert kept[0] is None
    assert kept[1].text == "A"


def test_map_keys_are_passed_as_extras() -> None:
    merger = ItemMerger()

    result = merger.merge_map_into_collection(
        {"first": SourceItem("A"), "second": SourceItem("B")},
        None,
        CollectionKind.LIST,
    )

    assert [item.text for item in result] == ["A", "B"]
    assert [hints.find(str) for hints in merger.seen_hints] == ["first", "second"]


def test_grouped_map_is_flattened_with_group_keys() -> None:
    merger = ItemMerger()

    result = merger.merge_grouped_map_into_collection(
        {"x": source_items("A", "B"), "y": source_items("C")},
        set(),
        CollectionKind.SET,
    )

    assert sorted(item.text for item in result) == ["A", "B", "C"]
    assert sorted(hints.find(str) or "" for hints in merger.seen_hints) == ["x", "x", "y"]


def test_merge_into_grouped_map_groups_by_key() -> None:
    merger = ItemMerger()
    existing = TargetItem("Z")
    targets: dict[str, list[TargetItem]] = {"z": [existing]}

    result = merger.merge_into_grouped_map(
        source_items("A1", "B1", "A2"),
        targets,
        lambda item: item.key.lower(),
        CollectionKind.LIST,
    )

    assert result is targets
    assert list(targets) == ["a", "b"]
    assert [item.text for item in targets["a"]] == ["A1", "A2"]
    assert merger.tombstoned == ["Z"]


def test_merge_into_grouped_map_sorts_each_group() -> None:
    merger = ItemMerger()

    result = merger.merge_into_grouped_map(
        source_items("A1", "B2", "A3", "A2"),
        None,
        lambda item: item.key,
        CollectionKind.SORTED,
        sort_key=lambda item: item.text,
        reverse=True,
    )

    assert {key: [item.text for item in group] for key, group in result.items()} == {
        "A": ["A3", "A2", "A1"],
        "B": ["B2"],
    }


def test_merge_into_grouped_map_with_null_sources() -> None:
    merger = ItemMerger()
    targets = {"a": target_items("A")}

    def key(item: SourceItem) -> str:
        return item.key

    assert merger.merge_into_grouped_map(None, None, key, CollectionKind.SET) is None
    keep_missing = MergeHints(keep_missing=True)
    kept = merger.merge_into_grouped_map(None, targets, key, CollectionKind.LIST, keep_missing)
    assert kept is targets
    assert merger.merge_into_grouped_map(None, targets, key, CollectionKind.LIST) == {}


def test_failures_are_wrapped_with_snapshots(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MERGIPY_SNAPSHOT_LIMIT", "20")

    class BrokenMerger(ItemMerger):
        def merge_non_null(
            self, source: SourceItem, target: TargetItem, hints: MergeHints
        ) -> TargetItem | None:
            raise ValueError("cannot merge")

    with pytest.raises(ReconciliationError) as excinfo:
        BrokenMerger().merge_into_list(source_items("A"), target_items("A"))

    error = excinfo.value
    assert isinstance(error.__cause__, ValueError)
    assert error.source_snapshot.startswith("[SourceItem(")
    assert len(error.source_snapshot) == 20
    assert error.source_snapshot.endswith("...")
    assert "Failed to merge sources into list" in str(error)
