from __future__ import annotations

from typing import Any

import pytest

from mergipy.domain.merging import (
    DEFAULT_HINTS,
    FunctionMerger,
    MergeHints,
    key_equality,
    unsupported,
)


def _update(source: dict[str, Any], target: dict[str, Any], hints: MergeHints) -> dict[str, Any]:
    target.update(source)
    return target


def _merger(**kwargs: Any) -> FunctionMerger[dict[str, Any], dict[str, Any]]:
    return FunctionMerger(
        create_fn=lambda source, hints: {"id": source["id"]},
        update_fn=_update,
        key_matches_fn=key_equality(lambda source: source["id"], lambda target: target["id"]),
        **kwargs,
    )


def test_function_merger_updates_and_creates() -> None:
    existing = {"id": 1, "name": "old"}
    targets = [existing]

    _merger().merge_into_list([{"id": 1, "name": "new"}, {"id": 2, "name": "two"}], targets)

    assert targets[0] is existing
    assert targets == [{"id": 1, "name": "new"}, {"id": 2, "name": "two"}]


def test_on_missing_allows_soft_delete() -> None:
    def archive(target: dict[str, Any], hints: MergeHints) -> dict[str, Any]:
        target["archived"] = True
        return target

    targets = [{"id": 1}, {"id": 2}]

    _merger(on_missing=archive).merge_into_list([{"id": 2}], targets)

    assert targets == [{"id": 1, "archived": True}, {"id": 2}]


def test_after_merge_callback_receives_collection() -> None:
    calls: list[tuple[Any, MergeHints]] = []
    targets: list[dict[str, Any]] = []

    def after_merge(collection: Any, hints: MergeHints) -> None:
        calls.append((collection, hints))

    _merger(after_merge_fn=after_merge).merge_into_list([{"id": 1}], targets)

    assert calls == [(targets, DEFAULT_HINTS)]


def test_key_equality_compares_extracted_keys() -> None:
    matches = key_equality(str.lower, str.upper)

    assert matches("abc", "ABC", DEFAULT_HINTS) is False
    assert key_equality(str.lower, str.lower)("abc", "ABC", DEFAULT_HINTS) is True


def test_unsupported_raises_not_implemented() -> None:
    fail = unsupported("create")

    with pytest.raises(NotImplementedError, match="create is not supported"):
        fail({"id": 1}, DEFAULT_HINTS)
