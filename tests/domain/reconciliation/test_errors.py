from __future__ import annotations

import pytest

from mergipy.domain.reconciliation import ReconciliationError, abbreviate, snapshot


@pytest.mark.parametrize(
    ("text", "limit", "expected"),
    [
        ("short", 10, "short"),
        ("exactly10!", 10, "exactly10!"),
        ("a much longer text", 10, "a much ..."),
        ("abcdef", 3, "..."),
    ],
)
def test_abbreviate(text: str, limit: int, expected: str) -> None:
    assert abbreviate(text, limit) == expected


def test_abbreviate_rejects_limits_below_ellipsis() -> None:
    with pytest.raises(ValueError, match=">= 3"):
        abbreviate("abc", 2)


def test_snapshot_uses_repr() -> None:
    assert snapshot(["a", "b"], 100) == "['a', 'b']"
    assert snapshot(list(range(100)), 12) == "[0, 1, 2,..."


def test_reconciliation_error_carries_snapshots() -> None:
    error = ReconciliationError("Failed", source_snapshot="[1]", target_snapshot="[]")

    assert str(error) == "Failed: [1] => []"
    assert error.source_snapshot == "[1]"
    assert error.target_snapshot == "[]"
    assert isinstance(error, RuntimeError)
