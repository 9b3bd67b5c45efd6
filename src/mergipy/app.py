"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from mergipy.adapters.records import (
    ChangeLog,
    ReconcileReport,
    RecordMerger,
    RecordSummary,
    load_records,
)
from mergipy.domain.merging import CollectionKind, MergeHints

if TYPE_CHECKING:
    from pathlib import Path

    from mergipy.adapters.records import Record


log = getLogger(__name__)


@dataclass(slots=True)
class ReconcileResult:
    records: list[Record]
    changes: ChangeLog

    def report(self) -> ReconcileReport:
        counts = {str(change): count for change, count in self.changes.counts().items()}
        return ReconcileReport(
            records=self.records,
            summary=RecordSummary.model_validate(counts),
        )


def reconcile_record_files(
    source_path: Path,
    target_path: Path,
    *,
    key: str,
    ordered: bool = False,
    keep_missing: bool = False,
) -> ReconcileResult:
    """Reconcile the records of ``target_path`` with those of ``source_path``.

    Target records are updated, created and removed so that they mirror the
    source file. Neither file is written; the caller decides what to do with the
    result.
    """

    sources = load_records(source_path, key=key)
    targets = load_records(target_path, key=key)
    log.info(
        "Starting reconciliation: sources=%d, targets=%d, key=%s, ordered=%s, keep_missing=%s",
        len(sources),
        len(targets),
        key,
        ordered,
        keep_missing,
    )

    merger = RecordMerger(key)
    merger.merge_into_collection(
        sources,
        targets,
        CollectionKind.LIST,
        MergeHints(keep_missing=keep_missing),
        ordered=ordered,
    )

    log.info(f"Finished reconciliation: {merger.changes.summary()}, size={len(targets)}")
    return ReconcileResult(records=targets, changes=merger.changes)
