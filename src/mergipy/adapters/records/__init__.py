"""JSON record file adapter."""

from __future__ import annotations

from .merger import ChangeLog, RecordChange, RecordChangeEntry, RecordMerger
from .schema import (
    ReconcileReport,
    Record,
    RecordFile,
    RecordFileError,
    RecordSummary,
    dump_records,
    load_records,
    parse_records,
)

__all__ = [
    "ChangeLog",
    "ReconcileReport",
    "Record",
    "RecordChange",
    "RecordChangeEntry",
    "RecordFile",
    "RecordFileError",
    "RecordMerger",
    "RecordSummary",
    "dump_records",
    "load_records",
    "parse_records",
]
