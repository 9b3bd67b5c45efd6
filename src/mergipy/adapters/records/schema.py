"""Pydantic models for JSON record files."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, JsonValue, RootModel, ValidationError

if TYPE_CHECKING:
    from pathlib import Path

type Record = dict[str, Any]


class RecordFileError(ValueError):
    """Raised when a record file cannot be read or does not fit the expected shape."""


class RecordBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class RecordFile(RootModel[list[dict[str, JsonValue]]]):
    """A JSON array of flat or nested objects."""


class RecordSummary(RecordBaseModel):
    same: int = 0
    updated: int = 0
    added: int = 0
    removed: int = 0


class ReconcileReport(RecordBaseModel):
    records: list[dict[str, JsonValue]]
    summary: RecordSummary


def parse_records(text: str, *, key: str, origin: str = "<string>") -> list[Record]:
    """Validate ``text`` as a record file whose objects all carry ``key``."""

    try:
        records = RecordFile.model_validate_json(text).root
    except ValidationError as exc:
        raise RecordFileError(f"{origin} is not a JSON array of objects: {exc}") from exc

    for position, record in enumerate(records):
        if key not in record:
            raise RecordFileError(f"{origin}: record {position} has no {key!r} field")
    return records


def load_records(path: Path, *, key: str) -> list[Record]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise RecordFileError(f"Cannot read {path}: {exc.strerror or exc}") from exc
    return parse_records(text, key=key, origin=str(path))


def dump_records(records: list[Record]) -> str:
    return RecordFile(records).model_dump_json(indent=2)
