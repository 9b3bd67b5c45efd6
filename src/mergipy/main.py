#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from mergipy.adapters.records import dump_records
from mergipy.app import reconcile_record_files
from mergipy.config import (
    ConfigurationError,
    configure_logging,
    get_logging_config,
    parse_log_level,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from mergipy.app import ReconcileResult

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mergipy",
        description="Reconcile a JSON record file against a source record file",
    )
    parser.add_argument("source", type=Path, help="JSON array of source records")
    parser.add_argument("target", type=Path, help="JSON array of target records to reconcile")
    parser.add_argument(
        "--key",
        type=str,
        required=True,
        help="Field identifying a record in both files",
    )
    parser.add_argument(
        "--ordered",
        action="store_true",
        help="Keep the source order (default: keep the target order)",
    )
    parser.add_argument(
        "--keep-missing",
        action="store_true",
        help="Keep target records that are absent from the source (counted as same)",
    )
    parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Output format (default: %(default)s)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Logging level name (defaults to MERGIPY_LOG_LEVEL or INFO)",
    )
    return parser.parse_args(list(argv))


def _resolve_log_level(args: argparse.Namespace) -> int:
    if args.log_level:
        return parse_log_level(args.log_level)
    return get_logging_config().level


def _render(result: ReconcileResult, output_format: str) -> str:
    if output_format == "json":
        return result.report().model_dump_json(indent=2)
    return f"{dump_records(result.records)}\n{result.changes.summary()}"


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        if not parsed_args.key.strip():
            raise ValueError("--key must not be blank")  # noqa: TRY301
        level = _resolve_log_level(parsed_args)
    except (ValueError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)

    configure_logging(level=level)

    try:
        result = reconcile_record_files(
            parsed_args.source,
            parsed_args.target,
            key=parsed_args.key,
            ordered=parsed_args.ordered,
            keep_missing=parsed_args.keep_missing,
        )
    except Exception:
        log.exception("Reconciliation failed")
        sys.exit(1)

    print(_render(result, parsed_args.format))


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
