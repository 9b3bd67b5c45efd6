from __future__ import annotations

import logging

import pytest

from mergipy.config import (
    DEFAULT_SNAPSHOT_LIMIT,
    InvalidConfigurationError,
    get_diagnostics_config,
    get_logging_config,
    parse_log_level,
    read_env_int,
    read_env_str,
)


def test_read_env_str_treats_blank_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "   ")

    assert read_env_str("EXAMPLE_VAR") is None

    monkeypatch.setenv("EXAMPLE_VAR", " value ")

    assert read_env_str("EXAMPLE_VAR") == "value"


def test_read_env_int_defaults_and_validates(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("EXAMPLE_INT", raising=False)
    assert read_env_int("EXAMPLE_INT", default=7) == 7

    monkeypatch.setenv("EXAMPLE_INT", "12")
    assert read_env_int("EXAMPLE_INT", default=7, minimum=10) == 12

    monkeypatch.setenv("EXAMPLE_INT", "9")
    with pytest.raises(InvalidConfigurationError, match=">= 10"):
        read_env_int("EXAMPLE_INT", default=7, minimum=10)

    monkeypatch.setenv("EXAMPLE_INT", "many")
    with pytest.raises(InvalidConfigurationError, match="must be an integer"):
        read_env_int("EXAMPLE_INT", default=7)


def test_diagnostics_config_reads_snapshot_limit(monkeypatch: pytest.MonkeyPatch) -> None:
    assert get_diagnostics_config().snapshot_limit == DEFAULT_SNAPSHOT_LIMIT

    monkeypatch.setenv("MERGIPY_SNAPSHOT_LIMIT", "64")
    assert get_diagnostics_config().snapshot_limit == 64

    monkeypatch.setenv("MERGIPY_SNAPSHOT_LIMIT", "2")
    with pytest.raises(InvalidConfigurationError):
        get_diagnostics_config()


def test_logging_config_parses_level_names(monkeypatch: pytest.MonkeyPatch) -> None:
    assert get_logging_config().level == logging.INFO

    monkeypatch.setenv("MERGIPY_LOG_LEVEL", "warning")
    assert get_logging_config().level == logging.WARNING

    assert parse_log_level(" Debug ") == logging.DEBUG
    with pytest.raises(InvalidConfigurationError, match="Unknown log level"):
        parse_log_level("chatty")
