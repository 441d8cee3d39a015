"""Tests for structured logging configuration."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

import pytest

from questgraph.graph.paths import compress_by_shared_suffixes
from questgraph.observability import (
    close_file_logging,
    configure_logging,
    get_logger,
)

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    yield
    close_file_logging()
    configure_logging(verbosity=0)


def _read_entries(log_file: Path) -> list[dict]:  # type: ignore[type-arg]
    with log_file.open() as f:
        return [json.loads(line) for line in f if line.strip()]


def test_configure_logging_sets_level_warning() -> None:
    """Default verbosity (0) sets WARNING level."""
    configure_logging(verbosity=0)

    assert logging.getLogger().level == logging.WARNING


def test_configure_logging_verbose_sets_debug_root() -> None:
    """verbosity=1 opens the root logger; the console handler filters at INFO."""
    configure_logging(verbosity=1)

    root_logger = logging.getLogger()
    assert root_logger.level == logging.DEBUG
    assert root_logger.handlers[0].level == logging.INFO


def test_configure_logging_very_verbose_sets_debug() -> None:
    configure_logging(verbosity=2)

    root_logger = logging.getLogger()
    assert root_logger.level == logging.DEBUG
    assert root_logger.handlers[0].level == logging.DEBUG


def test_get_logger_auto_configures() -> None:
    """get_logger configures logging if not already done."""
    import questgraph.observability.logging as log_module

    log_module._configured = False

    logger = get_logger("test")

    assert log_module._configured is True
    assert hasattr(logger, "debug")


def test_file_logging_creates_parent_dirs(tmp_path: Path) -> None:
    import questgraph.observability.logging as log_module

    log_file = tmp_path / "logs" / "run.jsonl"

    configure_logging(verbosity=0, log_file=log_file)

    assert log_file.parent.is_dir()
    assert log_module._file_handler is not None
    assert log_module._file_handler.baseFilename == str(log_file)


def test_without_file_logging_no_handler() -> None:
    import questgraph.observability.logging as log_module

    configure_logging(verbosity=0)

    assert log_module._file_handler is None
    assert not any(
        isinstance(h, log_module.JSONLFileHandler) for h in logging.getLogger().handlers
    )


def test_reconfiguration_closes_handler(tmp_path: Path) -> None:
    """Reconfiguring logging closes previous file handler."""
    import questgraph.observability.logging as log_module

    configure_logging(verbosity=0, log_file=tmp_path / "a.jsonl")
    first_handler = log_module._file_handler
    assert first_handler is not None

    configure_logging(verbosity=0, log_file=tmp_path / "b.jsonl")

    assert first_handler.stream is None or first_handler.stream.closed
    assert log_module._file_handler is not None


def test_close_file_logging_clears_handler(tmp_path: Path) -> None:
    import questgraph.observability.logging as log_module

    configure_logging(verbosity=0, log_file=tmp_path / "run.jsonl")
    close_file_logging()

    assert log_module._file_handler is None


def test_jsonl_file_handler_writes_structlog_context(tmp_path: Path) -> None:
    """JSONLFileHandler flattens structlog context into each JSON line."""
    log_file = tmp_path / "run.jsonl"
    configure_logging(verbosity=0, log_file=log_file)

    get_logger("test.context").info("test_event", key1="value1", key2=42)
    close_file_logging()

    entry = next(e for e in _read_entries(log_file) if e.get("message") == "test_event")
    assert entry["key1"] == "value1"
    assert entry["key2"] == 42
    assert entry["level"] == "INFO"
    assert entry["logger"] == "test.context"


def test_algorithm_debug_events_reach_file(tmp_path: Path) -> None:
    """Debug events from algorithms are captured even at default console verbosity."""
    log_file = tmp_path / "run.jsonl"
    configure_logging(verbosity=0, log_file=log_file)

    compress_by_shared_suffixes([("a", "b", "c"), ("x", "b", "c")])
    close_file_logging()

    entry = next(e for e in _read_entries(log_file) if e.get("message") == "paths_compressed")
    assert entry["input_paths"] == 2
    assert entry["output_paths"] == 2
    assert entry["truncated"] == 1
