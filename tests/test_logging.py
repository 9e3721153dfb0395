"""Tests for logging setup."""

import json

import pytest

from book_retriever.logging import configure_logging, get_logger


@pytest.fixture(autouse=True)
def restore_default_logging():
    yield
    configure_logging("WARNING")


def test_events_go_to_stderr(capsys) -> None:
    configure_logging("INFO")
    get_logger("book_retriever.test").info("pool.query.done", records=2)

    captured = capsys.readouterr()
    assert captured.out == ""
    event = json.loads(captured.err.strip())
    assert event["event"] == "pool.query.done"
    assert event["records"] == 2
    assert event["level"] == "info"


def test_level_filters_events(capsys) -> None:
    configure_logging("WARNING")
    get_logger().info("pool.source.skipped", source="x")
    assert capsys.readouterr().err == ""


def test_level_names_are_case_insensitive() -> None:
    configure_logging("debug", json=False)


def test_unknown_level() -> None:
    with pytest.raises(ValueError, match="unknown log level"):
        configure_logging("chatty")
