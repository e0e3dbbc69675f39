"""Tests for config.logging_config: file output and shutdown."""

import json

from arbbot.config import logging_config
from arbbot.config.logging_config import close_logging, get_logger, setup_logging


def test_log_file_receives_json_events(tmp_path):
    log_path = tmp_path / "bot.log"

    setup_logging(log_file=str(log_path))
    try:
        get_logger("tests").info("price_watch_started", interval_ms=1000)
    finally:
        close_logging()

    lines = log_path.read_text().splitlines()
    event = json.loads(lines[-1])
    assert event["event"] == "price_watch_started"
    assert event["interval_ms"] == 1000
    assert event["level"] == "info"


def test_close_logging_releases_file(tmp_path):
    setup_logging(log_file=str(tmp_path / "bot.log"))
    stream = logging_config._log_stream

    close_logging()

    assert stream.closed
    assert logging_config._log_stream is None
    # Logging after close falls back to stdout instead of the closed file
    get_logger("tests").info("after_close")


def test_close_logging_without_file_is_noop():
    close_logging()
    close_logging()
    assert logging_config._log_stream is None


def test_reconfigure_closes_previous_file(tmp_path):
    setup_logging(log_file=str(tmp_path / "first.log"))
    first = logging_config._log_stream

    setup_logging(log_file=str(tmp_path / "second.log"))
    try:
        assert first.closed
        assert not logging_config._log_stream.closed
    finally:
        close_logging()
