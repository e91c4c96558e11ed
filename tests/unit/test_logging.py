"""
Unit tests for structured logging utilities.
"""

import json
import logging
from io import StringIO

from prqueue.utils.logging import (
    JSONFormatter,
    get_logger,
    log_api_call,
    log_phase_transition,
)


def _capture(logger_adapter, level=logging.DEBUG) -> StringIO:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JSONFormatter())
    logger_adapter.logger.addHandler(handler)
    logger_adapter.logger.setLevel(level)
    return stream


def test_json_formatter():
    """Test JSON formatter produces valid JSON output."""
    logger = get_logger("test.formatter")
    stream = _capture(logger)

    logger.info("Test message", extra={"sync_id": "abc", "pr_number": 7, "status_code": 200})

    log_data = json.loads(stream.getvalue())
    assert log_data["level"] == "INFO"
    assert log_data["logger"] == "test.formatter"
    assert log_data["message"] == "Test message"
    assert log_data["sync_id"] == "abc"
    assert log_data["pr_number"] == 7
    assert log_data["context"]["status_code"] == 200
    assert "source" in log_data


def test_get_logger_with_context():
    logger = get_logger("test.context", sync_id="abc")
    child = logger.with_context(repository="acme/widgets")

    assert logger.extra == {"sync_id": "abc"}
    assert child.extra == {"sync_id": "abc", "repository": "acme/widgets"}


def test_context_is_injected():
    logger = get_logger("test.inject").with_context(repository="acme/widgets")
    stream = _capture(logger)

    logger.warning("Review fetch failed", extra={"pr_number": 3})

    log_data = json.loads(stream.getvalue())
    assert log_data["repository"] == "acme/widgets"
    assert log_data["pr_number"] == 3


def test_log_phase_transition():
    logger = get_logger("test.phase")
    stream = _capture(logger)

    log_phase_transition(logger, sync_id="abc", phase="fetching_repos")

    log_data = json.loads(stream.getvalue())
    assert log_data["phase"] == "fetching_repos"
    assert log_data["sync_id"] == "abc"


def test_log_api_call_levels():
    logger = get_logger("test.api")
    stream = _capture(logger)

    log_api_call(logger, endpoint="/user", status_code=200, duration_ms=12.346)
    log_api_call(logger, endpoint="/repos/a/b/pulls", status_code=500, error="Internal Server Error")

    first, second = [json.loads(line) for line in stream.getvalue().splitlines()]
    assert first["level"] == "DEBUG"
    assert first["context"]["duration_ms"] == 12.35
    assert second["level"] == "WARNING"
    assert second["context"]["error"] == "Internal Server Error"
