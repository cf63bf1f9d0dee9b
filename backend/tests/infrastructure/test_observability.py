"""Structured Logging — tests for the JSON formatter."""

import json
import logging

from doconnect.infrastructure.observability import JSONFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "doconnect.test", logging.WARNING, __file__, 1, "hello %s", ("world",), None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formats_core_fields():
    log = json.loads(JSONFormatter().format(_record()))
    assert log["level"] == "WARNING"
    assert log["logger"] == "doconnect.test"
    assert log["message"] == "hello world"
    assert "timestamp" in log


def test_includes_known_extras_only():
    log = json.loads(JSONFormatter().format(
        _record(user_id=7, error_code="FORBIDDEN", unrelated="x"),
    ))
    assert log["user_id"] == 7
    assert log["error_code"] == "FORBIDDEN"
    assert "unrelated" not in log
