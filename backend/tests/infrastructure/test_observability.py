"""Structured logging — JSON formatter fields and idempotent setup."""

import json
import logging

from pmflow.infrastructure.observability import JSONFormatter, setup_logging


def _record(**extra):
    record = logging.LogRecord("pmflow.test", logging.INFO, __file__, 1, "hello", None, None)
    record.__dict__.update(extra)
    return record


def test_json_formatter_includes_pipeline_fields():
    out = json.loads(JSONFormatter().format(_record(
        request_type="CreateProjectCommand", request_id="abc", outcome="success",
        elapsed_ms=1.5, unrelated="skip",
    )))
    assert out["message"] == "hello"
    assert out["request_type"] == "CreateProjectCommand"
    assert out["elapsed_ms"] == 1.5
    assert "unrelated" not in out


def test_setup_logging_is_idempotent():
    root_handlers = list(logging.root.handlers)
    level = logging.root.level
    try:
        setup_logging("DEBUG", "json")
        setup_logging("INFO", "text")
        named = [h for h in logging.root.handlers if h.get_name() == "pmflow"]
        assert len(named) == 1
        assert logging.root.level == logging.INFO
    finally:
        logging.root.handlers[:] = root_handlers
        logging.root.setLevel(level)
