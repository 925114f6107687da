"""
Tests for the JSON log formatter and logger naming.
"""

import json
import logging

from skillswap.logger import JSONFormatter, StructuredLogger


def _record(**extra):
    record = logging.LogRecord(
        name="skillswap.repository",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="User created: %s",
        args=("u1",),
        exc_info=None,
    )
    record.__dict__.update(extra)
    return record


def test_formatter_emits_single_json_object():
    entry = json.loads(JSONFormatter().format(_record()))
    assert entry["level"] == "INFO"
    assert entry["logger_name"] == "skillswap.repository"
    assert entry["message"] == "User created: u1"
    assert "extra" not in entry


def test_formatter_keeps_extra_types():
    entry = json.loads(JSONFormatter().format(_record(count=3, backend="file", path=object())))
    assert entry["extra"]["count"] == 3
    assert entry["extra"]["backend"] == "file"
    assert isinstance(entry["extra"]["path"], str)


def test_component_loggers_share_namespace(logger):
    component = StructuredLogger(name="matching")
    assert component.name == "skillswap.matching"
    assert StructuredLogger(name="skillswap.ratings").name == "skillswap.ratings"
    assert logger.name == "skillswap.skillswap-test"
    assert logging.getLogger("skillswap").handlers
    assert not component.logger.handlers
