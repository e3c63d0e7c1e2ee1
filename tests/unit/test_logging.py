"""
Unit tests for structured logging utilities and the logger backend.
"""

import json
import logging
from io import StringIO

import pytest

from faultlog.models.kinds import Severity
from faultlog.utils.logging import (
    JSONFormatter,
    LoggerBackend,
    get_logger,
    register_severity_levels,
    setup_logging,
)


def _capture(logger: logging.Logger) -> StringIO:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    return stream


def test_json_formatter():
    """Test JSON formatter produces valid JSON output."""
    logger = logging.getLogger("test.json_formatter")
    stream = _capture(logger)

    logger.info("Test message", extra={"request_path": "/health"})

    log_data = json.loads(stream.getvalue())
    assert "timestamp" in log_data
    assert log_data["level"] == "INFO"
    assert log_data["logger"] == "test.json_formatter"
    assert log_data["message"] == "Test message"
    assert log_data["extra"]["request_path"] == "/health"
    assert log_data["source"]["function"] == "test_json_formatter"


def test_json_formatter_with_exception():
    """Test that exc_info is rendered under error."""
    logger = logging.getLogger("test.json_formatter_exc")
    stream = _capture(logger)

    try:
        raise ValueError("bad value")
    except ValueError:
        logger.error("Failed", exc_info=True)

    log_data = json.loads(stream.getvalue())
    assert log_data["error"]["type"] == "ValueError"
    assert log_data["error"]["message"] == "bad value"
    assert "Traceback" in log_data["error"]["stack_trace"]


def test_logger_backend_emits_fault_context():
    """Test that the backend forwards severity, message and context."""
    backend = LoggerBackend("test.backend")
    stream = _capture(backend.logger)

    backend.log(Severity.NOTICE, "cache warmed", {"file": "/srv/app.py", "line": "12"})

    log_data = json.loads(stream.getvalue())
    assert log_data["level"] == "NOTICE"
    assert log_data["message"] == "cache warmed"
    assert log_data["context"] == {"file": "/srv/app.py", "line": "12"}
    assert log_data["source"] == {"file": "/srv/app.py", "line": "12"}
    assert "extra" not in log_data


@pytest.mark.parametrize("severity", [Severity.NOTICE, Severity.ALERT, Severity.EMERGENCY])
def test_register_severity_levels(severity):
    """Test that extra severities get level names."""
    register_severity_levels()

    assert logging.getLevelName(int(severity)) == severity.name


def test_get_logger_with_context():
    """Test getting logger with context."""
    logger = get_logger("test_module", component="capture", pid="456")

    assert logger.extra["component"] == "capture"
    assert logger.extra["pid"] == "456"

    child = logger.with_context(phase="shutdown")
    assert child.extra == {"component": "capture", "pid": "456", "phase": "shutdown"}


def test_setup_logging_configures_root_logger():
    """Test root logger configuration."""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging("notice")

        assert root.level == int(Severity.NOTICE)
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
