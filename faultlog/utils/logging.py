"""
Structured logging utilities and the fault logging backend.

This module provides:
- JSON formatted log output for machine-readable logs
- Context injection via LoggerAdapter for the library's own diagnostics
- Level names for the three severities stdlib logging lacks
- LoggerBackend, the sink every dispatched fault ends up in
"""

import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from logging import LogRecord
from typing import Any, Dict, MutableMapping, Optional, Protocol

from faultlog.models.kinds import Severity

# Attribute of a LogRecord that carries the serialized fault context
FAULT_CONTEXT_ATTR = "fault_context"

_STANDARD_ATTRS = frozenset([
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "exc_info", "exc_text", "stack_info",
    "taskName", FAULT_CONTEXT_ATTR,
])


def register_severity_levels() -> None:
    """Teach stdlib logging the names of NOTICE, ALERT and EMERGENCY."""
    for severity in (Severity.NOTICE, Severity.ALERT, Severity.EMERGENCY):
        logging.addLevelName(int(severity), severity.name)


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs log records as JSON with standard fields:
    - timestamp: ISO 8601 formatted timestamp
    - level: Log level (NOTICE, ALERT, EMERGENCY included)
    - logger: Logger name
    - message: Log message
    - context: Serialized fault context, if the record carries one
    - extra: Any other extra fields
    - error: Error details when exc_info is set
    - source: Attributed fault location, or where the record was emitted
    """

    def format(self, record: LogRecord) -> str:
        """
        Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON formatted log string
        """
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = getattr(record, FAULT_CONTEXT_ATTR, None)
        if context:
            log_data["context"] = dict(context)

        extra_fields = {
            key: value for key, value in record.__dict__.items()
            if key not in _STANDARD_ATTRS
        }
        if extra_fields:
            log_data["extra"] = extra_fields

        if record.exc_info:
            log_data["error"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "stack_trace": "".join(traceback.format_exception(*record.exc_info))
            }

        # Faults carry their attributed call site; the record's own location
        # would only point at the backend
        if context and "file" in context:
            log_data["source"] = {
                "file": context["file"],
                "line": context.get("line"),
            }
        else:
            log_data["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName
            }

        return json.dumps(log_data, default=str)


class ContextLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that injects context fields into all log records.
    """

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: MutableMapping[str, Any]) -> tuple[str, MutableMapping[str, Any]]:
        """Merge the adapter's context into the record's extra fields."""
        extra = kwargs.get("extra", {})
        extra.update(self.extra)
        kwargs["extra"] = extra
        return msg, kwargs

    def with_context(self, **context: Any) -> "ContextLoggerAdapter":
        """
        Create a new logger adapter with additional context.

        Args:
            **context: Additional context fields

        Returns:
            New logger adapter with merged context
        """
        new_extra = self.extra.copy()
        new_extra.update(context)
        return ContextLoggerAdapter(self.logger, new_extra)


def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure structured logging for the host process.

    Sets up:
    - Level names for the extra severities
    - JSON formatter on a stdout handler
    - Root logger configuration

    Args:
        log_level: Log level (DEBUG, INFO, NOTICE, WARNING, ERROR, CRITICAL, ALERT, EMERGENCY)
    """
    register_severity_levels()
    log_level = log_level.upper()

    formatter = JSONFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    # Reduce noise from the HTTP client stack
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str, **context: Any) -> ContextLoggerAdapter:
    """
    Get a context-aware logger for a module.

    Args:
        name: Logger name (typically __name__)
        **context: Initial context fields

    Returns:
        Context logger adapter
    """
    base_logger = logging.getLogger(name)
    return ContextLoggerAdapter(base_logger, context)


class LogBackend(Protocol):
    """Anything able to receive a dispatched fault."""

    def log(self, level: Severity, message: str, context: Dict[str, str]) -> None:
        ...


class LoggerBackend:
    """
    Backend that forwards dispatched faults to a stdlib logger.

    The serialized context travels on the record as ``fault_context`` so it
    cannot collide with LogRecord attributes such as ``message``.
    """

    def __init__(self, logger_name: str = "mainLogger"):
        register_severity_levels()
        self.logger = logging.getLogger(logger_name)

    def log(self, level: Severity, message: str, context: Dict[str, str]) -> None:
        self.logger.log(int(level), message, extra={FAULT_CONTEXT_ATTR: context})
