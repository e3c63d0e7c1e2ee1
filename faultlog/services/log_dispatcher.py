"""
Log Dispatcher: the single path from a fault or a log call to the backend.

Every call goes through ``LogDispatcher.log``, which:
- resolves the fault behind the call (embedded, passed as message, or a
  placeholder capturing the live stack)
- attributes the true call site by skipping the capture library's frames
- trims those frames off the textual trace
- attaches extra payload and HTTP request details when available
- serializes the context once per fault site through the context cache
"""

import sys
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional, Union

from faultlog.models.fault import Fault, capture_stack
from faultlog.models.kinds import Severity
from faultlog.services.context_cache import ContextCache, cache_key
from faultlog.services.http_context import HasRequestContext, as_fault
from faultlog.utils.export import DEFAULT_DEPTH, dump_context, export, truncate
from faultlog.utils.logging import LogBackend, LoggerBackend

# Context key under which callers may embed an exception
EXCEPTION_KEY = "exception"

DEFAULT_RESPONSE_BODY_LIMIT = 1000

Level = Union[Severity, int, str]


def _qualified(klass: type) -> str:
    return f"{klass.__module__}.{klass.__qualname__}"


@lru_cache(maxsize=None)
def capture_classes() -> frozenset:
    """Declaring classes whose frames belong to the capture library."""
    from faultlog.services.error_capture import ErrorCaptureService

    return frozenset({_qualified(LogDispatcher), _qualified(ErrorCaptureService)})


def trim_trace(trace: str, origin_index: int) -> str:
    """Drop exactly ``origin_index`` leading lines of a trace."""
    lines = trace.splitlines()
    return "\n".join(lines[origin_index:]).strip()


class LogDispatcher:
    """
    Routes faults and plain messages to a logging backend.

    Args:
        backend: Receives (severity, message, context); defaults to a
            LoggerBackend on the ``mainLogger`` logger
        cache: Context cache, shared between dispatchers if passed in
        export_depth: Container levels expanded when rendering values
        response_body_limit: Max characters of an HTTP response body kept
    """

    def __init__(
        self,
        backend: Optional[LogBackend] = None,
        cache: Optional[ContextCache] = None,
        export_depth: int = DEFAULT_DEPTH,
        response_body_limit: int = DEFAULT_RESPONSE_BODY_LIMIT,
    ):
        self.backend = backend if backend is not None else LoggerBackend()
        self.cache = cache if cache is not None else ContextCache()
        self.export_depth = export_depth
        self.response_body_limit = response_body_limit

    def emergency(self, message: Any, context: Any = None) -> None:
        """System is unusable."""
        self.log(Severity.EMERGENCY, message, context)

    def alert(self, message: Any, context: Any = None) -> None:
        """Action must be taken immediately."""
        self.log(Severity.ALERT, message, context)

    def critical(self, message: Any, context: Any = None) -> None:
        """Critical conditions, e.g. an unexpected exception."""
        self.log(Severity.CRITICAL, message, context)

    def error(self, message: Any, context: Any = None) -> None:
        """Runtime errors that do not require immediate action."""
        self.log(Severity.ERROR, message, context)

    def warning(self, message: Any, context: Any = None) -> None:
        """Exceptional occurrences that are not errors."""
        self.log(Severity.WARNING, message, context)

    def notice(self, message: Any, context: Any = None) -> None:
        """Normal but significant events."""
        self.log(Severity.NOTICE, message, context)

    def info(self, message: Any, context: Any = None) -> None:
        """Interesting events."""
        self.log(Severity.INFO, message, context)

    def debug(self, message: Any, context: Any = None) -> None:
        """Detailed debug information."""
        self.log(Severity.DEBUG, message, context)

    def log(self, level: Level, message: Any, context: Any = None) -> None:
        """
        Log with an arbitrary level.

        Args:
            level: Severity, its numeric value or its name
            message: Text, any value, or an exception to report
            context: Mapping of diagnostic fields; other values are kept
                under ``value``. An exception under ``exception`` is
                reported as the fault.

        Raises:
            ValueError: If the level is unknown
        """
        level = Severity.coerce(level)

        if isinstance(context, Mapping):
            fields: Dict[str, Any] = dict(context)
        elif context is None:
            fields = {}
        else:
            fields = {"value": context}

        embedded = fields.get(EXCEPTION_KEY)
        if isinstance(embedded, BaseException):
            del fields[EXCEPTION_KEY]
            fault = self._wrap(embedded)
            if not isinstance(message, str):
                message = export(message, self.export_depth)
            message = f"{message} {fault.message}".strip()
            fields["code"] = fault.code
            fields["class"] = fault.class_name
        elif isinstance(message, BaseException):
            fault = self._wrap(message)
            message = fault.message
            fields["code"] = fault.code
            fields["class"] = fault.class_name
        else:
            fault = Fault()

        origin_index = self.locate_origin(fault)

        if fault.file:
            fields["file"] = fault.file
        if fault.line:
            fields["line"] = fault.line
        fields["trace"] = trim_trace(fault.trace, origin_index)
        if fault.extra is not None:
            fields["extra"] = fault.extra

        fields.update(self._request_context(fault))

        rendered = export(message, self.export_depth)
        key = cache_key(level, rendered, fault.file, fault.line)
        serialized = self.cache.get_or_create(
            key, lambda: dump_context(fields, self.export_depth)
        )

        self.backend.log(level, rendered, dict(serialized))

    def locate_origin(self, fault: Fault) -> int:
        """
        Attribute the fault to the first frame outside the capture library.

        Walks the stack from the innermost frame while frames belong to the
        dispatcher or the capture service, moving the fault's file/line to
        each such frame's call site. Runs once per fault.

        Returns:
            Number of leading capture-internal frames (0 if none)
        """
        if fault.origin_index is not None:
            return fault.origin_index

        internal = capture_classes()
        origin_index = 0
        file, line = fault.file, fault.line
        for frame in fault.stack:
            if frame.cls not in internal:
                break
            origin_index += 1
            if frame.file is not None:
                file = frame.file
            if frame.line is not None:
                line = frame.line

        fault.relocate(file, line, origin_index)
        return origin_index

    def _wrap(self, exc: BaseException) -> Fault:
        stack = None
        if not isinstance(exc, Fault) and exc.__traceback__ is None:
            # never raised: fall back to where it is being logged from
            stack = capture_stack(sys._getframe(1))
        return as_fault(exc, stack=stack)

    def _request_context(self, fault: Fault) -> Dict[str, Any]:
        source = fault if isinstance(fault, HasRequestContext) else fault.cause
        if not isinstance(source, HasRequestContext):
            return {}
        fields = dict(source.request_context())
        if "response_body" in fields:
            fields["response_body"] = truncate(
                export(fields["response_body"], self.export_depth),
                self.response_body_limit,
            )
        return fields


_dispatcher: Optional[LogDispatcher] = None


def get_log_dispatcher() -> LogDispatcher:
    """
    Get or create the global dispatcher configured from settings.

    Returns:
        LogDispatcher instance
    """
    global _dispatcher
    if _dispatcher is None:
        from faultlog.config import settings

        _dispatcher = LogDispatcher(
            backend=LoggerBackend(settings.logger_name),
            export_depth=settings.export_depth,
            response_body_limit=settings.response_body_limit,
        )
    return _dispatcher
