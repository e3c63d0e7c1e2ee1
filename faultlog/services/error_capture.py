"""
Error Capture: process-wide hooks that turn host faults into log entries.

``ErrorCaptureService`` installs itself as:
- the ``atexit`` callback (end-of-process faults)
- ``sys.excepthook`` and ``threading.excepthook`` (uncaught exceptions)
- ``warnings.showwarning`` (recoverable runtime errors)

Construct one instance at process start and keep the handle; ``unregister``
restores whatever hooks were installed before.
"""

import atexit
import sys
import threading
import warnings
from types import TracebackType
from typing import Any, Callable, Optional, Sequence, Type

from faultlog.models.fault import Fault, FaultFrame, capture_stack
from faultlog.models.kinds import Disposition, FaultKind, kind_for_warning, severity_for
from faultlog.services.log_dispatcher import LogDispatcher, get_log_dispatcher
from faultlog.utils.logging import get_logger

logger = get_logger(__name__)


def last_runtime_exception() -> Optional[BaseException]:
    """Last exception the interpreter reported as unhandled, if any."""
    exc = getattr(sys, "last_exc", None)
    if exc is None:
        exc = getattr(sys, "last_value", None)
    return exc if isinstance(exc, BaseException) else None


class ErrorCaptureService:
    """
    Translates uncaught exceptions, warnings and shutdown faults into
    dispatched log entries.

    Args:
        dispatcher: Where faults are sent; defaults to the global dispatcher
    """

    def __init__(self, dispatcher: Optional[LogDispatcher] = None):
        self.dispatcher = dispatcher if dispatcher is not None else get_log_dispatcher()
        self.reporting_mask = 0
        self._registered = False
        self._previous_excepthook: Optional[Callable] = None
        self._previous_threading_excepthook: Optional[Callable] = None
        self._previous_showwarning: Optional[Callable] = None
        self._last_reported: Optional[BaseException] = None

    @property
    def registered(self) -> bool:
        return self._registered

    def register(self, reporting_mask: int) -> None:
        """
        Install the process-wide hooks.

        Registering again replaces the previous registration.

        Args:
            reporting_mask: Bitmask of FaultKind values surfaced by
                ``handle_error``; other kinds are dropped silently
        """
        if self._registered:
            self.unregister()

        self.reporting_mask = int(reporting_mask)

        atexit.register(self.handle_shutdown)
        self._previous_excepthook = sys.excepthook
        sys.excepthook = self._excepthook
        self._previous_threading_excepthook = threading.excepthook
        threading.excepthook = self._threading_excepthook
        self._previous_showwarning = warnings.showwarning
        warnings.showwarning = self._showwarning
        self._registered = True

        logger.debug(
            "Fault capture hooks installed",
            extra={"reporting_mask": self.reporting_mask}
        )

    def unregister(self) -> None:
        """Restore the hooks that were active before ``register``."""
        if not self._registered:
            return

        atexit.unregister(self.handle_shutdown)
        if sys.excepthook == self._excepthook:
            sys.excepthook = self._previous_excepthook
        if threading.excepthook == self._threading_excepthook:
            threading.excepthook = self._previous_threading_excepthook
        if warnings.showwarning == self._showwarning:
            warnings.showwarning = self._previous_showwarning
        self._registered = False

        logger.debug("Fault capture hooks removed")

    def handle_shutdown(self) -> None:
        """
        Report the last fault the runtime observed before exiting.

        Never filtered by the reporting mask: the process is already going
        down. Exceptions already reported by ``handle_exception`` and
        ``KeyboardInterrupt`` are skipped.
        """
        exc = last_runtime_exception()
        if exc is None or exc is self._last_reported:
            return
        # Ctrl-C is left to the previous excepthook
        if isinstance(exc, KeyboardInterrupt):
            return
        fault = Fault.from_exception(exc, code=FaultKind.ERROR)
        self.dispatcher.critical(fault)

    def handle_exception(self, exc: BaseException) -> None:
        """Report an uncaught exception at critical severity."""
        self._last_reported = exc
        self.dispatcher.critical(exc)

    def handle_error(
        self,
        kind: int,
        message: str,
        file: str = "",
        line: int = 0,
        extra: Any = None,
        stack: Optional[Sequence[FaultFrame]] = None,
    ) -> None:
        """
        Report a recoverable runtime error.

        Args:
            kind: FaultKind of the error
            message: Error message
            file: File the error was raised in
            line: Line the error was raised on
            extra: Free-form payload attached to the log entry
            stack: Stack to record instead of the live one

        Raises:
            Fault: For kinds whose disposition is FATAL, after logging and
                removing the hooks
        """
        if not self.is_reported(kind):
            return

        if stack is None:
            stack = capture_stack(sys._getframe())
        fault = Fault(
            message=message, code=kind, file=file, line=line, stack=stack, extra=extra
        )
        self.dispatcher.log(severity_for(kind), fault)

        if FaultKind(kind).disposition is Disposition.FATAL:
            self.unregister()
            raise fault

    def is_reported(self, kind: int) -> bool:
        """Whether a fault kind is inside the reporting mask."""
        # generic exceptions count as errors
        code = int(kind) or int(FaultKind.ERROR)
        return bool(code & self.reporting_mask)

    def _excepthook(
        self,
        exc_type: Type[BaseException],
        exc_value: BaseException,
        exc_tb: Optional[TracebackType],
    ) -> None:
        if not issubclass(exc_type, KeyboardInterrupt):
            self.handle_exception(exc_value)
        previous = self._previous_excepthook or sys.__excepthook__
        previous(exc_type, exc_value, exc_tb)

    def _threading_excepthook(self, args: Any) -> None:
        if args.exc_type is SystemExit:
            return
        if args.exc_value is not None:
            self.handle_exception(args.exc_value)
        previous = self._previous_threading_excepthook or threading.__excepthook__
        previous(args)

    def _showwarning(
        self,
        message: Any,
        category: Type[Warning],
        filename: str,
        lineno: int,
        file: Any = None,
        line: Optional[str] = None,
    ) -> None:
        extra = {"category": category.__name__}
        if line:
            extra["source"] = line.strip()
        # the runtime already resolved the location, honouring stacklevel
        hook, *callers = capture_stack(sys._getframe())
        stack = [hook.model_copy(update={"file": None, "line": None}), *callers]
        self.handle_error(
            kind_for_warning(category), str(message), filename, lineno, extra, stack
        )
