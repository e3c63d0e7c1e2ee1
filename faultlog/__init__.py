"""
faultlog: capture uncaught exceptions, warnings and shutdown faults and
forward them to structured logging with the true call site attached.
"""

from faultlog.bootstrap import install
from faultlog.models import Fault, FaultFrame, FaultKind, RecoverableErrorWarning, Severity
from faultlog.services import ErrorCaptureService, LogDispatcher, get_log_dispatcher

__version__ = "0.1.0"

__all__ = [
    "install",
    "Fault",
    "FaultFrame",
    "FaultKind",
    "RecoverableErrorWarning",
    "Severity",
    "ErrorCaptureService",
    "LogDispatcher",
    "get_log_dispatcher",
]
