"""Data models for fault capture."""

from .fault import Fault, FaultFrame, capture_stack, render_trace, stack_from_traceback
from .kinds import (
    SEVERITY_MAP,
    Disposition,
    FaultKind,
    FaultWarning,
    RecoverableErrorWarning,
    Severity,
    UserErrorWarning,
    UserNoticeWarning,
    kind_for_warning,
    severity_for,
)

__all__ = [
    # Fault record
    "Fault",
    "FaultFrame",
    "capture_stack",
    "render_trace",
    "stack_from_traceback",
    # Kinds and severities
    "Severity",
    "Disposition",
    "FaultKind",
    "SEVERITY_MAP",
    "severity_for",
    "kind_for_warning",
    "FaultWarning",
    "UserErrorWarning",
    "UserNoticeWarning",
    "RecoverableErrorWarning",
]
