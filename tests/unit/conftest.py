"""
Shared fixtures for fault capture tests.
"""

from typing import Dict, List, Tuple

import pytest

from faultlog.models.kinds import Severity
from faultlog.services.error_capture import ErrorCaptureService
from faultlog.services.log_dispatcher import LogDispatcher


class RecordingBackend:
    """Backend that keeps every dispatched entry in memory."""

    def __init__(self):
        self.calls: List[Tuple[Severity, str, Dict[str, str]]] = []

    def log(self, level: Severity, message: str, context: Dict[str, str]) -> None:
        self.calls.append((level, message, context))


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def dispatcher(backend: RecordingBackend) -> LogDispatcher:
    return LogDispatcher(backend=backend)


@pytest.fixture
def service(dispatcher: LogDispatcher):
    """Capture service that is always unregistered after the test."""
    capture = ErrorCaptureService(dispatcher)
    yield capture
    capture.unregister()
