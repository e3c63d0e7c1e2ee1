"""
Unit tests for the fault record.
"""

import inspect

from faultlog.models.fault import Fault, FaultFrame, capture_stack, render_trace
from faultlog.models.kinds import FaultKind

THIS_FILE = inspect.currentframe().f_code.co_filename


class Probe:
    def fire(self):
        return Fault("probe fired", code=FaultKind.USER_NOTICE)


def _explode():
    raise KeyError("missing")


def test_fault_captures_stack_with_declaring_class():
    """Test that a new fault records where it was built and who called it."""
    call_line = inspect.currentframe().f_lineno + 1
    fault = Probe().fire()

    frame = fault.stack[0]
    assert frame.function == "fire"
    assert frame.cls == f"{__name__}.Probe"
    assert frame.file == THIS_FILE
    assert frame.line == call_line

    assert fault.stack[1].function == "test_fault_captures_stack_with_declaring_class"
    assert fault.stack[1].cls is None


def test_fault_fields():
    """Test fault field access."""
    fault = Fault("disk full", code=FaultKind.WARNING, file="/srv/app.py", line=9, extra={"free": 0})

    assert fault.message == "disk full"
    assert str(fault) == "disk full"
    assert fault.code == 2
    assert fault.file == "/srv/app.py"
    assert fault.line == 9
    assert fault.extra == {"free": 0}
    assert fault.cause is None
    assert fault.origin_index is None
    assert fault.class_name == "faultlog.models.fault.Fault"


def test_fault_from_raised_exception():
    """Test wrapping an exception uses its traceback."""
    call_line = inspect.currentframe().f_lineno + 2
    try:
        _explode()
    except KeyError as exc:
        fault = Fault.from_exception(exc)

    assert fault.code == 0
    assert fault.cause is not None
    assert fault.class_name == "KeyError"
    assert fault.file == THIS_FILE
    assert fault.line == _explode.__code__.co_firstlineno + 1

    assert fault.stack[0].function == "_explode"
    assert fault.stack[0].line == call_line
    assert fault.stack[1].function == "test_fault_from_raised_exception"
    assert fault.stack[1].file is None


def test_fault_from_unraised_exception_uses_fallback_stack():
    """Test that an exception without traceback takes the given stack."""
    stack = [FaultFrame(function="handler", file="/srv/app.py", line=3)]

    fault = Fault.from_exception(ValueError("never raised"), stack=stack)

    assert fault.stack == tuple(stack)
    assert fault.file == ""
    assert fault.line == 0


def test_relocate_only_applies_once():
    """Test that attribution can move a fault only once."""
    fault = Fault("x", file="/a.py", line=1, stack=[])

    assert fault.relocate("/b.py", 2, 1) is True
    assert fault.relocate("/c.py", 3, 4) is False

    assert fault.file == "/b.py"
    assert fault.line == 2
    assert fault.origin_index == 1


def test_render_trace_one_line_per_frame():
    """Test textual trace rendering."""
    stack = [
        FaultFrame(function="log", cls="faultlog.services.log_dispatcher.LogDispatcher",
                   file="/lib/log_dispatcher.py", line=10),
        FaultFrame(function="main"),
    ]

    trace = render_trace(stack)

    assert trace.splitlines() == [
        "#0 /lib/log_dispatcher.py:10 LogDispatcher.log()",
        "#1 main()",
    ]


def test_custom_trace_overrides_rendering():
    """Test that an explicit trace text is kept verbatim."""
    fault = Fault("x", stack=[FaultFrame(function="main")], trace="custom\ntrace")

    assert fault.trace == "custom\ntrace"


def test_capture_stack_from_frame():
    """Test capturing a live stack from an explicit frame."""
    stack = capture_stack(inspect.currentframe())

    assert stack[0].function == "test_capture_stack_from_frame"
    assert stack[-1].file is None
