"""Fault record data models."""

import sys
import traceback
from types import FrameType, TracebackType
from typing import Any, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict

# Frames of these modules only deliver a fault to a hook and never count as
# a call site.
TRANSPARENT_MODULES = frozenset({"warnings", "_py_warnings"})


class FaultFrame(BaseModel):
    """
    One entry of a captured call stack.

    ``file``/``line`` give the call site that invoked ``function``; the
    outermost frame has none.
    """

    model_config = ConfigDict(frozen=True)

    function: str
    cls: Optional[str] = None
    file: Optional[str] = None
    line: Optional[int] = None

    def render(self, index: int) -> str:
        name = f"{self.cls.rsplit('.', 1)[-1]}.{self.function}" if self.cls else self.function
        if self.file is None:
            return f"#{index} {name}()"
        return f"#{index} {self.file}:{self.line} {name}()"


def declaring_class(frame: FrameType) -> Optional[str]:
    """Module-qualified name of the class whose method owns ``frame``."""
    qualname = frame.f_code.co_qualname
    if "." not in qualname:
        return None
    owner = qualname.rsplit(".", 1)[0]
    if owner.endswith("<locals>"):
        return None
    module = frame.f_globals.get("__name__", "")
    return f"{module}.{owner}" if module else owner


def _is_transparent(frame: FrameType) -> bool:
    return frame.f_globals.get("__name__") in TRANSPARENT_MODULES


def _link(entries: Sequence[Tuple[FrameType, int]]) -> List[FaultFrame]:
    # entries are innermost first; each frame's call site is where the next
    # (outer) entry currently stands
    stack = []
    for index, (frame, _) in enumerate(entries):
        caller = entries[index + 1] if index + 1 < len(entries) else None
        stack.append(FaultFrame(
            function=frame.f_code.co_name,
            cls=declaring_class(frame),
            file=caller[0].f_code.co_filename if caller else None,
            line=caller[1] if caller else None,
        ))
    return stack


def capture_stack(frame: Optional[FrameType]) -> List[FaultFrame]:
    """Capture the live stack from ``frame`` outwards."""
    entries = []
    while frame is not None:
        if not _is_transparent(frame):
            entries.append((frame, frame.f_lineno))
        frame = frame.f_back
    return _link(entries)


def stack_from_traceback(tb: Optional[TracebackType]) -> Tuple[List[FaultFrame], str, int]:
    """
    Build a stack from a traceback.

    Returns:
        Tuple of (stack innermost first, file of the raise point, line of the raise point)
    """
    entries = [
        (frame, lineno) for frame, lineno in traceback.walk_tb(tb)
        if not _is_transparent(frame)
    ]
    if not entries:
        return [], "", 0
    entries.reverse()
    innermost, lineno = entries[0]
    return _link(entries), innermost.f_code.co_filename, lineno


def render_trace(stack: Sequence[FaultFrame]) -> str:
    """One line per frame, innermost first."""
    return "\n".join(frame.render(index) for index, frame in enumerate(stack))


def qualified_class_name(obj: Any) -> str:
    klass = type(obj)
    if klass.__module__ == "builtins":
        return klass.__qualname__
    return f"{klass.__module__}.{klass.__qualname__}"


class Fault(Exception):
    """
    A normalized fault record.

    Everything except ``file``/``line`` is fixed at construction; those two
    may be moved once by origin attribution through ``relocate``. A fault is
    an exception so that fatal kinds can be raised back into the host.
    """

    def __init__(
        self,
        message: str = "",
        code: int = 0,
        file: str = "",
        line: int = 0,
        stack: Optional[Sequence[FaultFrame]] = None,
        extra: Any = None,
        trace: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        if stack is None:
            stack = capture_stack(sys._getframe(1))
        self._message = message
        self._code = int(code)
        self._file = file
        self._line = line
        self._stack: Tuple[FaultFrame, ...] = tuple(stack)
        self._extra = extra
        self._trace = trace
        self._cause = cause
        self._origin_index: Optional[int] = None

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        code: int = 0,
        stack: Optional[Sequence[FaultFrame]] = None,
    ) -> "Fault":
        """
        Wrap an arbitrary exception.

        Stack and location come from the exception's traceback. A ``stack``
        argument is only used when the exception was never raised.
        """
        frames, file, line = stack_from_traceback(exc.__traceback__)
        if not frames and stack is not None:
            frames = list(stack)
        return cls(
            message=str(exc),
            code=code,
            file=file,
            line=line,
            stack=frames,
            cause=exc,
        )

    @property
    def message(self) -> str:
        return self._message

    @property
    def code(self) -> int:
        return self._code

    @property
    def file(self) -> str:
        return self._file

    @property
    def line(self) -> int:
        return self._line

    @property
    def stack(self) -> Tuple[FaultFrame, ...]:
        return self._stack

    @property
    def extra(self) -> Any:
        return self._extra

    @property
    def cause(self) -> Optional[BaseException]:
        return self._cause

    @property
    def origin_index(self) -> Optional[int]:
        """Index of the first caller frame, once attribution has run."""
        return self._origin_index

    @property
    def trace(self) -> str:
        if self._trace is not None:
            return self._trace
        return render_trace(self._stack)

    @property
    def class_name(self) -> str:
        """Class of the wrapped exception, or of the fault itself."""
        return qualified_class_name(self._cause if self._cause is not None else self)

    def relocate(self, file: str, line: int, origin_index: int) -> bool:
        """
        Record the attributed origin.

        Returns:
            False if the fault had already been attributed (nothing changes)
        """
        if self._origin_index is not None:
            return False
        self._file = file
        self._line = line
        self._origin_index = origin_index
        return True

    def __str__(self) -> str:
        return self._message

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self._message!r}, code={self._code}, "
            f"file={self._file!r}, line={self._line})"
        )
