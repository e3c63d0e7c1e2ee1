"""Fault kinds, severities and the static mapping between them."""

from enum import Enum, IntEnum, IntFlag
from typing import Dict, Type, Union


class Severity(IntEnum):
    """
    Ordered log severities.

    Values line up with the stdlib ``logging`` levels so a severity can be
    passed straight to ``Logger.log``. NOTICE, ALERT and EMERGENCY are
    registered as extra level names by ``setup_logging``.
    """

    DEBUG = 10
    INFO = 20
    NOTICE = 25
    WARNING = 30
    ERROR = 40
    CRITICAL = 50
    ALERT = 60
    EMERGENCY = 70

    @classmethod
    def coerce(cls, level: Union["Severity", int, str]) -> "Severity":
        """
        Resolve a severity from an enum member, its value or its name.

        Raises:
            ValueError: If the level does not name one of the eight severities
        """
        if isinstance(level, Severity):
            return level
        if isinstance(level, str):
            try:
                return cls[level.strip().upper()]
            except KeyError:
                raise ValueError(f"Unknown severity: {level!r}") from None
        return cls(level)


class Disposition(str, Enum):
    """What the host may do after a fault of a given kind was reported."""

    CONTINUE = "continue"
    FATAL = "fatal"


class FaultKind(IntFlag):
    """Bit flags identifying the kind of an observed fault."""

    ERROR = 1
    WARNING = 2
    PARSE = 4
    NOTICE = 8
    CORE_ERROR = 16
    CORE_WARNING = 32
    COMPILE_ERROR = 64
    COMPILE_WARNING = 128
    USER_ERROR = 256
    USER_WARNING = 512
    USER_NOTICE = 1024
    STRICT = 2048
    RECOVERABLE_ERROR = 4096
    DEPRECATED = 8192
    USER_DEPRECATED = 16384

    ALL = 32767

    @property
    def disposition(self) -> Disposition:
        """Recoverable errors must not let the host continue."""
        if self is FaultKind.RECOVERABLE_ERROR:
            return Disposition.FATAL
        return Disposition.CONTINUE


SEVERITY_MAP: Dict[FaultKind, Severity] = {
    FaultKind.ERROR: Severity.CRITICAL,
    FaultKind.WARNING: Severity.WARNING,
    FaultKind.PARSE: Severity.ALERT,
    FaultKind.NOTICE: Severity.NOTICE,
    FaultKind.CORE_ERROR: Severity.CRITICAL,
    FaultKind.CORE_WARNING: Severity.WARNING,
    FaultKind.COMPILE_ERROR: Severity.ALERT,
    FaultKind.COMPILE_WARNING: Severity.WARNING,
    FaultKind.USER_ERROR: Severity.ERROR,
    FaultKind.USER_WARNING: Severity.WARNING,
    FaultKind.USER_NOTICE: Severity.NOTICE,
    FaultKind.STRICT: Severity.NOTICE,
    FaultKind.RECOVERABLE_ERROR: Severity.ERROR,
    FaultKind.DEPRECATED: Severity.NOTICE,
    FaultKind.USER_DEPRECATED: Severity.NOTICE,
}


def severity_for(kind: int) -> Severity:
    """Severity for a fault kind; unmapped kinds are critical."""
    try:
        return SEVERITY_MAP.get(FaultKind(kind), Severity.CRITICAL)
    except ValueError:
        return Severity.CRITICAL


class FaultWarning(UserWarning):
    """Warning category that carries an explicit fault kind."""

    kind = FaultKind.USER_WARNING


class UserErrorWarning(FaultWarning):
    kind = FaultKind.USER_ERROR


class UserNoticeWarning(FaultWarning):
    kind = FaultKind.USER_NOTICE


class RecoverableErrorWarning(FaultWarning):
    """Emitting this aborts the current operation once it has been logged."""

    kind = FaultKind.RECOVERABLE_ERROR


WARNING_KIND_MAP: Dict[Type[Warning], FaultKind] = {
    DeprecationWarning: FaultKind.DEPRECATED,
    PendingDeprecationWarning: FaultKind.DEPRECATED,
    FutureWarning: FaultKind.USER_DEPRECATED,
    SyntaxWarning: FaultKind.COMPILE_WARNING,
    ImportWarning: FaultKind.CORE_WARNING,
    RuntimeWarning: FaultKind.WARNING,
    ResourceWarning: FaultKind.NOTICE,
    BytesWarning: FaultKind.STRICT,
    UnicodeWarning: FaultKind.STRICT,
    EncodingWarning: FaultKind.STRICT,
    UserWarning: FaultKind.USER_WARNING,
}


def kind_for_warning(category: Type[Warning]) -> FaultKind:
    """
    Map a warning category onto a fault kind.

    ``FaultWarning`` subclasses name their kind directly; stdlib categories
    are matched along the MRO so subclasses inherit their parent's kind.
    """
    if isinstance(category, type) and issubclass(category, FaultWarning):
        return category.kind
    for klass in getattr(category, "__mro__", ()):
        if klass in WARNING_KIND_MAP:
            return WARNING_KIND_MAP[klass]
    return FaultKind.WARNING
