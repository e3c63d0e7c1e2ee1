"""
Unit tests for fault kinds and the severity mapping.
"""

import pytest

from faultlog.models.kinds import (
    SEVERITY_MAP,
    Disposition,
    FaultKind,
    RecoverableErrorWarning,
    Severity,
    UserErrorWarning,
    kind_for_warning,
    severity_for,
)


def test_severities_are_ordered():
    """Test that severities sort from debug up to emergency."""
    ordered = sorted(Severity)

    assert [s.name for s in ordered] == [
        "DEBUG", "INFO", "NOTICE", "WARNING", "ERROR", "CRITICAL", "ALERT", "EMERGENCY"
    ]


def test_severity_map_covers_every_fault_kind():
    """Test that the table has one entry per fault kind."""
    kinds = [kind for kind in FaultKind if kind is not FaultKind.ALL]

    assert len(SEVERITY_MAP) == 15
    assert set(SEVERITY_MAP) == set(kinds)


@pytest.mark.parametrize("kind,expected", [
    (FaultKind.ERROR, Severity.CRITICAL),
    (FaultKind.PARSE, Severity.ALERT),
    (FaultKind.USER_ERROR, Severity.ERROR),
    (FaultKind.DEPRECATED, Severity.NOTICE),
    (FaultKind.WARNING, Severity.WARNING),
])
def test_severity_for_mapped_kinds(kind, expected):
    """Test severity lookup for mapped kinds."""
    assert severity_for(kind) is expected


def test_severity_for_unmapped_kind_is_critical():
    """Test that unknown kinds default to critical."""
    assert severity_for(FaultKind.ERROR | FaultKind.WARNING) is Severity.CRITICAL
    assert severity_for(0) is Severity.CRITICAL


def test_only_recoverable_error_is_fatal():
    """Test that exactly one kind is tagged fatal."""
    fatal = [kind for kind in SEVERITY_MAP if kind.disposition is Disposition.FATAL]

    assert fatal == [FaultKind.RECOVERABLE_ERROR]


def test_severity_coerce():
    """Test resolving severities from names and numbers."""
    assert Severity.coerce("notice") is Severity.NOTICE
    assert Severity.coerce(60) is Severity.ALERT
    assert Severity.coerce(Severity.DEBUG) is Severity.DEBUG

    with pytest.raises(ValueError):
        Severity.coerce("loud")


@pytest.mark.parametrize("category,expected", [
    (DeprecationWarning, FaultKind.DEPRECATED),
    (PendingDeprecationWarning, FaultKind.DEPRECATED),
    (FutureWarning, FaultKind.USER_DEPRECATED),
    (RuntimeWarning, FaultKind.WARNING),
    (UserWarning, FaultKind.USER_WARNING),
    (ResourceWarning, FaultKind.NOTICE),
    (UserErrorWarning, FaultKind.USER_ERROR),
    (RecoverableErrorWarning, FaultKind.RECOVERABLE_ERROR),
])
def test_kind_for_warning(category, expected):
    """Test mapping warning categories onto fault kinds."""
    assert kind_for_warning(category) is expected


def test_kind_for_warning_subclass_inherits_parent_kind():
    """Test that custom categories resolve through their MRO."""

    class LegacyApiWarning(DeprecationWarning):
        pass

    assert kind_for_warning(LegacyApiWarning) is FaultKind.DEPRECATED
    assert kind_for_warning(Warning) is FaultKind.WARNING
