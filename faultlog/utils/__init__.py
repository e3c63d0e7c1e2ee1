"""
Utility modules for faultlog.
"""

from faultlog.utils.export import export, dump_context
from faultlog.utils.logging import (
    get_logger,
    setup_logging,
    register_severity_levels,
    JSONFormatter,
    LogBackend,
    LoggerBackend,
)

__all__ = [
    "export",
    "dump_context",
    "get_logger",
    "setup_logging",
    "register_severity_levels",
    "JSONFormatter",
    "LogBackend",
    "LoggerBackend",
]
