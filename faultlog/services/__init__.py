"""Fault capture and dispatch services."""

from faultlog.services.context_cache import ContextCache, cache_key
from faultlog.services.http_context import HasRequestContext, HttpFault, as_fault
from faultlog.services.log_dispatcher import LogDispatcher, get_log_dispatcher
from faultlog.services.error_capture import ErrorCaptureService

__all__ = [
    'ContextCache',
    'cache_key',
    'HasRequestContext',
    'HttpFault',
    'as_fault',
    'LogDispatcher',
    'get_log_dispatcher',
    'ErrorCaptureService',
]
