"""
Process bootstrap for fault capture.
"""

from typing import Optional

from faultlog.config import Settings, get_settings
from faultlog.services.error_capture import ErrorCaptureService
from faultlog.services.log_dispatcher import LogDispatcher
from faultlog.utils.logging import LoggerBackend, get_logger, setup_logging

logger = get_logger(__name__)


def install(settings: Optional[Settings] = None) -> ErrorCaptureService:
    """
    Wire logging, dispatcher and capture service, then register the hooks.

    Call once at process start and keep the returned handle for
    ``unregister``.

    Args:
        settings: Overrides the settings loaded from the environment

    Returns:
        The registered ErrorCaptureService
    """
    settings = settings or get_settings()

    if settings.configure_logging:
        setup_logging(settings.log_level)

    dispatcher = LogDispatcher(
        backend=LoggerBackend(settings.logger_name),
        export_depth=settings.export_depth,
        response_body_limit=settings.response_body_limit,
    )
    service = ErrorCaptureService(dispatcher)
    service.register(settings.reporting_mask)

    logger.info(
        "Fault capture installed",
        extra={"logger_name": settings.logger_name}
    )
    return service
