"""
Fault capture configuration management.
"""

from pydantic_settings import BaseSettings

from faultlog.models.kinds import FaultKind


class Settings(BaseSettings):
    """Settings loaded from FAULTLOG_* environment variables."""

    # Fault kinds surfaced by the recoverable-error hook
    reporting_mask: int = int(FaultKind.ALL)

    # Logging
    log_level: str = "DEBUG"
    logger_name: str = "mainLogger"
    configure_logging: bool = False

    # Rendering
    export_depth: int = 3
    response_body_limit: int = 1000

    class Config:
        env_file = ".env"
        env_prefix = "FAULTLOG_"
        case_sensitive = False


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return settings
