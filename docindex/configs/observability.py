"""
Observability configuration settings.

Read from DOCINDEX_LOG_LEVEL and DOCINDEX_QUIET_LOGGERS.

Dependencies: pydantic, pydantic_settings
System role: Logging configuration
"""

from pydantic import Field

from docindex.configs.base import BaseSettings


class ObservabilitySettings(BaseSettings):
    """Logging configuration."""

    log_level: str = Field(default="INFO", description="Root log level")
    quiet_loggers: list[str] = Field(
        default=["httpx", "httpcore", "urllib3", "openai"],
        description="Third-party loggers raised to WARNING",
    )
