"""
Base configuration settings.

Every settings section inherits the shared .env handling from here and
only declares its own environment prefix.

Dependencies: pydantic_settings
System role: Foundation for all configuration classes
"""

from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict


class BaseSettings(PydanticBaseSettings):
    """Reads DOCINDEX_* variables from the environment and .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DOCINDEX_",
        case_sensitive=False,
        extra="ignore",
    )
