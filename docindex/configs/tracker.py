"""
Embedding tracker configuration settings.

Manages the SQLite ledger location and SQLAlchemy engine options.

Dependencies: pydantic, pydantic_settings
System role: Tracking store connection configuration for ORM
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from docindex.configs.base import BaseSettings


class TrackerSettings(BaseSettings):
    """SQLite tracking database configuration."""

    model_config = SettingsConfigDict(env_prefix="DOCINDEX_TRACKER_")

    db_path: str = Field(
        default="./data/embeddings-tracking.db",
        description="SQLite file path, or ':memory:' for an ephemeral ledger",
    )
    echo_sql: bool = Field(default=False, description="Echo SQL statements to logs")
    export_path: str = Field(
        default="./data/tracking-export.json",
        description="Default target for tracking snapshots",
    )

    @property
    def database_url(self) -> str:
        """
        Construct SQLite connection URL.

        Returns:
            str: SQLAlchemy-compatible database URL
        """
        if self.db_path == ":memory:":
            return "sqlite://"
        return f"sqlite:///{self.db_path}"

    @property
    def is_memory(self) -> bool:
        """Whether the ledger lives only for the lifetime of the engine."""
        return self.db_path == ":memory:"
