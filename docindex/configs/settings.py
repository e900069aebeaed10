"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from docindex.configs.base import BaseSettings
from docindex.configs.chunking import ChunkingSettings
from docindex.configs.embeddings import EmbeddingSettings
from docindex.configs.observability import ObservabilitySettings
from docindex.configs.search import SearchSettings
from docindex.configs.tracker import TrackerSettings
from docindex.configs.vector_store import VectorStoreSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    chunking: ChunkingSettings = Field(default_factory=ChunkingSettings)
    embeddings: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    tracker: TrackerSettings = Field(default_factory=TrackerSettings)
    vector_store: VectorStoreSettings = Field(default_factory=VectorStoreSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Environment variables are read once; callers that need different
    values construct Settings directly and pass it to the pipeline.

    Returns:
        Settings: Application settings instance

    Usage:
        from docindex.configs import get_settings
        settings = get_settings()
    """
    return Settings()
