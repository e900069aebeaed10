"""
Configuration management module.

Provides centralized, type-safe configuration using Pydantic Settings.
All config modules support environment variable mapping with validation.
"""

from docindex.configs.chunking import ChunkingSettings
from docindex.configs.embeddings import EmbeddingSettings
from docindex.configs.observability import ObservabilitySettings
from docindex.configs.search import SearchSettings
from docindex.configs.settings import Settings, get_settings
from docindex.configs.tracker import TrackerSettings
from docindex.configs.vector_store import VectorStoreSettings

__all__ = [
    "ChunkingSettings",
    "EmbeddingSettings",
    "ObservabilitySettings",
    "SearchSettings",
    "Settings",
    "TrackerSettings",
    "VectorStoreSettings",
    "get_settings",
]
