"""
Chunking configuration settings.

Controls strategy selection, size limits, and which enhancement and
optimization passes run during chunk construction.

Dependencies: pydantic, pydantic_settings
System role: Chunk builder and optimizer configuration
"""

from pydantic import Field, model_validator
from pydantic_settings import SettingsConfigDict

from docindex.configs.base import BaseSettings


class ChunkingSettings(BaseSettings):
    """Chunk construction and optimization configuration."""

    model_config = SettingsConfigDict(env_prefix="DOCINDEX_CHUNKING_")

    strategy: str = Field(
        default="hybrid",
        description="Registered chunking strategy name (method-level, context-aware, hierarchical, hybrid)",
    )
    max_chunk_size: int = Field(default=1500, ge=100, description="Maximum chunk size in characters")
    overlap_size: int = Field(default=200, ge=0, description="Overlap carried between split pieces")

    enhance_content: bool = Field(default=True, description="Run the chunk enhancer")
    optimize_chunks: bool = Field(default=True, description="Run the chunk optimizer")
    validate_output: bool = Field(default=True, description="Run the post-build validation pass")

    deduplication: bool = Field(default=True, description="Optimizer pass 1")
    split_oversized: bool = Field(default=True, description="Optimizer pass 2")
    merge_related: bool = Field(default=True, description="Optimizer pass 3")
    quality_scoring: bool = Field(default=True, description="Optimizer pass 4")

    @model_validator(mode="after")
    def _check_overlap(self) -> "ChunkingSettings":
        if self.overlap_size * 2 >= self.max_chunk_size:
            raise ValueError("overlap_size must be smaller than half of max_chunk_size")
        return self
