"""
Embedding tracking domain models.

Snapshots of tracking rows, sync partitions, and aggregate statistics
returned by the embedding tracker.

Dependencies: pydantic
System role: Tracker return types
"""

import enum
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from docindex.models.chunk import DocumentChunk


class TrackingStatus(str, enum.Enum):
    """
    Embedding lifecycle states of a tracked chunk.

    PENDING: Chunk needs an embedding
    COMPLETED: Embedding stored; embedding_id is set
    FAILED: Last embedding attempt failed; retryable
    OUTDATED: Chunk vanished from the latest corpus snapshot
    """

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    OUTDATED = "outdated"


class TrackingRecord(BaseModel):
    """Read-only snapshot of one embedding_tracking row."""

    model_config = ConfigDict(from_attributes=True)

    chunk_id: str
    chunk_hash: str
    embedding_id: str | None = None
    model_name: str | None = None
    tokens_used: int | None = None
    dimensions: int | None = None
    status: TrackingStatus
    error_message: str | None = None
    source_file: str
    namespace: str
    chunk_type: str
    importance: str
    created_at: datetime
    updated_at: datetime


class SyncSummary(BaseModel):
    """Counts of each sync partition."""

    new: int = 0
    updated: int = 0
    unchanged: int = 0
    removed: int = 0
    total: int = 0


class SyncResult(BaseModel):
    """Outcome of reconciling a corpus snapshot against tracking state."""

    new_chunks: list[DocumentChunk] = Field(default_factory=list)
    updated_chunks: list[DocumentChunk] = Field(default_factory=list)
    unchanged_chunks: list[DocumentChunk] = Field(default_factory=list)
    removed_ids: list[str] = Field(default_factory=list)
    summary: SyncSummary = Field(default_factory=SyncSummary)

    @property
    def new_ids(self) -> list[str]:
        return [chunk.id for chunk in self.new_chunks]

    @property
    def updated_ids(self) -> list[str]:
        return [chunk.id for chunk in self.updated_chunks]

    @property
    def unchanged_ids(self) -> list[str]:
        return [chunk.id for chunk in self.unchanged_chunks]

    @property
    def needs_embedding(self) -> list[DocumentChunk]:
        """Chunks the embedding generator has to process."""
        return [*self.new_chunks, *self.updated_chunks]


class TrackingStats(BaseModel):
    """Aggregate view of the tracking table."""

    total_chunks: int = 0
    completed: int = 0
    pending: int = 0
    failed: int = 0
    outdated: int = 0
    total_tokens: int = 0
    models: list[str] = Field(default_factory=list)
    namespaces: list[str] = Field(default_factory=list)
    last_update: str = Field(default="Never", description="ISO timestamp of the newest row change")
