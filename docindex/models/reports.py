"""
Pipeline report models.

Dependencies: pydantic
System role: Return types of the indexing pipeline
"""

from typing import Any

from pydantic import BaseModel, Field

from docindex.models.chunking import ChunkingRunInfo, ValidationReport
from docindex.models.search import LexicalIndexStats
from docindex.models.tracking import SyncSummary, TrackingStats


class IndexingReport(BaseModel):
    """Outcome of one index run across every stage."""

    parse_failures: dict[str, str] = Field(default_factory=dict, description="filename -> error message")
    chunking: ChunkingRunInfo
    validation: ValidationReport = Field(default_factory=ValidationReport)
    dropped_chunk_ids: list[str] = Field(default_factory=list, description="Chunks removed by validation")
    sync: SyncSummary = Field(default_factory=SyncSummary)
    deleted_points: int = 0
    embedded: int = 0
    failed_ids: list[str] = Field(default_factory=list)
    skipped_ids: list[str] = Field(default_factory=list)
    stored_points: int = 0
    lexical_documents: int = 0


class RetryReport(BaseModel):
    """Outcome of re-embedding failed chunks."""

    reset: int = 0
    embedded: int = 0
    failed_ids: list[str] = Field(default_factory=list)
    missing_ids: list[str] = Field(default_factory=list, description="Pending ids with no chunk in the registry")
    stored_points: int = 0


class PipelineStats(BaseModel):
    """Combined view of tracker, vector store, and lexical index."""

    registered_chunks: int = 0
    tracking: TrackingStats = Field(default_factory=TrackingStats)
    vector_store: dict[str, Any] = Field(default_factory=dict)
    lexical: LexicalIndexStats = Field(default_factory=LexicalIndexStats)
