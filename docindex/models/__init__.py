"""Domain models shared across the indexing pipeline."""

from docindex.models.chunk import (
    IMPORTANCE_RANK,
    ChunkMetadata,
    ChunkType,
    DocumentChunk,
    Importance,
    unique_ordered,
)
from docindex.models.chunking import ChunkingResult, ChunkingRunInfo, ChunkStatistics, ValidationReport
from docindex.models.embedding import EmbeddingInfo, EmbeddingResult, EmbeddingRunReport, ProviderResponse
from docindex.models.parsed_content import CodeExample, Parameter, ParsedContent, ReturnValue, TypeInfo
from docindex.models.reports import IndexingReport, PipelineStats, RetryReport
from docindex.models.requests import (
    ExportTrackingRequest,
    IndexRequest,
    LexicalSearchRequest,
    PipelineRequest,
    RetryFailedRequest,
    SemanticSearchRequest,
    StatsRequest,
)
from docindex.models.search import LexicalIndexStats, LexicalSearchResult, SearchFilters, VectorSearchResult
from docindex.models.tracking import SyncResult, SyncSummary, TrackingRecord, TrackingStats, TrackingStatus

__all__ = [
    "IMPORTANCE_RANK",
    "ChunkMetadata",
    "ChunkStatistics",
    "ChunkType",
    "ChunkingResult",
    "ChunkingRunInfo",
    "CodeExample",
    "DocumentChunk",
    "EmbeddingInfo",
    "EmbeddingResult",
    "EmbeddingRunReport",
    "ExportTrackingRequest",
    "Importance",
    "IndexRequest",
    "IndexingReport",
    "LexicalIndexStats",
    "LexicalSearchRequest",
    "LexicalSearchResult",
    "Parameter",
    "ParsedContent",
    "PipelineRequest",
    "PipelineStats",
    "ProviderResponse",
    "RetryFailedRequest",
    "RetryReport",
    "ReturnValue",
    "SearchFilters",
    "SemanticSearchRequest",
    "StatsRequest",
    "SyncResult",
    "SyncSummary",
    "TrackingRecord",
    "TrackingStats",
    "TrackingStatus",
    "TypeInfo",
    "ValidationReport",
    "VectorSearchResult",
    "unique_ordered",
]
