"""
Chunking run models.

Dependencies: pydantic
System role: Return types of the chunk builder and chunking pipeline
"""

from pydantic import BaseModel, Field

from docindex.models.chunk import DocumentChunk


class ValidationReport(BaseModel):
    """Result of the post-build validation pass."""

    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    invalid_ids: list[str] = Field(default_factory=list, description="Ids of chunks with errors")

    @property
    def is_valid(self) -> bool:
        return not self.errors


class ChunkingRunInfo(BaseModel):
    """Metadata describing one chunking run."""

    total_input_items: int
    total_output_chunks: int
    average_chunk_size: int
    processing_time_ms: float
    strategy: str


class ChunkingResult(BaseModel):
    """Chunks plus run metadata and validation outcome."""

    chunks: list[DocumentChunk]
    metadata: ChunkingRunInfo
    validation: ValidationReport = Field(default_factory=ValidationReport)


class ChunkStatistics(BaseModel):
    """Size, type, and namespace distribution of a chunk set."""

    total_chunks: int = 0
    average_size: int = 0
    size_distribution: dict[str, int] = Field(default_factory=dict)
    type_distribution: dict[str, int] = Field(default_factory=dict)
    namespace_distribution: dict[str, int] = Field(default_factory=dict)
