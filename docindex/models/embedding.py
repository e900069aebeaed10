"""
Embedding result models.

Dependencies: pydantic
System role: Embedding generator output
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class EmbeddingInfo(BaseModel):
    """Audit data recorded with each successful embedding."""

    model: str = Field(description="Embedding model that produced the vector")
    tokens: int = Field(description="Tokens attributed to this chunk")
    timestamp: datetime = Field(description="When the vector was produced (UTC)")


class EmbeddingResult(BaseModel):
    """
    Vector for one chunk.

    embedding_id doubles as the vector store point id and is fixed when the
    vector is produced.
    """

    chunk_id: str
    embedding: list[float]
    metadata: EmbeddingInfo
    embedding_id: str = Field(default_factory=lambda: str(uuid.uuid4()))


class ProviderResponse(BaseModel):
    """Response of one provider call over a batch of texts."""

    vectors: list[list[float]]
    model: str
    tokens_used: int = 0


class EmbeddingRunReport(BaseModel):
    """Summary of an embedding run across batches."""

    results: list[EmbeddingResult] = Field(default_factory=list)
    failed_ids: list[str] = Field(default_factory=list)
    skipped_ids: list[str] = Field(default_factory=list, description="Not attempted because the run was cancelled")
    batches: int = 0
    cancelled: bool = False
