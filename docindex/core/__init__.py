"""Core domain logic: parsing, chunking, embeddings, and lexical search."""

from docindex.core.exceptions import (
    ChunkValidationError,
    DocIndexException,
    EmbeddingError,
    ParseError,
    StoreUnavailableError,
    SyncConsistencyError,
    TrackerError,
    UnknownStrategyError,
    UnsupportedRequestError,
    VectorStoreError,
)

__all__ = [
    "ChunkValidationError",
    "DocIndexException",
    "EmbeddingError",
    "ParseError",
    "StoreUnavailableError",
    "SyncConsistencyError",
    "TrackerError",
    "UnknownStrategyError",
    "UnsupportedRequestError",
    "VectorStoreError",
]
