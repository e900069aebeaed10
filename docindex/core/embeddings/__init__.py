"""
Embedding tracking and generation.

Dependencies: sqlalchemy, langchain_openai, tenacity
System role: Change detection and vector generation
"""

from docindex.core.embeddings.generator import EmbeddingGenerator, cosine_similarity
from docindex.core.embeddings.providers import (
    EmbeddingProvider,
    LangChainEmbeddingProvider,
    OpenAIEmbeddingProvider,
    estimate_tokens,
    get_embedding_provider,
)
from docindex.core.embeddings.tracker import EmbeddingTracker, compute_chunk_hash

__all__ = [
    "EmbeddingGenerator",
    "EmbeddingProvider",
    "EmbeddingTracker",
    "LangChainEmbeddingProvider",
    "OpenAIEmbeddingProvider",
    "compute_chunk_hash",
    "cosine_similarity",
    "estimate_tokens",
    "get_embedding_provider",
]
