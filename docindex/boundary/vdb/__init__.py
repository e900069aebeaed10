"""Vector database boundary: Qdrant store and payload mapping."""

from docindex.boundary.vdb.qdrant_store import QdrantVectorStore, build_client
from docindex.boundary.vdb.vector_schemas import chunk_to_payload, payload_to_chunk, search_text
from docindex.boundary.vdb.vector_store_factory import get_vector_store

__all__ = [
    "QdrantVectorStore",
    "build_client",
    "chunk_to_payload",
    "get_vector_store",
    "payload_to_chunk",
    "search_text",
]
