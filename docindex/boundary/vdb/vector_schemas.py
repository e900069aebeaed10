"""
Vector database schemas.

Mapping between chunks and the camelCase point payload stored alongside
each vector. Search filters live in docindex.models.search.

Dependencies: pydantic
System role: Type definitions for vector operations
"""

from typing import Any

from docindex.models.chunk import ChunkMetadata, DocumentChunk
from docindex.models.embedding import EmbeddingResult

PAYLOAD_FIELDS: dict[str, str] = {
    "namespace": "namespace",
    "type": "type",
    "importance": "importance",
    "class_name": "className",
    "method_name": "methodName",
    "source_file": "sourceFile",
    "line_number": "lineNumber",
    "tags": "tags",
    "related_methods": "relatedMethods",
    "dependencies": "dependencies",
    "common_mistakes": "commonMistakes",
    "use_cases": "useCases",
}


def search_text(chunk: DocumentChunk) -> str:
    """Lowercased content plus namespace, class, method, and tags."""
    metadata = chunk.metadata
    parts = [chunk.content, metadata.namespace]
    if metadata.class_name:
        parts.append(metadata.class_name)
    if metadata.method_name:
        parts.append(metadata.method_name)
    parts.extend(metadata.tags)
    return " ".join(parts).lower()


def chunk_to_payload(chunk: DocumentChunk, embedding: EmbeddingResult) -> dict[str, Any]:
    payload: dict[str, Any] = {"chunkId": chunk.id, "content": chunk.content}
    metadata = chunk.metadata.model_dump()
    for field, key in PAYLOAD_FIELDS.items():
        payload[key] = metadata[field]
    payload["embeddingModel"] = embedding.metadata.model
    payload["embeddingTokens"] = embedding.metadata.tokens
    payload["embeddingTimestamp"] = embedding.metadata.timestamp.isoformat()
    payload["searchText"] = search_text(chunk)
    return payload


def payload_to_chunk(payload: dict[str, Any]) -> DocumentChunk:
    """Rebuild a chunk from a stored point payload."""
    metadata = {field: payload[key] for field, key in PAYLOAD_FIELDS.items() if payload.get(key) is not None}
    return DocumentChunk(
        id=payload["chunkId"],
        content=payload["content"],
        metadata=ChunkMetadata(**metadata),
    )
