"""
Search result models for lexical and semantic retrieval.

Dependencies: pydantic
System role: Query-time return types
"""

from pydantic import BaseModel, Field

from docindex.models.chunk import ChunkType, DocumentChunk, Importance


class VectorSearchResult(BaseModel):
    """Single result from vector search."""

    chunk: DocumentChunk = Field(description="Chunk rebuilt from the stored payload")
    similarity: float = Field(ge=0.0, le=1.0, description="Similarity (0.0-1.0, higher is closer)")
    vector_id: str = Field(description="Point id in the vector store")


class LexicalSearchResult(BaseModel):
    """Single result from the lexical index."""

    chunk: DocumentChunk
    score: float
    namespace: str
    language: str
    title: str


class LexicalIndexStats(BaseModel):
    """Counts exposed by the lexical search engine."""

    namespaces: int = 0
    documents: int = 0
    methods: int = 0
    classes: int = 0
    languages: list[str] = Field(default_factory=list)
    by_type: dict[str, int] = Field(default_factory=dict)
    backend: str = "bm25"


class SearchFilters(BaseModel):
    """
    Conjunctive filter over vector point payloads.

    Every set field must match exactly; tags match when the point carries
    any of the listed tags.
    """

    namespace: str | None = Field(default=None, description="Exact namespace")
    type: ChunkType | None = Field(default=None, description="Exact chunk type")
    importance: Importance | None = Field(default=None, description="Exact importance")
    class_name: str | None = Field(default=None, description="Exact owning class")
    method_name: str | None = Field(default=None, description="Exact method name")
    tags: list[str] = Field(default_factory=list, description="Match any of these tags")

    def exact_conditions(self) -> dict[str, str]:
        """Payload key to required value for every set exact-match field."""
        values = {
            "namespace": self.namespace,
            "type": self.type,
            "importance": self.importance,
            "className": self.class_name,
            "methodName": self.method_name,
        }
        return {key: value for key, value in values.items() if value is not None}
