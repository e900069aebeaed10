"""
Chunk domain models for the indexing pipeline.

Represents retrievable documentation chunks and the metadata every stage
reads and extends. Chunks are frozen value objects; stages produce new
instances with model_copy instead of mutating shared ones.

Dependencies: pydantic
System role: Data structure shared by builder, optimizer, tracker, and stores
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ChunkType = Literal["method", "class", "example", "tutorial", "troubleshooting"]
Importance = Literal["critical", "high", "medium", "low"]

IMPORTANCE_RANK: dict[str, int] = {"critical": 4, "high": 3, "medium": 2, "low": 1}
QUALITY_TAG_PREFIX = "quality:"
DEFAULT_QUALITY = 0.5


def unique_ordered(values: list[str]) -> list[str]:
    """Drop repeated values while keeping first-seen order."""
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


class ChunkMetadata(BaseModel):
    """Metadata attached to every chunk."""

    model_config = ConfigDict(frozen=True)

    type: ChunkType = Field(description="Kind of documentation unit")
    namespace: str = Field(description="API namespace or documentation category")
    class_name: str | None = Field(default=None, description="Owning class, if any")
    method_name: str | None = Field(default=None, description="Method name, if any")
    importance: Importance = Field(default="medium", description="Ordinal priority")
    tags: list[str] = Field(default_factory=list, description="Ordered tag set")
    source_file: str = Field(min_length=1, description="File the chunk was derived from")
    line_number: int | None = Field(default=None, description="Line in the source file")
    related_methods: list[str] = Field(default_factory=list, description="Class.method cross-references")
    dependencies: list[str] = Field(default_factory=list, description="Calls required beforehand")
    common_mistakes: list[str] = Field(default_factory=list, description="Known pitfalls")
    use_cases: list[str] = Field(default_factory=list, description="Typical use cases")

    @field_validator("tags", "related_methods", "dependencies", "common_mistakes", "use_cases")
    @classmethod
    def _dedupe(cls, value: list[str]) -> list[str]:
        return unique_ordered(value)

    @property
    def importance_rank(self) -> int:
        """Numeric rank of importance (critical=4 ... low=1)."""
        return IMPORTANCE_RANK[self.importance]

    @property
    def qualified_name(self) -> str:
        """Class.method reference used in related_methods lists."""
        return f"{self.class_name}.{self.method_name}"

    def with_tags(self, *tags: str) -> "ChunkMetadata":
        """Return a copy with extra tags appended."""
        return self.model_copy(update={"tags": unique_ordered([*self.tags, *tags])})


class DocumentChunk(BaseModel):
    """The atomic retrievable unit: rendered text plus metadata."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Deterministic chunk identifier")
    content: str = Field(description="Rendered chunk text")
    metadata: ChunkMetadata = Field(description="Chunk metadata")
    embedding: list[float] | None = Field(default=None, description="Embedding vector")

    @property
    def quality(self) -> float:
        """Quality recorded by the optimizer, or the default when unscored."""
        for tag in self.metadata.tags:
            if tag.startswith(QUALITY_TAG_PREFIX):
                try:
                    return float(tag[len(QUALITY_TAG_PREFIX):])
                except ValueError:
                    return DEFAULT_QUALITY
        return DEFAULT_QUALITY

    @property
    def title(self) -> str:
        """First markdown heading, or the start of the first line."""
        for line in self.content.splitlines():
            stripped = line.strip()
            if stripped.startswith("#"):
                heading = stripped.lstrip("#").strip()
                if heading:
                    return heading
        first_line = self.content.split("\n", 1)[0]
        return first_line[:50].strip() + ("..." if len(first_line) > 50 else "")

    def with_tags(self, *tags: str) -> "DocumentChunk":
        """Return a copy with extra metadata tags appended."""
        return self.model_copy(update={"metadata": self.metadata.with_tags(*tags)})
