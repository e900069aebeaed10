"""
Request models for the pipeline boundary.

A closed union of request payloads discriminated by `kind`. Anything that
does not validate against one of these shapes is rejected.

Dependencies: pydantic
System role: Validation of external requests before they reach the pipeline
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from docindex.models.search import SearchFilters


class _Request(BaseModel):
    model_config = ConfigDict(extra="forbid")


class IndexRequest(_Request):
    """Parse, chunk, embed, and store a corpus snapshot."""

    kind: Literal["index"] = "index"
    documents: dict[str, str] = Field(min_length=1, description="filename -> document text")
    strategy: str | None = Field(default=None, description="Chunking strategy, defaults to configuration")


class SemanticSearchRequest(_Request):
    kind: Literal["semantic_search"] = "semantic_search"
    query: str = Field(min_length=1)
    filters: SearchFilters | None = None
    limit: int = Field(default=10, ge=1, le=100)
    score_threshold: float | None = Field(default=None, ge=0.0, le=1.0)


class LexicalSearchRequest(_Request):
    kind: Literal["lexical_search"] = "lexical_search"
    query: str = Field(min_length=1)
    language: str | None = None
    limit: int = Field(default=10, ge=1, le=100)


class RetryFailedRequest(_Request):
    kind: Literal["retry_failed"] = "retry_failed"


class StatsRequest(_Request):
    kind: Literal["stats"] = "stats"


class ExportTrackingRequest(_Request):
    kind: Literal["export_tracking"] = "export_tracking"
    path: str | None = Field(default=None, description="Target file, defaults to the configured export path")


PipelineRequest = Annotated[
    Union[
        IndexRequest,
        SemanticSearchRequest,
        LexicalSearchRequest,
        RetryFailedRequest,
        StatsRequest,
        ExportTrackingRequest,
    ],
    Field(discriminator="kind"),
]

REQUEST_KINDS: tuple[str, ...] = (
    "index",
    "semantic_search",
    "lexical_search",
    "retry_failed",
    "stats",
    "export_tracking",
)
