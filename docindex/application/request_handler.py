"""
Request handler.

Validates raw request payloads against the closed request union and
dispatches them to the indexing pipeline.

Dependencies: pydantic
System role: Boundary between external callers and the pipeline
"""

import logging
from typing import Any

from pydantic import BaseModel, TypeAdapter, ValidationError

from docindex.application.pipeline import IndexingPipeline
from docindex.core.exceptions import UnsupportedRequestError
from docindex.models.requests import (
    REQUEST_KINDS,
    ExportTrackingRequest,
    IndexRequest,
    LexicalSearchRequest,
    PipelineRequest,
    RetryFailedRequest,
    SemanticSearchRequest,
    StatsRequest,
)

logger = logging.getLogger(__name__)

_request_adapter: TypeAdapter[PipelineRequest] = TypeAdapter(PipelineRequest)


def parse_request(payload: Any) -> PipelineRequest:
    """
    Validate a raw payload into a typed request.

    Args:
        payload: Decoded JSON object

    Returns:
        PipelineRequest: One of the known request models

    Raises:
        UnsupportedRequestError: When kind is unknown or the shape is invalid
    """
    kind = payload.get("kind") if isinstance(payload, dict) else None
    if kind not in REQUEST_KINDS:
        raise UnsupportedRequestError(
            f"Unsupported request kind: {kind!r}",
            kind=str(kind) if kind is not None else None,
            details={"supported": list(REQUEST_KINDS)},
        )
    try:
        return _request_adapter.validate_python(payload)
    except ValidationError as e:
        raise UnsupportedRequestError(
            f"Invalid {kind} request",
            kind=kind,
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e


class RequestHandler:
    """Dispatch validated requests to an initialized pipeline."""

    def __init__(self, pipeline: IndexingPipeline) -> None:
        self._pipeline = pipeline

    def handle(self, payload: dict[str, Any]) -> Any:
        """
        Validate and execute one request.

        Args:
            payload: Raw request with a `kind` discriminator

        Returns:
            The operation's result model, or a list of result models for searches

        Raises:
            UnsupportedRequestError: When the payload matches no request shape
        """
        request = parse_request(payload)
        logger.info(f"{__name__}:handle - Handling {request.kind} request")

        if isinstance(request, IndexRequest):
            return self._pipeline.index_documents(request.documents.items(), strategy=request.strategy)
        if isinstance(request, SemanticSearchRequest):
            return self._pipeline.semantic_search(
                request.query,
                filters=request.filters,
                limit=request.limit,
                score_threshold=request.score_threshold,
            )
        if isinstance(request, LexicalSearchRequest):
            return self._pipeline.lexical_search(request.query, language=request.language, limit=request.limit)
        if isinstance(request, RetryFailedRequest):
            return self._pipeline.retry_failed()
        if isinstance(request, StatsRequest):
            return self._pipeline.stats()
        if isinstance(request, ExportTrackingRequest):
            return self._pipeline.export_tracking(request.path)
        raise UnsupportedRequestError(f"Unhandled request kind: {request.kind}", kind=request.kind)

    def handle_json(self, payload: dict[str, Any]) -> Any:
        """Like handle(), with pydantic results dumped to JSON-compatible data."""
        result = self.handle(payload)
        if isinstance(result, BaseModel):
            return result.model_dump(mode="json")
        if isinstance(result, list):
            return [item.model_dump(mode="json") for item in result]
        return str(result)
