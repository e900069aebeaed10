"""
Exception hierarchy for the documentation indexing pipeline.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class DocIndexException(Exception):
    """Base exception for all docindex errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ParseError(DocIndexException):
    """Raised when a documentation source cannot be parsed."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize parse error.

        Args:
            message: Error message
            source: File name or identifier of the malformed document
            details: Additional context
        """
        details = details or {}
        if source:
            details["source"] = source
        super().__init__(message, details)


class ChunkValidationError(DocIndexException):
    """
    Describes an invalid chunk found by the validation pass.

    Collected into ValidationReport.errors rather than raised.
    """

    def __init__(
        self,
        message: str,
        chunk_index: int | None = None,
        chunk_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize chunk validation error.

        Args:
            message: Error message
            chunk_index: Position of the chunk in the validated list
            chunk_id: Chunk identifier, if it has one
            details: Additional context
        """
        details = details or {}
        if chunk_index is not None:
            details["chunk_index"] = chunk_index
        if chunk_id:
            details["chunk_id"] = chunk_id
        super().__init__(message, details)


class UnknownStrategyError(DocIndexException):
    """Raised when a chunking strategy name is not registered."""

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        """
        Initialize unknown strategy error.

        Args:
            name: Requested strategy name
            available: Registered strategy names
        """
        super().__init__(
            f"Unknown chunking strategy: {name}",
            {"strategy": name, "available": available or []},
        )


class EmbeddingError(DocIndexException):
    """Raised when embedding generation fails."""

    def __init__(
        self,
        message: str,
        chunk_ids: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize embedding error.

        Args:
            message: Error message
            chunk_ids: Chunks affected by the failure
            details: Additional context
        """
        details = details or {}
        if chunk_ids:
            details["chunk_count"] = len(chunk_ids)
        self.chunk_ids = chunk_ids or []
        super().__init__(message, details)


class TrackerError(DocIndexException):
    """Raised when the embedding tracker is misused or its store fails."""

    def __init__(
        self,
        message: str,
        chunk_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize tracker error.

        Args:
            message: Error message
            chunk_id: Chunk the operation referred to
            details: Additional context
        """
        details = details or {}
        if chunk_id:
            details["chunk_id"] = chunk_id
        super().__init__(message, details)


class SyncConsistencyError(TrackerError):
    """
    Raised when a sync classifies one chunk id into more than one partition.

    Signals a programming error, not a recoverable condition.
    """

    pass


class VectorStoreError(DocIndexException):
    """Raised when vector store operations fail."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize vector store error.

        Args:
            message: Error message
            operation: Operation that failed (upsert, search, delete)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class StoreUnavailableError(VectorStoreError):
    """Raised when the vector store cannot be reached."""

    pass


class UnsupportedRequestError(DocIndexException):
    """Raised when a request payload does not match any known request shape."""

    def __init__(
        self,
        message: str,
        kind: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize unsupported request error.

        Args:
            message: Error message
            kind: Discriminator value found in the payload
            details: Additional context
        """
        details = details or {}
        if kind:
            details["kind"] = kind
        super().__init__(message, details)
