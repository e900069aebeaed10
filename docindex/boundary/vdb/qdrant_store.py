"""
Qdrant vector store.

Stores chunk vectors with their full metadata payload and serves filtered
similarity search. Works against a Qdrant server or the client's
in-process local mode.

Dependencies: qdrant_client, tenacity
System role: Semantic retrieval backend
"""

import logging
from typing import Any

from qdrant_client import QdrantClient, models
from qdrant_client.http.exceptions import ResponseHandlingException, UnexpectedResponse
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from docindex.boundary.vdb.vector_schemas import chunk_to_payload, payload_to_chunk
from docindex.configs.vector_store import VectorStoreSettings
from docindex.core.exceptions import StoreUnavailableError, VectorStoreError
from docindex.models.chunk import DocumentChunk
from docindex.models.embedding import EmbeddingResult
from docindex.models.search import SearchFilters, VectorSearchResult

logger = logging.getLogger(__name__)

UPSERT_ATTEMPTS = 5
SCROLL_PAGE = 256
INDEXED_KEYWORDS = ("chunkId", "namespace", "type", "importance", "className", "methodName", "tags")


def build_client(settings: VectorStoreSettings) -> QdrantClient:
    """Server client for store_type 'qdrant', in-process client for 'memory'."""
    if settings.store_type.lower() == "memory":
        return QdrantClient(location=":memory:")
    api_key = settings.api_key.get_secret_value() if settings.api_key else None
    return QdrantClient(url=settings.url, api_key=api_key, timeout=settings.timeout)


class QdrantVectorStore:
    """
    Chunk vector store on Qdrant.

    Point ids are the embedding ids produced by the generator, so a retried
    upsert rewrites the same points instead of duplicating them.
    """

    def __init__(self, settings: VectorStoreSettings | None = None, client: QdrantClient | None = None) -> None:
        """
        Initialize the store.

        Args:
            settings: Collection name, vector layout, and batching
            client: Pre-built Qdrant client, mainly for tests
        """
        self._settings = settings or VectorStoreSettings()
        self._client = client or build_client(self._settings)
        self._collection = self._settings.collection_name
        self._distance = models.Distance(self._settings.distance)
        self._closed = False

    @property
    def collection_name(self) -> str:
        return self._collection

    def health_check(self) -> None:
        """
        Verify the store answers.

        Raises:
            StoreUnavailableError: When Qdrant cannot be reached
        """
        try:
            self._client.get_collections()
        except (ResponseHandlingException, UnexpectedResponse, ConnectionError) as e:
            raise StoreUnavailableError(f"Qdrant is unreachable: {e}", operation="health_check") from e

    def initialize(self) -> None:
        """Create the collection if it is absent; safe to call repeatedly."""
        try:
            if self._client.collection_exists(self._collection):
                info = self._client.get_collection(self._collection)
                logger.info(
                    f"{__name__}:initialize - Using existing collection",
                    extra={"collection": self._collection, "points": info.points_count},
                )
                return

            self._client.create_collection(
                collection_name=self._collection,
                vectors_config=models.VectorParams(size=self._settings.vector_size, distance=self._distance),
            )
            if self._settings.store_type.lower() != "memory":
                for key in INDEXED_KEYWORDS:
                    self._client.create_payload_index(
                        collection_name=self._collection,
                        field_name=key,
                        field_schema=models.PayloadSchemaType.KEYWORD,
                    )
        except ResponseHandlingException as e:
            raise StoreUnavailableError(f"Qdrant is unreachable: {e}", operation="initialize") from e
        except UnexpectedResponse as e:
            raise VectorStoreError(f"Failed to initialize collection: {e}", operation="initialize") from e

        logger.info(
            f"{__name__}:initialize - Created collection",
            extra={"collection": self._collection, "vector_size": self._settings.vector_size},
        )

    @retry(
        retry=retry_if_exception_type((ResponseHandlingException, UnexpectedResponse)),
        stop=stop_after_attempt(UPSERT_ATTEMPTS),
        wait=wait_exponential_jitter(initial=1, max=30, jitter=5),
        before_sleep=lambda retry_state: logger.warning(
            f"{__name__}:upsert - Retry {retry_state.attempt_number}/{UPSERT_ATTEMPTS} after upsert failure"
        ),
        reraise=True,
    )
    def _upsert_batch(self, points: list[models.PointStruct]) -> None:
        self._client.upsert(collection_name=self._collection, points=points, wait=True)

    def upsert(self, chunks: list[DocumentChunk], embeddings: list[EmbeddingResult]) -> int:
        """
        Store vectors with their chunk payloads.

        Chunks without a matching embedding are skipped.

        Args:
            chunks: Chunks to store
            embeddings: Vectors keyed by chunk_id

        Returns:
            int: Number of points written

        Raises:
            VectorStoreError: When a batch still fails after retries
        """
        by_chunk = {embedding.chunk_id: embedding for embedding in embeddings}
        points = []
        for chunk in chunks:
            embedding = by_chunk.get(chunk.id)
            if embedding is None:
                logger.warning(f"{__name__}:upsert - No embedding for chunk, skipping", extra={"chunk_id": chunk.id})
                continue
            points.append(
                models.PointStruct(
                    id=embedding.embedding_id,
                    vector=embedding.embedding,
                    payload=chunk_to_payload(chunk, embedding),
                )
            )

        size = self._settings.upsert_batch_size
        for start in range(0, len(points), size):
            batch = points[start : start + size]
            try:
                self._upsert_batch(batch)
            except (ResponseHandlingException, UnexpectedResponse) as e:
                raise VectorStoreError(
                    f"Failed to store embeddings: {e}",
                    operation="upsert",
                    details={"batch_start": start, "batch_size": len(batch)},
                ) from e
            logger.debug(f"{__name__}:upsert - Uploaded batch {start // size + 1} ({len(batch)} points)")

        logger.info(
            f"{__name__}:upsert - Stored {len(points)} embeddings",
            extra={"collection": self._collection},
        )
        return len(points)

    @staticmethod
    def _build_filter(filters: SearchFilters | None) -> models.Filter | None:
        if filters is None:
            return None
        must: list[models.Condition] = [
            models.FieldCondition(key=key, match=models.MatchValue(value=value))
            for key, value in filters.exact_conditions().items()
        ]
        if filters.tags:
            must.append(models.FieldCondition(key="tags", match=models.MatchAny(any=filters.tags)))
        return models.Filter(must=must) if must else None

    def _similarity(self, score: float) -> float:
        if self._distance in (models.Distance.EUCLID, models.Distance.MANHATTAN):
            return 1.0 / (1.0 + max(score, 0.0))
        return max(0.0, min(score, 1.0))

    def search(
        self,
        query_vector: list[float],
        filters: SearchFilters | None = None,
        limit: int | None = None,
        score_threshold: float | None = None,
    ) -> list[VectorSearchResult]:
        """
        Similarity search with optional payload filters.

        Args:
            query_vector: Query embedding
            filters: Conjunctive payload filter
            limit: Maximum number of results (defaults to top_k)
            score_threshold: Minimum similarity in [0, 1]

        Returns:
            list[VectorSearchResult]: Matches ordered by similarity

        Raises:
            StoreUnavailableError: When Qdrant cannot be reached
            VectorStoreError: When the query is rejected
        """
        threshold = self._settings.score_threshold if score_threshold is None else score_threshold
        try:
            response = self._client.query_points(
                collection_name=self._collection,
                query=query_vector,
                query_filter=self._build_filter(filters),
                limit=limit or self._settings.top_k,
                with_payload=True,
            )
        except ResponseHandlingException as e:
            raise StoreUnavailableError(f"Qdrant is unreachable: {e}", operation="search") from e
        except UnexpectedResponse as e:
            raise VectorStoreError(f"Search failed: {e}", operation="search") from e

        results = []
        for point in response.points:
            similarity = self._similarity(point.score)
            if similarity < threshold:
                continue
            results.append(
                VectorSearchResult(
                    chunk=payload_to_chunk(point.payload or {}),
                    similarity=similarity,
                    vector_id=str(point.id),
                )
            )

        logger.info(
            f"{__name__}:search - Found {len(results)} results",
            extra={"limit": limit, "filtered": filters is not None},
        )
        return results

    @staticmethod
    def _chunk_id_filter(chunk_ids: list[str]) -> models.Filter:
        return models.Filter(must=[models.FieldCondition(key="chunkId", match=models.MatchAny(any=chunk_ids))])

    def delete_by_chunk_ids(self, chunk_ids: list[str]) -> int:
        """
        Delete every point whose chunkId is listed.

        Returns:
            int: Number of points deleted

        Raises:
            VectorStoreError: When the delete fails
        """
        if not chunk_ids:
            return 0
        selector = self._chunk_id_filter(chunk_ids)
        try:
            count = self._client.count(collection_name=self._collection, count_filter=selector, exact=True).count
            if count:
                self._client.delete(
                    collection_name=self._collection,
                    points_selector=models.FilterSelector(filter=selector),
                    wait=True,
                )
        except (ResponseHandlingException, UnexpectedResponse) as e:
            raise VectorStoreError(f"Failed to delete points: {e}", operation="delete") from e

        logger.info(f"{__name__}:delete_by_chunk_ids - Deleted {count} points", extra={"requested": len(chunk_ids)})
        return count

    def get_chunks_by_ids(self, chunk_ids: list[str]) -> list[DocumentChunk]:
        """Chunks rebuilt from the payloads of the listed chunk ids."""
        if not chunk_ids:
            return []
        selector = self._chunk_id_filter(chunk_ids)
        chunks: list[DocumentChunk] = []
        offset = None
        try:
            while True:
                points, offset = self._client.scroll(
                    collection_name=self._collection,
                    scroll_filter=selector,
                    limit=SCROLL_PAGE,
                    offset=offset,
                    with_payload=True,
                    with_vectors=False,
                )
                chunks.extend(payload_to_chunk(point.payload or {}) for point in points)
                if offset is None:
                    break
        except (ResponseHandlingException, UnexpectedResponse) as e:
            raise VectorStoreError(f"Failed to fetch points: {e}", operation="scroll") from e
        return chunks

    def get_stats(self) -> dict[str, Any]:
        """Collection name, point count, vector size, distance, and status."""
        try:
            info = self._client.get_collection(self._collection)
        except ResponseHandlingException as e:
            raise StoreUnavailableError(f"Qdrant is unreachable: {e}", operation="stats") from e
        except UnexpectedResponse as e:
            raise VectorStoreError(f"Failed to read collection: {e}", operation="stats") from e

        vectors = info.config.params.vectors
        size = vectors.size if isinstance(vectors, models.VectorParams) else self._settings.vector_size
        return {
            "collection": self._collection,
            "points": info.points_count or 0,
            "vector_size": size,
            "distance": self._distance.value,
            "status": info.status.value,
        }

    def clear_collection(self) -> None:
        """Drop every point by recreating the collection."""
        try:
            if self._client.collection_exists(self._collection):
                self._client.delete_collection(self._collection)
        except (ResponseHandlingException, UnexpectedResponse) as e:
            raise VectorStoreError(f"Failed to clear collection: {e}", operation="clear") from e
        self.initialize()
        logger.info(f"{__name__}:clear_collection - Cleared collection", extra={"collection": self._collection})

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._client.close()
