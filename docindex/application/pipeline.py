"""
Indexing pipeline orchestrator.

Coordinates parsing, chunking, change detection, embedding, vector storage,
and the lexical index. Constructed and owned by the caller; nothing here is
a module-level singleton.

Steps of an index run:
1. Chunk parsed items (build, enhance, optimize, validate)
2. Drop chunks that failed validation
3. Sync the snapshot against the embedding tracker
4. Delete vectors of updated and removed chunks
5. Embed new and updated chunks, upserting each batch before it is marked
   completed so the tracker never claims a vector the store lacks
6. Rebuild the lexical index from the snapshot

Dependencies: docindex.core, docindex.boundary
System role: Top-level orchestration of the indexing system
"""

import logging
import threading
from collections.abc import Iterable
from pathlib import Path

from docindex.boundary.vdb.qdrant_store import QdrantVectorStore
from docindex.boundary.vdb.vector_store_factory import get_vector_store
from docindex.configs.settings import Settings, get_settings
from docindex.core.chunking import ChunkEnhancer, ChunkingPipeline, ChunkOptimizer, OptimizationOptions
from docindex.core.embeddings import EmbeddingGenerator, EmbeddingProvider, EmbeddingTracker, get_embedding_provider
from docindex.core.exceptions import DocIndexException, VectorStoreError
from docindex.core.parsing import parse_documents
from docindex.core.search import LexicalSearchEngine
from docindex.models.chunk import DocumentChunk
from docindex.models.embedding import EmbeddingResult
from docindex.models.parsed_content import ParsedContent
from docindex.models.reports import IndexingReport, PipelineStats, RetryReport
from docindex.models.search import LexicalSearchResult, SearchFilters, VectorSearchResult
from docindex.models.tracking import TrackingStatus
from docindex.observability.log_utils import log_with_context

logger = logging.getLogger(__name__)


class IndexingPipeline:
    """
    End-to-end documentation indexing.

    Collaborators not passed in are built from settings during init().
    Use as a context manager to pair init() with shutdown().
    """

    def __init__(
        self,
        settings: Settings | None = None,
        tracker: EmbeddingTracker | None = None,
        vector_store: QdrantVectorStore | None = None,
        embedding_provider: EmbeddingProvider | None = None,
    ) -> None:
        """
        Initialize pipeline.

        Args:
            settings: Application settings (defaults to get_settings())
            tracker: Optional EmbeddingTracker (created in init if None)
            vector_store: Optional QdrantVectorStore (created in init if None)
            embedding_provider: Optional provider (created in init if None)
        """
        self._settings = settings or get_settings()
        self._tracker = tracker
        self._vector_store = vector_store
        self._provider = embedding_provider
        self._generator: EmbeddingGenerator | None = None

        self._chunking = ChunkingPipeline(
            enhancer=ChunkEnhancer(),
            optimizer=ChunkOptimizer(OptimizationOptions.from_settings(self._settings.chunking)),
        )
        self._lexical = LexicalSearchEngine(settings=self._settings.search)
        self._registry: dict[str, DocumentChunk] = {}

        self._lock = threading.RLock()
        self._initialized = False
        self._closed = False

    def __enter__(self) -> "IndexingPipeline":
        return self.init()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    @property
    def chunking(self) -> ChunkingPipeline:
        return self._chunking

    @property
    def lexical(self) -> LexicalSearchEngine:
        return self._lexical

    @property
    def tracker(self) -> EmbeddingTracker:
        return self._require_ready()._tracker

    @property
    def vector_store(self) -> QdrantVectorStore:
        return self._require_ready()._vector_store

    def init(self) -> "IndexingPipeline":
        """
        Open the tracker, check and prepare the vector store, and build the generator.

        Returns:
            IndexingPipeline: self, for chaining

        Raises:
            StoreUnavailableError: When the vector store cannot be reached
            TrackerError: When the tracking database cannot be opened
        """
        with self._lock:
            if self._closed:
                raise DocIndexException("Pipeline has been shut down")
            if self._initialized:
                return self

            if self._tracker is None:
                self._tracker = EmbeddingTracker(self._settings.tracker)
            if self._vector_store is None:
                self._vector_store = get_vector_store(self._settings.vector_store)
            self._vector_store.health_check()
            self._vector_store.initialize()
            if self._provider is None:
                self._provider = get_embedding_provider(self._settings.embeddings)
            self._generator = EmbeddingGenerator(self._provider, self._tracker, self._settings.embeddings)
            self._initialized = True

        logger.info(
            f"{__name__}:init - Pipeline initialized",
            extra={"collection": self._vector_store.collection_name, "strategy": self._settings.chunking.strategy},
        )
        return self

    def shutdown(self) -> None:
        """Close the tracker and vector store; safe to call more than once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            if self._tracker is not None:
                self._tracker.close()
            if self._vector_store is not None:
                self._vector_store.close()
            self._lexical.clear()
            self._registry.clear()
        logger.info(f"{__name__}:shutdown - Pipeline shut down")

    def _require_ready(self) -> "IndexingPipeline":
        if self._closed:
            raise DocIndexException("Pipeline has been shut down")
        if not self._initialized:
            raise DocIndexException("Pipeline is not initialized; call init() first")
        return self

    def index_documents(
        self,
        sources: Iterable[tuple[str, str]],
        strategy: str | None = None,
        cancel_event: threading.Event | None = None,
    ) -> IndexingReport:
        """
        Parse (filename, text) sources and index the result.

        Malformed documents are skipped and listed in parse_failures.
        """
        parsed = parse_documents(sources)
        report = self.index(parsed.items, strategy=strategy, cancel_event=cancel_event)
        report.parse_failures = parsed.failed_sources
        return report

    def index(
        self,
        items: list[ParsedContent],
        strategy: str | None = None,
        cancel_event: threading.Event | None = None,
    ) -> IndexingReport:
        """
        Index a full corpus snapshot.

        Args:
            items: Every parsed item of the corpus
            strategy: Chunking strategy, defaults to configuration
            cancel_event: Stops the embedding loop from starting new batches

        Returns:
            IndexingReport: Per-stage counts and failures

        Raises:
            UnknownStrategyError: When strategy is not registered
            SyncConsistencyError: When the snapshot repeats a chunk id
            VectorStoreError: When stale vectors cannot be deleted
        """
        self._require_ready()
        options = self._settings.chunking
        if strategy is not None:
            options = options.model_copy(update={"strategy": strategy})

        with self._lock:
            result = self._chunking.process(items, options)
            invalid = set(result.validation.invalid_ids)
            chunks = [chunk for chunk in result.chunks if chunk.id not in invalid]
            if invalid:
                logger.warning(
                    f"{__name__}:index - Dropping {len(result.chunks) - len(chunks)} invalid chunks",
                    extra={"errors": result.validation.errors[:10]},
                )

            sync = self._tracker.sync(chunks)
            deleted = self._vector_store.delete_by_chunk_ids([*sync.updated_ids, *sync.removed_ids])
            self._registry = {chunk.id: chunk for chunk in chunks}

            run = self._generator.run(sync.needs_embedding, cancel_event, sink=self._store_batch)
            self._rebuild_lexical(chunks)

        report = IndexingReport(
            chunking=result.metadata,
            validation=result.validation,
            dropped_chunk_ids=sorted(invalid),
            sync=sync.summary,
            deleted_points=deleted,
            embedded=len(run.results),
            failed_ids=run.failed_ids,
            skipped_ids=run.skipped_ids,
            stored_points=len(run.results),
            lexical_documents=len(chunks),
        )
        logger.info(
            f"{__name__}:index - Index run complete",
            extra={
                "chunks": len(chunks),
                "new": sync.summary.new,
                "updated": sync.summary.updated,
                "removed": sync.summary.removed,
                "embedded": report.embedded,
                "failed": len(report.failed_ids),
            },
        )
        return report

    def _store_batch(self, chunks: list[DocumentChunk], results: list[EmbeddingResult]) -> int:
        """Upsert one embedded batch; points of a partially written batch are removed before re-raising."""
        try:
            return self._vector_store.upsert(chunks, results)
        except VectorStoreError:
            self._vector_store.delete_by_chunk_ids([result.chunk_id for result in results])
            raise

    def _rebuild_lexical(self, chunks: list[DocumentChunk]) -> None:
        self._lexical.clear()
        self._lexical.add_chunks(chunks, self._settings.search.default_language)
        self._lexical.build_indices()

    def retry_failed(self, cancel_event: threading.Event | None = None) -> RetryReport:
        """
        Reset failed chunks and re-embed the ones still in the chunk registry.

        Returns:
            RetryReport: Reset count, outcomes, and ids missing from the registry
        """
        self._require_ready()
        with self._lock:
            reset = self._tracker.reset_failed_embeddings()
            pending = self._tracker.get_chunks_needing_embedding()
            chunks = [self._registry[chunk_id] for chunk_id in pending if chunk_id in self._registry]
            missing = [chunk_id for chunk_id in pending if chunk_id not in self._registry]

            run = self._generator.run(chunks, cancel_event, sink=self._store_batch)

        if missing:
            log_with_context(
                logger,
                logging.WARNING,
                f"{__name__}:retry_failed - {len(missing)} pending chunks are not in the registry",
                missing_ids=missing,
            )
        return RetryReport(
            reset=reset,
            embedded=len(run.results),
            failed_ids=run.failed_ids,
            missing_ids=missing,
            stored_points=len(run.results),
        )

    def semantic_search(
        self,
        query: str,
        filters: SearchFilters | None = None,
        limit: int | None = None,
        score_threshold: float | None = None,
    ) -> list[VectorSearchResult]:
        """
        Embed a query and search the vector store.

        Raises:
            EmbeddingError: When the query cannot be embedded
            StoreUnavailableError: When the vector store cannot be reached
        """
        self._require_ready()
        vector = self._generator.embed_query(query)
        return self._vector_store.search(vector, filters=filters, limit=limit, score_threshold=score_threshold)

    def lexical_search(
        self,
        query: str,
        language: str | None = None,
        limit: int | None = None,
    ) -> list[LexicalSearchResult]:
        return self._lexical.search(query, language=language, limit=limit)

    def rebuild_lexical_index(self) -> int:
        """
        Rebuild the lexical index and chunk registry from stored state.

        Uses the tracker's completed ids and the vector store payloads, so it
        works after a restart without re-parsing the corpus.

        Returns:
            int: Number of chunks indexed
        """
        self._require_ready()
        with self._lock:
            completed = [record.chunk_id for record in self._tracker.get_chunks_by_status(TrackingStatus.COMPLETED)]
            chunks = self._vector_store.get_chunks_by_ids(completed)
            for chunk in chunks:
                self._registry.setdefault(chunk.id, chunk)
            self._rebuild_lexical(chunks)

        logger.info(f"{__name__}:rebuild_lexical_index - Rebuilt lexical index from {len(chunks)} stored chunks")
        return len(chunks)

    def export_tracking(self, path: str | Path | None = None) -> Path:
        self._require_ready()
        return self._tracker.export_tracking_data(path)

    def stats(self) -> PipelineStats:
        self._require_ready()
        return PipelineStats(
            registered_chunks=len(self._registry),
            tracking=self._tracker.get_tracking_stats(),
            vector_store=self._vector_store.get_stats(),
            lexical=self._lexical.get_stats(),
        )
