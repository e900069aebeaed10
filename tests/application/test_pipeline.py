"""
Test suite for IndexingPipeline.

Exercises full index runs over the in-process Qdrant store, the SQLite
tracker, and the deterministic fake provider.

System role: Integration verification of the indexing orchestrator
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from docindex.application.pipeline import IndexingPipeline
from docindex.configs.settings import Settings
from docindex.core.embeddings.generator import EmbeddingGenerator
from docindex.core.exceptions import DocIndexException, EmbeddingError, UnknownStrategyError, VectorStoreError
from docindex.models.chunk import DocumentChunk
from docindex.models.embedding import ProviderResponse
from docindex.models.parsed_content import ParsedContent
from docindex.models.search import SearchFilters
from docindex.models.tracking import TrackingStatus

pytestmark = pytest.mark.integration


def _points(pipeline: IndexingPipeline) -> int:
    return pipeline.vector_store.get_stats()["points"]


def _snapshot(pipeline: IndexingPipeline, settings: Settings, items: list[ParsedContent]) -> list[DocumentChunk]:
    return pipeline.chunking.process(items, settings.chunking).chunks


class TestIndex:
    """Test suite for IndexingPipeline.index."""

    def test_first_run_should_embed_and_store_every_chunk(
        self, pipeline: IndexingPipeline, parsed_items: list[ParsedContent]
    ) -> None:
        """Should store one point per chunk and mark every chunk completed."""
        # Act
        report = pipeline.index(parsed_items)

        # Assert
        assert report.sync.new == report.sync.total > 0
        assert report.embedded == report.sync.total
        assert report.stored_points == report.sync.total
        assert report.failed_ids == []
        assert report.lexical_documents == report.sync.total
        assert _points(pipeline) == report.sync.total
        assert pipeline.tracker.get_tracking_stats().completed == report.sync.total

    def test_second_run_should_change_nothing(self, pipeline: IndexingPipeline, parsed_items) -> None:
        """Should embed nothing when the corpus is unchanged."""
        # Arrange
        first = pipeline.index(parsed_items)

        # Act
        second = pipeline.index(parsed_items)

        # Assert
        assert second.sync.unchanged == first.sync.total
        assert second.embedded == 0
        assert second.stored_points == 0
        assert second.deleted_points == 0
        assert _points(pipeline) == first.sync.total

    def test_edited_item_should_replace_its_vectors(self, pipeline: IndexingPipeline, parsed_items) -> None:
        """Should delete and re-embed only the chunks of the edited item."""
        # Arrange
        first = pipeline.index(parsed_items)
        edited = [
            item.model_copy(update={"description": "Creates a thread and invites its members."})
            if item.name == "ThreadApi.createThread"
            else item
            for item in parsed_items
        ]

        # Act
        report = pipeline.index(edited)

        # Assert
        assert report.sync.updated == 1
        assert report.sync.new == 0
        assert report.sync.unchanged == first.sync.total - 1
        assert report.deleted_points == report.sync.updated
        assert report.embedded == report.sync.updated
        assert _points(pipeline) == first.sync.total

    def test_removed_items_should_lose_their_vectors(self, pipeline: IndexingPipeline, parsed_items) -> None:
        """Should delete the points of chunks that left the corpus."""
        # Arrange
        pipeline.index(parsed_items)
        core_only = [item for item in parsed_items if item.metadata.namespace == "Core"]

        # Act
        report = pipeline.index(core_only)

        # Assert
        assert report.sync.removed > 0
        assert report.deleted_points == report.sync.removed
        assert _points(pipeline) == report.sync.total
        assert pipeline.vector_store.search([0.1] * 8, filters=SearchFilters(namespace="Threads")) == []

    def test_unknown_strategy_should_raise(self, pipeline: IndexingPipeline, parsed_items) -> None:
        """Should refuse a strategy that is not registered."""
        with pytest.raises(UnknownStrategyError):
            pipeline.index(parsed_items, strategy="sentence-level")

    def test_upsert_failure_should_mark_chunks_failed(self, pipeline: IndexingPipeline, parsed_items) -> None:
        """Should record every rejected batch as failed instead of completed."""
        # Arrange
        error = VectorStoreError("Failed to store embeddings", operation="upsert")

        # Act
        with patch.object(pipeline.vector_store, "upsert", side_effect=error):
            report = pipeline.index(parsed_items)

        # Assert
        stats = pipeline.tracker.get_tracking_stats()
        assert report.embedded == report.stored_points == 0
        assert len(report.failed_ids) == report.sync.total
        assert stats.completed == 0
        assert stats.failed == stats.total_chunks > 0
        assert _points(pipeline) == 0
        assert "Vector upsert failed" in pipeline.tracker.get_embedding_info(report.failed_ids[0]).error_message

    def test_interrupted_run_should_leave_completed_equal_to_stored(
        self, pipeline: IndexingPipeline, parsed_items, settings: Settings
    ) -> None:
        """Should only mark chunks completed whose batch reached the store, and resume the rest."""
        # Arrange
        store_upsert = pipeline.vector_store.upsert
        calls = []

        def upsert_then_die(chunks, results):
            calls.append(len(chunks))
            if len(calls) > 1:
                raise RuntimeError("process killed")
            return store_upsert(chunks, results)

        # Act
        with patch.object(pipeline.vector_store, "upsert", side_effect=upsert_then_die):
            first = pipeline.index(parsed_items)
        completed = {record.chunk_id for record in pipeline.tracker.get_chunks_by_status(TrackingStatus.COMPLETED)}
        snapshot_ids = [chunk.id for chunk in _snapshot(pipeline, settings, parsed_items)]
        stored = {chunk.id for chunk in pipeline.vector_store.get_chunks_by_ids(snapshot_ids)}
        rerun = pipeline.index(parsed_items)

        # Assert
        assert completed == stored
        assert len(completed) == calls[0] == 2
        assert rerun.sync.unchanged == len(completed)
        assert rerun.sync.new == first.sync.total - len(completed)
        assert _points(pipeline) == pipeline.tracker.get_tracking_stats().completed == first.sync.total

    def test_index_documents_should_report_parse_failures(self, pipeline: IndexingPipeline, api_spec_json: str) -> None:
        """Should index the valid documents and list the malformed ones."""
        # Act
        report = pipeline.index_documents(
            [
                ("spec/out.js.json", api_spec_json),
                ("broken.json", "{not json"),
                ("null-section.json", '{"Core": [{"content": null}]}'),
            ]
        )

        # Assert
        assert list(report.parse_failures) == ["broken.json", "null-section.json"]
        assert report.stored_points == report.sync.total > 0


class TestSearch:
    """Test suite for semantic and lexical search through the pipeline."""

    def test_semantic_search_should_find_chunk_by_its_own_text(
        self, pipeline: IndexingPipeline, parsed_items, settings: Settings, fake_provider
    ) -> None:
        """Should return the chunk whose embedded text equals the query first."""
        # Arrange
        pipeline.index(parsed_items)
        target = next(
            chunk
            for chunk in _snapshot(pipeline, settings, parsed_items)
            if chunk.metadata.method_name == "connect"
        )
        query = EmbeddingGenerator(fake_provider, settings=settings.embeddings).prepare_text(target)

        # Act
        results = pipeline.semantic_search(query, limit=3)

        # Assert
        assert results[0].chunk.id == target.id
        assert results[0].similarity == pytest.approx(1.0, abs=1e-4)

    def test_semantic_search_should_apply_filters(self, pipeline: IndexingPipeline, parsed_items) -> None:
        """Should only return chunks matching the filter."""
        # Arrange
        pipeline.index(parsed_items)

        # Act
        results = pipeline.semantic_search("thread members", filters=SearchFilters(namespace="Threads"))

        # Assert
        assert results
        assert all(result.chunk.metadata.namespace == "Threads" for result in results)

    def test_lexical_search_should_rank_connect_first(self, pipeline: IndexingPipeline, parsed_items) -> None:
        """Should answer keyword queries from the rebuilt lexical index."""
        # Arrange
        pipeline.index(parsed_items)

        # Act
        results = pipeline.lexical_search("connect to backend")

        # Assert
        assert results[0].chunk.metadata.method_name == "connect"

    def test_rebuild_lexical_index_should_restore_from_store(self, pipeline: IndexingPipeline, parsed_items) -> None:
        """Should rebuild the lexical index from stored payloads of completed chunks."""
        # Arrange
        report = pipeline.index(parsed_items)
        pipeline.lexical.clear()

        # Act
        indexed = pipeline.rebuild_lexical_index()

        # Assert
        assert indexed == report.sync.total
        assert pipeline.lexical_search("connect to backend")[0].chunk.metadata.method_name == "connect"


class TestRetryFailed:
    """Test suite for IndexingPipeline.retry_failed."""

    def test_retry_should_embed_previously_failed_chunks(
        self, settings: Settings, tracker, vector_store, parsed_items
    ) -> None:
        """Should reset failed chunks and store them once the provider recovers."""
        # Arrange
        provider = MagicMock()
        provider.model_name = "mock-embedding"
        provider.embed_documents.side_effect = EmbeddingError("service unavailable")

        with IndexingPipeline(settings, tracker, vector_store, provider) as pipeline:
            first = pipeline.index(parsed_items)
            provider.embed_documents.side_effect = lambda texts: ProviderResponse(
                vectors=[[0.5] * 8 for _ in texts], model="mock-embedding"
            )

            # Act
            retry = pipeline.retry_failed()

            # Assert
            assert len(first.failed_ids) == first.sync.total
            assert retry.reset == first.sync.total
            assert retry.embedded == first.sync.total
            assert retry.stored_points == first.sync.total
            assert retry.missing_ids == []
            assert pipeline.tracker.get_tracking_stats().failed == 0

    def test_retry_without_failures_should_do_nothing(self, pipeline: IndexingPipeline, parsed_items) -> None:
        """Should report zero work when nothing failed."""
        # Arrange
        pipeline.index(parsed_items)

        # Act
        retry = pipeline.retry_failed()

        # Assert
        assert retry.reset == 0
        assert retry.embedded == 0


class TestStatsAndExport:
    """Test suite for stats and export."""

    def test_stats_should_combine_every_component(self, pipeline: IndexingPipeline, parsed_items) -> None:
        """Should report registry, tracker, vector store, and lexical counts."""
        # Arrange
        report = pipeline.index(parsed_items)

        # Act
        stats = pipeline.stats()

        # Assert
        assert stats.registered_chunks == report.sync.total
        assert stats.tracking.completed == report.sync.total
        assert stats.vector_store["points"] == report.sync.total
        assert stats.lexical.documents == report.sync.total

    def test_export_should_write_tracking_file(self, pipeline: IndexingPipeline, parsed_items, temp_dir: Path) -> None:
        """Should write the tracking export to the given path."""
        # Arrange
        pipeline.index(parsed_items)

        # Act
        path = pipeline.export_tracking(temp_dir / "tracking.json")

        # Assert
        assert path.exists()


class TestLifecycle:
    """Test suite for init and shutdown."""

    def test_operations_before_init_should_raise(self, settings: Settings, tracker, vector_store, fake_provider) -> None:
        """Should refuse to index before init()."""
        # Arrange
        pipeline = IndexingPipeline(settings, tracker, vector_store, fake_provider)

        # Act & Assert
        with pytest.raises(DocIndexException, match="not initialized"):
            pipeline.index([])

    def test_init_after_shutdown_should_raise(self, pipeline: IndexingPipeline) -> None:
        """Should not reopen a pipeline that was shut down."""
        # Arrange
        pipeline.shutdown()

        # Act & Assert
        with pytest.raises(DocIndexException, match="shut down"):
            pipeline.init()

    def test_init_should_be_idempotent(self, pipeline: IndexingPipeline) -> None:
        """Should return the same ready pipeline when called again."""
        assert pipeline.init() is pipeline
