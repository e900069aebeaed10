"""
Test suite for EmbeddingTracker.

Tests change detection across corpus snapshots, the status state machine,
statistics, and export.

System role: Verification of the embedding change-detection ledger
"""

import json
from pathlib import Path

import pytest

from docindex.configs.tracker import TrackerSettings
from docindex.core.chunking.builder import ChunkBuilder
from docindex.core.embeddings.tracker import EmbeddingTracker, compute_chunk_hash
from docindex.core.exceptions import SyncConsistencyError, TrackerError
from docindex.models.chunk import DocumentChunk
from docindex.models.parsed_content import ParsedContent
from docindex.models.tracking import TrackingStatus


def _complete(tracker: EmbeddingTracker, chunk_ids: list[str]) -> None:
    for index, chunk_id in enumerate(chunk_ids):
        tracker.mark_embedding_completed(
            chunk_id,
            embedding_id=f"00000000-0000-0000-0000-00000000000{index}",
            model_name="fake-embedding",
            tokens_used=10,
            dimensions=8,
        )


@pytest.fixture
def chunks(method_items: list[ParsedContent]) -> list[DocumentChunk]:
    """Provide the three method-level chunks of the sample corpus."""
    return ChunkBuilder().build(method_items, "method-level")


class TestComputeChunkHash:
    """Test suite for compute_chunk_hash."""

    def test_hash_should_change_with_content(self, make_chunk) -> None:
        """Should produce a different hash when content changes."""
        assert compute_chunk_hash(make_chunk("a", "one")) != compute_chunk_hash(make_chunk("a", "two"))

    def test_hash_should_change_with_identity_metadata(self, make_chunk) -> None:
        """Should include namespace, class, method, and source position."""
        # Arrange
        base = make_chunk("a", "same")

        # Assert
        assert compute_chunk_hash(base) != compute_chunk_hash(make_chunk("a", "same", namespace="Threads"))
        assert compute_chunk_hash(base) != compute_chunk_hash(make_chunk("a", "same", line_number=4))

    def test_hash_should_ignore_tags_and_importance(self, make_chunk) -> None:
        """Should not re-embed a chunk whose only change is tags or importance."""
        # Arrange
        base = make_chunk("a", "same")
        retagged = make_chunk("a", "same", tags=["quality:0.80"], importance="critical")

        # Assert
        assert compute_chunk_hash(base) == compute_chunk_hash(retagged)


class TestSync:
    """Test suite for EmbeddingTracker.sync."""

    def test_first_sync_should_classify_everything_new(self, tracker: EmbeddingTracker, chunks) -> None:
        """Should register every chunk of an empty ledger as new and pending."""
        # Act
        result = tracker.sync(chunks)

        # Assert
        assert result.summary.new == 3
        assert result.summary.total == 3
        assert tracker.get_chunks_needing_embedding() == [chunk.id for chunk in chunks]

    def test_sync_should_be_idempotent_once_embedded(self, tracker: EmbeddingTracker, chunks) -> None:
        """Should report everything unchanged when the same snapshot is synced again."""
        # Arrange
        tracker.sync(chunks)
        _complete(tracker, [chunk.id for chunk in chunks])

        # Act
        result = tracker.sync(chunks)

        # Assert
        assert result.summary.model_dump() == {"new": 0, "updated": 0, "unchanged": 3, "removed": 0, "total": 3}
        assert result.needs_embedding == []

    def test_pending_chunks_should_stay_new_until_embedded(self, tracker: EmbeddingTracker, chunks) -> None:
        """Should keep reporting unembedded chunks so a later run picks them up."""
        # Arrange
        tracker.sync(chunks)

        # Act
        result = tracker.sync(chunks)

        # Assert
        assert result.summary.new == 3
        assert result.summary.unchanged == 0

    def test_edited_description_should_update_one_chunk(
        self, tracker: EmbeddingTracker, method_items: list[ParsedContent], chunks
    ) -> None:
        """Should classify only the edited chunk as updated and reset its embedding."""
        # Arrange
        tracker.sync(chunks)
        _complete(tracker, [chunk.id for chunk in chunks])
        edited = [
            item.model_copy(update={"description": "Creates a thread and invites its members."})
            if item.name == "ThreadApi.createThread"
            else item
            for item in method_items
        ]

        # Act
        result = tracker.sync(ChunkBuilder().build(edited, "method-level"))

        # Assert
        assert result.summary.model_dump() == {"new": 0, "updated": 1, "unchanged": 2, "removed": 0, "total": 3}
        assert result.updated_ids == ["Threads-method-threadapi-createthread"]
        record = tracker.get_embedding_info("Threads-method-threadapi-createthread")
        assert record.status == TrackingStatus.PENDING
        assert record.embedding_id is None

    def test_missing_chunk_should_be_marked_outdated(self, tracker: EmbeddingTracker, chunks) -> None:
        """Should report a vanished chunk as removed exactly once."""
        # Arrange
        tracker.sync(chunks)

        # Act
        first = tracker.sync(chunks[:2])
        second = tracker.sync(chunks[:2])

        # Assert
        assert first.removed_ids == [chunks[2].id]
        assert second.removed_ids == []
        assert tracker.get_embedding_info(chunks[2].id).status == TrackingStatus.OUTDATED

    def test_returning_chunk_should_be_revived_as_pending(self, tracker: EmbeddingTracker, chunks) -> None:
        """Should move an outdated chunk back to pending when it reappears."""
        # Arrange
        tracker.sync(chunks)
        tracker.sync(chunks[:2])

        # Act
        result = tracker.sync(chunks)

        # Assert
        assert chunks[2].id in result.new_ids
        assert tracker.get_embedding_info(chunks[2].id).status == TrackingStatus.PENDING

    def test_duplicate_ids_should_raise(self, tracker: EmbeddingTracker, chunks) -> None:
        """Should refuse a snapshot that repeats a chunk id."""
        # Act & Assert
        with pytest.raises(SyncConsistencyError) as exc_info:
            tracker.sync([chunks[0], chunks[0]])

        assert exc_info.value.details["duplicates"] == [chunks[0].id]


class TestStatusTransitions:
    """Test suite for mark/reset operations."""

    def test_mark_completed_should_record_embedding(self, tracker: EmbeddingTracker, chunks) -> None:
        """Should store the embedding id, model, and token usage."""
        # Arrange
        tracker.sync(chunks)

        # Act
        _complete(tracker, [chunks[0].id])

        # Assert
        record = tracker.get_embedding_info(chunks[0].id)
        assert record.status == TrackingStatus.COMPLETED
        assert record.embedding_id == "00000000-0000-0000-0000-000000000000"
        assert record.model_name == "fake-embedding"
        assert tracker.is_chunk_embedded(chunks[0].id)
        assert not tracker.is_chunk_embedded(chunks[1].id)

    def test_reset_failed_should_only_touch_failed_chunks(self, tracker: EmbeddingTracker, chunks) -> None:
        """Should move failed chunks to pending and leave the others alone."""
        # Arrange
        tracker.sync(chunks)
        _complete(tracker, [chunks[0].id])
        tracker.mark_embedding_failed(chunks[1].id, "rate limited")

        # Act
        reset = tracker.reset_failed_embeddings()

        # Assert
        assert reset == 1
        assert tracker.get_embedding_info(chunks[0].id).status == TrackingStatus.COMPLETED
        failed_record = tracker.get_embedding_info(chunks[1].id)
        assert failed_record.status == TrackingStatus.PENDING
        assert failed_record.error_message is None
        assert tracker.get_embedding_info(chunks[2].id).status == TrackingStatus.PENDING

    def test_mark_unknown_chunk_should_raise(self, tracker: EmbeddingTracker) -> None:
        """Should refuse to mark a chunk the ledger has never seen."""
        with pytest.raises(TrackerError):
            tracker.mark_embedding_failed("missing", "boom")

    def test_mark_outdated_chunk_should_raise(self, tracker: EmbeddingTracker, chunks) -> None:
        """Should refuse to complete a chunk that left the corpus."""
        # Arrange
        tracker.sync(chunks)
        tracker.sync(chunks[:2])

        # Act & Assert
        with pytest.raises(TrackerError, match="outdated"):
            _complete(tracker, [chunks[2].id])

    def test_cleanup_should_delete_outdated_records(self, tracker: EmbeddingTracker, chunks) -> None:
        """Should drop outdated rows and keep the rest."""
        # Arrange
        tracker.sync(chunks)
        tracker.sync(chunks[:2])

        # Act
        deleted = tracker.cleanup_outdated_records()

        # Assert
        assert deleted == 1
        assert tracker.get_embedding_info(chunks[2].id) is None
        assert tracker.get_tracking_stats().total_chunks == 2


class TestStatsAndExport:
    """Test suite for statistics and export."""

    def test_stats_should_aggregate_statuses(self, tracker: EmbeddingTracker, chunks) -> None:
        """Should count statuses, tokens, models, and namespaces."""
        # Arrange
        tracker.sync(chunks)
        _complete(tracker, [chunks[0].id, chunks[1].id])
        tracker.mark_embedding_failed(chunks[2].id, "boom")

        # Act
        stats = tracker.get_tracking_stats()

        # Assert
        assert stats.total_chunks == 3
        assert stats.completed == 2
        assert stats.failed == 1
        assert stats.total_tokens == 20
        assert stats.models == ["fake-embedding"]
        assert stats.namespaces == ["Core", "Threads"]
        assert stats.last_update != "Never"

    def test_empty_ledger_should_report_never_updated(self, tracker: EmbeddingTracker) -> None:
        """Should report zero counts and 'Never' for an empty ledger."""
        # Act
        stats = tracker.get_tracking_stats()

        # Assert
        assert stats.total_chunks == 0
        assert stats.last_update == "Never"

    def test_export_should_write_records_and_stats(self, tracker: EmbeddingTracker, chunks, temp_dir: Path) -> None:
        """Should write a versioned JSON snapshot of the ledger."""
        # Arrange
        tracker.sync(chunks)
        target = temp_dir / "export" / "tracking.json"

        # Act
        written = tracker.export_tracking_data(target)

        # Assert
        document = json.loads(written.read_text(encoding="utf-8"))
        assert written == target
        assert document["version"] == "1.0.0"
        assert len(document["records"]) == 3
        assert document["stats"]["pending"] == 3
        assert "last_sync_at" in document["metadata"]


class TestLifecycle:
    """Test suite for opening and closing the ledger."""

    def test_file_ledger_should_persist_across_instances(self, temp_dir: Path, chunks) -> None:
        """Should reopen an on-disk ledger with its previous state."""
        # Arrange
        settings = TrackerSettings(db_path=str(temp_dir / "tracking.db"))
        first = EmbeddingTracker(settings)
        first.sync(chunks)
        first.close()

        # Act
        second = EmbeddingTracker(settings)
        result = second.sync(chunks)
        second.close()

        # Assert
        assert result.summary.new == 3
        assert result.summary.removed == 0

    def test_closed_tracker_should_refuse_operations(self, tracker: EmbeddingTracker) -> None:
        """Should raise TrackerError after close and allow closing twice."""
        # Act
        tracker.close()
        tracker.close()

        # Assert
        with pytest.raises(TrackerError, match="closed"):
            tracker.get_tracking_stats()
