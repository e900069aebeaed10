"""
Embedding tracker.

Content-addressed ledger of which chunks have been embedded. Each sync
reconciles a full corpus snapshot against the ledger, classifying every
chunk as new, updated, unchanged, or removed, so only changed content is
re-embedded.

Dependencies: sqlalchemy, hashlib, json (stdlib)
System role: Change detection between chunking and embedding
"""

import hashlib
import json
import logging
import threading
from collections import Counter
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from docindex.boundary.db.base import Base
from docindex.boundary.db.connection import get_engine, get_session_factory
from docindex.boundary.db.CRUD import tracking_crud, tracking_metadata_crud
from docindex.boundary.db.models import EmbeddingTrackingModel
from docindex.configs.tracker import TrackerSettings
from docindex.core.exceptions import SyncConsistencyError, TrackerError
from docindex.models.chunk import DocumentChunk
from docindex.models.tracking import (
    SyncResult,
    SyncSummary,
    TrackingRecord,
    TrackingStats,
    TrackingStatus,
)

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1"
EXPORT_VERSION = "1.0.0"
LAST_SYNC_KEY = "last_sync_at"
SCHEMA_VERSION_KEY = "schema_version"


def compute_chunk_hash(chunk: DocumentChunk) -> str:
    """
    sha256 over the chunk content and its identifying metadata.

    Tags, importance, and enrichment lists are not hashed, so re-tagging a
    chunk does not force a re-embedding.
    """
    metadata = chunk.metadata
    payload = {
        "content": chunk.content,
        "metadata": {
            "type": metadata.type,
            "namespace": metadata.namespace,
            "className": metadata.class_name,
            "methodName": metadata.method_name,
            "sourceFile": metadata.source_file,
            "lineNumber": metadata.line_number,
        },
    }
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class EmbeddingTracker:
    """SQLite-backed embedding ledger."""

    def __init__(self, settings: TrackerSettings | None = None, engine: Engine | None = None) -> None:
        """
        Open the ledger and create its tables if needed.

        Args:
            settings: Tracker configuration (database path)
            engine: Pre-built engine, mainly for tests

        Raises:
            TrackerError: When the database cannot be opened
        """
        self._settings = settings or TrackerSettings()
        self._lock = threading.RLock()
        self._closed = False
        try:
            self._engine = engine or get_engine(self._settings)
            Base.metadata.create_all(self._engine)
        except SQLAlchemyError as e:
            raise TrackerError(f"Failed to open tracking database: {e}", details={"db_path": self._settings.db_path}) from e
        self._session_factory = get_session_factory(self._engine)

        with self._transaction() as session:
            if tracking_metadata_crud.get_value(session, SCHEMA_VERSION_KEY) is None:
                tracking_metadata_crud.set_value(session, SCHEMA_VERSION_KEY, SCHEMA_VERSION)

        logger.info(
            f"{__name__}:__init__ - Tracking database ready",
            extra={"db_path": self._settings.db_path},
        )

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        if self._closed:
            raise TrackerError("Tracker is closed")
        with self._lock:
            try:
                with self._session_factory() as session, session.begin():
                    yield session
            except SQLAlchemyError as e:
                raise TrackerError(f"Tracking database operation failed: {e}") from e

    def sync(self, chunks: list[DocumentChunk]) -> SyncResult:
        """
        Reconcile a corpus snapshot against the ledger.

        Args:
            chunks: Every chunk of the current corpus

        Returns:
            SyncResult: Partitions of the snapshot plus removed ids

        Raises:
            SyncConsistencyError: When the snapshot repeats a chunk id
            TrackerError: When the database write fails
        """
        duplicates = sorted(chunk_id for chunk_id, n in Counter(c.id for c in chunks).items() if n > 1)
        if duplicates:
            raise SyncConsistencyError(
                "Snapshot contains duplicate chunk ids",
                details={"duplicates": duplicates[:10], "count": len(duplicates)},
            )

        result = SyncResult()
        incoming = {chunk.id for chunk in chunks}

        with self._transaction() as session:
            existing = tracking_crud.get_all_by_chunk_id(session)

            for chunk in chunks:
                chunk_hash = compute_chunk_hash(chunk)
                record = existing.get(chunk.id)

                if record is None:
                    tracking_crud.create(session, chunk_id=chunk.id, chunk_hash=chunk_hash, **self._denormalized(chunk))
                    result.new_chunks.append(chunk)
                elif record.chunk_hash != chunk_hash:
                    record.chunk_hash = chunk_hash
                    record.status = TrackingStatus.PENDING
                    record.embedding_id = None
                    record.model_name = None
                    record.tokens_used = None
                    record.dimensions = None
                    record.error_message = None
                    for field, value in self._denormalized(chunk).items():
                        setattr(record, field, value)
                    result.updated_chunks.append(chunk)
                elif record.status == TrackingStatus.COMPLETED:
                    result.unchanged_chunks.append(chunk)
                elif record.status == TrackingStatus.OUTDATED:
                    record.status = TrackingStatus.PENDING
                    record.error_message = None
                    result.new_chunks.append(chunk)
                else:
                    result.new_chunks.append(chunk)

            for chunk_id, record in existing.items():
                if chunk_id not in incoming and record.status != TrackingStatus.OUTDATED:
                    record.status = TrackingStatus.OUTDATED
                    result.removed_ids.append(chunk_id)

            self._check_partitions(result, incoming)
            tracking_metadata_crud.set_value(session, LAST_SYNC_KEY, datetime.now(timezone.utc).isoformat())

        result.summary = SyncSummary(
            new=len(result.new_chunks),
            updated=len(result.updated_chunks),
            unchanged=len(result.unchanged_chunks),
            removed=len(result.removed_ids),
            total=len(chunks),
        )
        logger.info(
            f"{__name__}:sync - Sync complete",
            extra=result.summary.model_dump(),
        )
        return result

    @staticmethod
    def _denormalized(chunk: DocumentChunk) -> dict[str, str]:
        return {
            "source_file": chunk.metadata.source_file,
            "namespace": chunk.metadata.namespace,
            "chunk_type": chunk.metadata.type,
            "importance": chunk.metadata.importance,
        }

    @staticmethod
    def _check_partitions(result: SyncResult, incoming: set[str]) -> None:
        partitions = [set(result.new_ids), set(result.updated_ids), set(result.unchanged_ids)]
        total = sum(len(p) for p in partitions)
        if total != len(incoming) or set().union(*partitions) != incoming:
            raise SyncConsistencyError(
                "Sync partitions do not cover the snapshot exactly once",
                details={"classified": total, "incoming": len(incoming)},
            )
        if incoming & set(result.removed_ids):
            raise SyncConsistencyError("Chunk classified as both present and removed")

    def _require(self, session: Session, chunk_id: str) -> EmbeddingTrackingModel:
        record = tracking_crud.get_by_chunk_id(session, chunk_id)
        if record is None:
            raise TrackerError("Chunk is not tracked", chunk_id=chunk_id)
        if record.status == TrackingStatus.OUTDATED:
            raise TrackerError("Chunk is outdated", chunk_id=chunk_id)
        return record

    def mark_embedding_completed(
        self,
        chunk_id: str,
        embedding_id: str,
        model_name: str,
        tokens_used: int,
        dimensions: int,
    ) -> None:
        """
        Record a stored embedding.

        Raises:
            TrackerError: When the chunk is unknown or outdated
        """
        with self._transaction() as session:
            record = self._require(session, chunk_id)
            record.status = TrackingStatus.COMPLETED
            record.embedding_id = embedding_id
            record.model_name = model_name
            record.tokens_used = tokens_used
            record.dimensions = dimensions
            record.error_message = None

    def mark_embedding_failed(self, chunk_id: str, error_message: str) -> None:
        """
        Record a failed embedding attempt.

        Raises:
            TrackerError: When the chunk is unknown or outdated
        """
        with self._transaction() as session:
            record = self._require(session, chunk_id)
            record.status = TrackingStatus.FAILED
            record.error_message = error_message
        logger.warning(
            f"{__name__}:mark_embedding_failed - Embedding failed",
            extra={"chunk_id": chunk_id, "error": error_message},
        )

    def get_chunks_needing_embedding(self) -> list[str]:
        """Ids of pending or failed chunks, oldest first."""
        with self._transaction() as session:
            records = tracking_crud.get_by_status(session, [TrackingStatus.PENDING, TrackingStatus.FAILED])
            return [record.chunk_id for record in records]

    def get_chunks_by_status(self, status: TrackingStatus) -> list[TrackingRecord]:
        with self._transaction() as session:
            records = tracking_crud.get_by_status(session, [status])
            return [TrackingRecord.model_validate(record) for record in records]

    def is_chunk_embedded(self, chunk_id: str) -> bool:
        with self._transaction() as session:
            record = tracking_crud.get_by_chunk_id(session, chunk_id)
            return record is not None and record.status == TrackingStatus.COMPLETED and record.embedding_id is not None

    def get_embedding_info(self, chunk_id: str) -> TrackingRecord | None:
        with self._transaction() as session:
            record = tracking_crud.get_by_chunk_id(session, chunk_id)
            return TrackingRecord.model_validate(record) if record is not None else None

    def get_tracking_stats(self) -> TrackingStats:
        """Aggregate counts, token usage, models, and namespaces."""
        with self._transaction() as session:
            counts = tracking_crud.count_by_status(session)
            latest = tracking_crud.latest_update(session)
            return TrackingStats(
                total_chunks=sum(counts.values()),
                completed=counts.get(TrackingStatus.COMPLETED, 0),
                pending=counts.get(TrackingStatus.PENDING, 0),
                failed=counts.get(TrackingStatus.FAILED, 0),
                outdated=counts.get(TrackingStatus.OUTDATED, 0),
                total_tokens=tracking_crud.total_tokens(session),
                models=tracking_crud.distinct_models(session),
                namespaces=tracking_crud.distinct_namespaces(session),
                last_update=latest.isoformat() if latest is not None else "Never",
            )

    def reset_failed_embeddings(self) -> int:
        """
        Move failed chunks back to pending.

        Returns:
            int: Number of chunks reset
        """
        with self._transaction() as session:
            count = tracking_crud.reset_failed(session)
        logger.info(f"{__name__}:reset_failed_embeddings - Reset {count} failed embeddings")
        return count

    def cleanup_outdated_records(self) -> int:
        """
        Delete outdated rows from the ledger.

        Returns:
            int: Number of rows deleted
        """
        with self._transaction() as session:
            count = tracking_crud.delete_outdated(session)
        logger.info(f"{__name__}:cleanup_outdated_records - Deleted {count} outdated records")
        return count

    def export_tracking_data(self, path: str | Path | None = None) -> Path:
        """
        Write the full ledger to a JSON file.

        Args:
            path: Target file, defaults to the configured export path

        Returns:
            Path: File that was written
        """
        target = Path(path or self._settings.export_path)
        with self._transaction() as session:
            records = [TrackingRecord.model_validate(r).model_dump(mode="json") for r in tracking_crud.get_all(session)]
            metadata = tracking_metadata_crud.as_dict(session)
        document = {
            "version": EXPORT_VERSION,
            "exportedAt": datetime.now(timezone.utc).isoformat(),
            "records": records,
            "metadata": metadata,
            "stats": self.get_tracking_stats().model_dump(),
        }
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps(document, indent=2), encoding="utf-8")
        logger.info(
            f"{__name__}:export_tracking_data - Exported tracking data",
            extra={"path": str(target), "records": len(records)},
        )
        return target

    def close(self) -> None:
        """Dispose the engine; further calls raise TrackerError."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._engine.dispose()
        logger.info(f"{__name__}:close - Tracking database closed")
