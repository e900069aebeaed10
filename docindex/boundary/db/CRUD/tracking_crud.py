"""
Embedding tracking CRUD operations.

Provides queries over the embedding_tracking and tracking_metadata tables
used by the embedding tracker: lookups by chunk id and status, aggregate
statistics, and bulk status transitions.

Dependencies: sqlalchemy, docindex.boundary.db.models
System role: Tracking ledger persistence operations
"""

from datetime import datetime
from typing import Sequence

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from docindex.boundary.db.CRUD.base_crud import BaseCRUD
from docindex.boundary.db.models.tracking_model import EmbeddingTrackingModel, TrackingMetadataModel
from docindex.models.tracking import TrackingStatus


class TrackingCRUD(BaseCRUD[EmbeddingTrackingModel]):
    """
    CRUD operations for EmbeddingTrackingModel.

    Extends BaseCRUD with chunk-id lookups, status filters, and aggregates.
    """

    def __init__(self) -> None:
        """Initialize TrackingCRUD with EmbeddingTrackingModel."""
        super().__init__(EmbeddingTrackingModel)

    def get_by_chunk_id(self, session: Session, chunk_id: str) -> EmbeddingTrackingModel | None:
        """
        Retrieve a tracking row by chunk id.

        Args:
            session: Database session
            chunk_id: Chunk identifier

        Returns:
            EmbeddingTrackingModel if tracked, None otherwise
        """
        stmt = select(EmbeddingTrackingModel).where(EmbeddingTrackingModel.chunk_id == chunk_id)
        return session.execute(stmt).scalar_one_or_none()

    def get_all_by_chunk_id(self, session: Session) -> dict[str, EmbeddingTrackingModel]:
        """Every tracking row keyed by chunk id."""
        return {record.chunk_id: record for record in self.get_all(session)}

    def get_by_status(
        self,
        session: Session,
        statuses: Sequence[TrackingStatus],
        limit: int | None = None,
    ) -> Sequence[EmbeddingTrackingModel]:
        """
        Retrieve rows in any of the given statuses, oldest first.

        Args:
            session: Database session
            statuses: Statuses to include
            limit: Maximum number of rows to return

        Returns:
            Sequence of matching rows ordered by created_at
        """
        stmt = (
            select(EmbeddingTrackingModel)
            .where(EmbeddingTrackingModel.status.in_(list(statuses)))
            .order_by(EmbeddingTrackingModel.created_at, EmbeddingTrackingModel.id)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return session.execute(stmt).scalars().all()

    def count_by_status(self, session: Session) -> dict[TrackingStatus, int]:
        stmt = select(EmbeddingTrackingModel.status, func.count()).group_by(EmbeddingTrackingModel.status)
        return {status: count for status, count in session.execute(stmt).all()}

    def total_tokens(self, session: Session) -> int:
        stmt = select(func.coalesce(func.sum(EmbeddingTrackingModel.tokens_used), 0))
        return int(session.execute(stmt).scalar_one())

    def distinct_models(self, session: Session) -> list[str]:
        stmt = (
            select(EmbeddingTrackingModel.model_name)
            .where(EmbeddingTrackingModel.model_name.is_not(None))
            .distinct()
            .order_by(EmbeddingTrackingModel.model_name)
        )
        return list(session.execute(stmt).scalars().all())

    def distinct_namespaces(self, session: Session) -> list[str]:
        stmt = select(EmbeddingTrackingModel.namespace).distinct().order_by(EmbeddingTrackingModel.namespace)
        return list(session.execute(stmt).scalars().all())

    def latest_update(self, session: Session) -> datetime | None:
        return session.execute(select(func.max(EmbeddingTrackingModel.updated_at))).scalar_one_or_none()

    def reset_failed(self, session: Session) -> int:
        """
        Move every failed row back to pending and clear its error.

        Returns:
            Number of rows reset
        """
        stmt = (
            update(EmbeddingTrackingModel)
            .where(EmbeddingTrackingModel.status == TrackingStatus.FAILED)
            .values(status=TrackingStatus.PENDING, error_message=None)
            .execution_options(synchronize_session=False)
        )
        return session.execute(stmt).rowcount

    def delete_outdated(self, session: Session) -> int:
        """
        Hard-delete every outdated row.

        Returns:
            Number of rows deleted
        """
        stmt = (
            delete(EmbeddingTrackingModel)
            .where(EmbeddingTrackingModel.status == TrackingStatus.OUTDATED)
            .execution_options(synchronize_session=False)
        )
        return session.execute(stmt).rowcount


class TrackingMetadataCRUD(BaseCRUD[TrackingMetadataModel]):
    """Key/value access to the tracking_metadata table."""

    def __init__(self) -> None:
        """Initialize TrackingMetadataCRUD with TrackingMetadataModel."""
        super().__init__(TrackingMetadataModel)

    def get_value(self, session: Session, key: str) -> str | None:
        record = self.get(session, key)
        return record.value if record is not None else None

    def set_value(self, session: Session, key: str, value: str) -> None:
        record = self.get(session, key)
        if record is None:
            self.create(session, key=key, value=value)
        else:
            record.value = value

    def as_dict(self, session: Session) -> dict[str, str]:
        return {record.key: record.value for record in self.get_all(session)}


tracking_crud = TrackingCRUD()
tracking_metadata_crud = TrackingMetadataCRUD()
