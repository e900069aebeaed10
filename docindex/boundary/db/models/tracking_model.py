"""
Embedding tracking ORM models.

One row per chunk id records the content hash last seen, the embedding
lifecycle status, and audit data about the embedding that was stored.

Dependencies: sqlalchemy, docindex.boundary.db.base
System role: Persistent ledger behind the embedding tracker
"""

from sqlalchemy import Enum, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from docindex.boundary.db.base import Base, TimestampMixin
from docindex.models.tracking import TrackingStatus


class EmbeddingTrackingModel(Base, TimestampMixin):
    """
    Embedding tracking row keyed by chunk id.

    Attributes:
        id: Integer primary key (auto-generated)
        chunk_id: Deterministic chunk identifier (unique)
        chunk_hash: sha256 over the chunk's content and hashed metadata
        embedding_id: Vector store point id once embedded
        model_name: Embedding model that produced the stored vector
        tokens_used: Tokens attributed to this chunk's embedding
        dimensions: Vector dimensionality
        status: Lifecycle state (pending/completed/failed/outdated)
        error_message: Last failure reason, cleared on success or reset
        source_file, namespace, chunk_type, importance: Denormalized chunk metadata
        created_at: First time the chunk was tracked (UTC)
        updated_at: Last status or hash change (UTC)

    Constraints:
        chunk_id: UNIQUE
        status: CHECK constraint limited to TrackingStatus values
    """

    __tablename__ = "embedding_tracking"
    __table_args__ = (Index("ix_embedding_tracking_updated_at", "updated_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    chunk_id: Mapped[str] = mapped_column(String(512), nullable=False, unique=True)
    chunk_hash: Mapped[str] = mapped_column(String(64), nullable=False)

    embedding_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    model_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    tokens_used: Mapped[int | None] = mapped_column(Integer, nullable=True)
    dimensions: Mapped[int | None] = mapped_column(Integer, nullable=True)

    status: Mapped[TrackingStatus] = mapped_column(
        Enum(
            TrackingStatus,
            native_enum=False,
            create_constraint=True,
            values_callable=lambda statuses: [status.value for status in statuses],
            name="tracking_status",
            length=16,
        ),
        nullable=False,
        default=TrackingStatus.PENDING,
        index=True,
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    source_file: Mapped[str] = mapped_column(String(1024), nullable=False)
    namespace: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    chunk_type: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    importance: Mapped[str] = mapped_column(String(16), nullable=False)


class TrackingMetadataModel(Base, TimestampMixin):
    """
    Key/value facts about the ledger itself (last_sync_at, schema_version).

    Attributes:
        key: Metadata key (primary key)
        value: Stored value as text
    """

    __tablename__ = "tracking_metadata"

    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
