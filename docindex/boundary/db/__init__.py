"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, TimestampMixin: Model building blocks
  - get_engine(), get_session_factory(): Connection management
  - EmbeddingTrackingModel, TrackingMetadataModel: Tracking ledger tables
  - tracking_crud, tracking_metadata_crud: CRUD operation singletons

Dependencies: sqlalchemy, docindex.configs
System role: SQLite adapter behind the embedding tracker
"""

from docindex.boundary.db.base import Base, TimestampMixin
from docindex.boundary.db.connection import get_engine, get_session_factory
from docindex.boundary.db.CRUD import (
    BaseCRUD,
    TrackingCRUD,
    TrackingMetadataCRUD,
    tracking_crud,
    tracking_metadata_crud,
)
from docindex.boundary.db.models import EmbeddingTrackingModel, TrackingMetadataModel

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    # Connection
    "get_engine",
    "get_session_factory",
    # Models
    "EmbeddingTrackingModel",
    "TrackingMetadataModel",
    # CRUD
    "BaseCRUD",
    "TrackingCRUD",
    "TrackingMetadataCRUD",
    "tracking_crud",
    "tracking_metadata_crud",
]
