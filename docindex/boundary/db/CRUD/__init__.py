"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from docindex.boundary.db.CRUD import tracking_crud

    record = tracking_crud.get_by_chunk_id(session, chunk_id)
"""

from docindex.boundary.db.CRUD.base_crud import BaseCRUD
from docindex.boundary.db.CRUD.tracking_crud import (
    TrackingCRUD,
    TrackingMetadataCRUD,
    tracking_crud,
    tracking_metadata_crud,
)

__all__ = [
    "BaseCRUD",
    "TrackingCRUD",
    "TrackingMetadataCRUD",
    "tracking_crud",
    "tracking_metadata_crud",
]
