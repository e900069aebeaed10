"""ORM models for the tracking database."""

from docindex.boundary.db.models.tracking_model import EmbeddingTrackingModel, TrackingMetadataModel

__all__ = ["EmbeddingTrackingModel", "TrackingMetadataModel"]
