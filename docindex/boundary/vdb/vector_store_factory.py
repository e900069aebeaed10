"""
Vector store factory.

Selects the Qdrant deployment from VectorStoreSettings.store_type: a Qdrant
server for 'qdrant', or the in-process local mode for 'memory'.

Dependencies: docindex.boundary.vdb, docindex.configs
System role: Vector store instantiation and selection
"""

import logging

from docindex.boundary.vdb.qdrant_store import QdrantVectorStore
from docindex.configs.vector_store import VectorStoreSettings

logger = logging.getLogger(__name__)


def get_vector_store(settings: VectorStoreSettings | None = None) -> QdrantVectorStore:
    """
    Factory function to get vector store based on configuration.

    Args:
        settings: Vector store configuration

    Returns:
        QdrantVectorStore: Configured vector store instance

    Raises:
        ValueError: If store_type is invalid
    """
    settings = settings or VectorStoreSettings()
    store_type = settings.store_type.lower()

    if store_type == "qdrant":
        logger.info(f"{__name__}:get_vector_store - Creating Qdrant vector store", extra={"url": settings.url})
        return QdrantVectorStore(settings)

    elif store_type == "memory":
        logger.info(f"{__name__}:get_vector_store - Creating in-process Qdrant vector store (local mode)")
        return QdrantVectorStore(settings)

    else:
        raise ValueError(f"Invalid store_type: {store_type}. Must be 'qdrant' (server) or 'memory' (local mode).")
