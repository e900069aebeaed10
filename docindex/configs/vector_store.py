"""
Vector store configuration settings.

Manages Qdrant connection, collection layout, and upsert batching.

Dependencies: pydantic, pydantic_settings
System role: Vector database configuration for semantic retrieval
"""

from pydantic import Field, SecretStr
from pydantic_settings import SettingsConfigDict

from docindex.configs.base import BaseSettings


class VectorStoreSettings(BaseSettings):
    """Vector store configuration (Qdrant server, or in-process for dev/tests)."""

    model_config = SettingsConfigDict(env_prefix="DOCINDEX_VECTOR_STORE_")

    store_type: str = Field(
        default="qdrant",
        description="Vector store type: 'qdrant' for a server, 'memory' for local in-process mode",
    )
    url: str = Field(default="http://localhost:6333", description="Qdrant server URL")
    api_key: SecretStr | None = Field(default=None, description="Qdrant API key")
    timeout: int = Field(default=30, description="Request timeout in seconds")

    collection_name: str = Field(default="privmx-docs", description="Collection name")
    vector_size: int = Field(default=1536, description="Vector dimension")
    distance: str = Field(default="Cosine", description="Distance metric: Cosine, Dot, Euclid, Manhattan")

    upsert_batch_size: int = Field(default=100, ge=1, description="Points per upsert request")
    top_k: int = Field(default=10, description="Default number of search results")
    score_threshold: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Default minimum similarity (0.0-1.0)",
    )
