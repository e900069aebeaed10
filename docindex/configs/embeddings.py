"""
Embedding generation configuration settings.

Manages the embedding provider, model, batching, and concurrency limits.

Dependencies: pydantic, pydantic_settings
System role: Embedding generator configuration
"""

from pydantic import Field, SecretStr
from pydantic_settings import SettingsConfigDict

from docindex.configs.base import BaseSettings


class EmbeddingSettings(BaseSettings):
    """Embedding provider configuration (OpenAI via LangChain by default)."""

    model_config = SettingsConfigDict(env_prefix="DOCINDEX_EMBEDDINGS_")

    provider: str = Field(default="openai", description="Embedding provider name")
    model: str = Field(default="text-embedding-3-small", description="Embedding model ID")
    api_key: SecretStr | None = Field(
        default=None,
        description="Provider API key (falls back to OPENAI_API_KEY when unset)",
    )
    dimensions: int = Field(default=1536, description="Embedding vector dimension")

    batch_size: int = Field(default=100, ge=1, le=2048, description="Chunks per provider call")
    max_tokens: int = Field(default=8192, ge=1, description="Model input limit in tokens")
    concurrency: int = Field(default=3, ge=1, description="Maximum batches in flight")

    max_retries: int = Field(default=3, ge=1, description="Attempts per provider call")
    retry_initial_wait: float = Field(default=1.0, description="Initial backoff in seconds")
    retry_max_wait: float = Field(default=30.0, description="Maximum backoff in seconds")
