"""
Embedding providers.

Defines the provider protocol the embedding generator depends on and the
LangChain-backed implementations, OpenAI by default.

Dependencies: langchain_core, langchain_openai, openai, tenacity, dotenv
System role: Vector generation backend for the embedding generator
"""

import logging
import math
from typing import Protocol, runtime_checkable

import openai
from dotenv import load_dotenv
from langchain_core.embeddings import Embeddings
from langchain_openai import OpenAIEmbeddings
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from docindex.configs.embeddings import EmbeddingSettings
from docindex.core.exceptions import EmbeddingError
from docindex.models.embedding import ProviderResponse

load_dotenv()
logger = logging.getLogger(__name__)

CHARS_PER_TOKEN = 3.5
RETRYABLE_ERRORS = (
    openai.APIConnectionError,
    openai.APITimeoutError,
    openai.RateLimitError,
    openai.InternalServerError,
)


def estimate_tokens(text: str) -> int:
    """Rough token count at 3.5 characters per token."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Anything that turns texts into vectors."""

    model_name: str

    def embed_documents(self, texts: list[str]) -> ProviderResponse:
        """Embed a batch of texts, one vector per text in input order."""
        ...

    def embed_query(self, text: str) -> list[float]:
        """Embed a single query string."""
        ...


class LangChainEmbeddingProvider:
    """
    Provider over any LangChain Embeddings implementation.

    Transient API errors (connection, timeout, rate limit, 5xx) are retried
    with exponential jitter; other OpenAI errors surface as EmbeddingError.
    """

    def __init__(self, embeddings: Embeddings, model_name: str, settings: EmbeddingSettings | None = None) -> None:
        """
        Initialize the provider.

        Args:
            embeddings: LangChain embeddings client
            model_name: Model name recorded with every vector
            settings: Retry configuration
        """
        self._settings = settings or EmbeddingSettings()
        self._embeddings = embeddings
        self.model_name = model_name

        attempts = self._settings.max_retries
        self._with_retry = retry(
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            stop=stop_after_attempt(attempts),
            wait=wait_exponential_jitter(
                initial=self._settings.retry_initial_wait,
                max=self._settings.retry_max_wait,
                jitter=5,
            ),
            before_sleep=lambda retry_state: logger.warning(
                f"{__name__}:embed - Retry {retry_state.attempt_number}/{attempts} after "
                f"{type(retry_state.outcome.exception()).__name__}"
            ),
            reraise=True,
        )

    def embed_documents(self, texts: list[str]) -> ProviderResponse:
        """
        Embed a batch of texts.

        Args:
            texts: Prepared chunk texts

        Returns:
            ProviderResponse: Vectors in input order plus estimated token usage

        Raises:
            EmbeddingError: When the API call fails after retries
        """
        if not texts:
            return ProviderResponse(vectors=[], model=self.model_name)
        try:
            vectors = self._with_retry(self._embeddings.embed_documents)(texts)
        except openai.OpenAIError as e:
            raise EmbeddingError(f"Failed to generate embeddings: {e}", details={"batch_size": len(texts)}) from e

        return ProviderResponse(
            vectors=vectors,
            model=self.model_name,
            tokens_used=sum(estimate_tokens(text) for text in texts),
        )

    def embed_query(self, text: str) -> list[float]:
        """
        Embed a search query.

        Raises:
            EmbeddingError: When the API call fails after retries
        """
        try:
            return self._with_retry(self._embeddings.embed_query)(text)
        except openai.OpenAIError as e:
            raise EmbeddingError(f"Failed to embed query: {e}") from e


class OpenAIEmbeddingProvider(LangChainEmbeddingProvider):
    """OpenAI embeddings through langchain_openai."""

    def __init__(self, settings: EmbeddingSettings | None = None) -> None:
        settings = settings or EmbeddingSettings()
        kwargs = {"model": settings.model, "max_retries": 0}
        if settings.model.startswith("text-embedding-3"):
            kwargs["dimensions"] = settings.dimensions
        if settings.api_key is not None:
            kwargs["api_key"] = settings.api_key
        super().__init__(OpenAIEmbeddings(**kwargs), settings.model, settings)

        logger.info(
            f"{__name__}:__init__ - OpenAI embeddings initialized",
            extra={"model": settings.model, "dimensions": settings.dimensions},
        )


def get_embedding_provider(settings: EmbeddingSettings | None = None) -> EmbeddingProvider:
    """
    Factory for the configured embedding provider.

    Raises:
        EmbeddingError: When the provider name is unknown
    """
    settings = settings or EmbeddingSettings()
    if settings.provider == "openai":
        return OpenAIEmbeddingProvider(settings)
    raise EmbeddingError(f"Unknown embedding provider: {settings.provider}", details={"provider": settings.provider})
