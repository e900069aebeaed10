"""
Test suite for embedding providers.

Tests error wrapping, transient-error retry, and OpenAI client construction
without network access.

System role: Verification of the embedding backend adapter
"""

from unittest.mock import MagicMock, patch

import httpx
import openai
import pytest

from docindex.configs.embeddings import EmbeddingSettings
from docindex.core.embeddings.providers import (
    EmbeddingProvider,
    LangChainEmbeddingProvider,
    OpenAIEmbeddingProvider,
    estimate_tokens,
    get_embedding_provider,
)
from docindex.core.exceptions import EmbeddingError


def _connection_error() -> openai.APIConnectionError:
    return openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/embeddings"))


class TestEstimateTokens:
    """Test suite for estimate_tokens."""

    @pytest.mark.parametrize("text, expected", [("", 0), ("abc", 1), ("x" * 7, 2), ("x" * 8, 3)])
    def test_estimate_should_round_up_at_three_and_a_half_chars(self, text: str, expected: int) -> None:
        """Should estimate ceil(len / 3.5) tokens."""
        assert estimate_tokens(text) == expected


class TestLangChainEmbeddingProvider:
    """Test suite for LangChainEmbeddingProvider."""

    def test_provider_should_satisfy_protocol(self, fake_provider) -> None:
        """Should be usable wherever an EmbeddingProvider is expected."""
        assert isinstance(fake_provider, EmbeddingProvider)

    def test_embed_documents_should_return_vectors_in_order(self, fake_provider) -> None:
        """Should return one vector per text and the same vector for the same text."""
        # Act
        response = fake_provider.embed_documents(["alpha", "beta", "alpha"])

        # Assert
        assert len(response.vectors) == 3
        assert response.vectors[0] == response.vectors[2]
        assert response.vectors[0] != response.vectors[1]
        assert response.model == "fake-embedding"
        assert response.tokens_used == 6

    def test_empty_batch_should_skip_the_client(self) -> None:
        """Should not call the client for an empty batch."""
        # Arrange
        client = MagicMock()
        provider = LangChainEmbeddingProvider(client, "mock")

        # Act
        response = provider.embed_documents([])

        # Assert
        assert response.vectors == []
        client.embed_documents.assert_not_called()

    def test_api_error_should_become_embedding_error(self) -> None:
        """Should wrap non-transient OpenAI errors without retrying."""
        # Arrange
        client = MagicMock()
        client.embed_documents.side_effect = openai.OpenAIError("invalid api key")
        provider = LangChainEmbeddingProvider(client, "mock", EmbeddingSettings(max_retries=3))

        # Act & Assert
        with pytest.raises(EmbeddingError, match="invalid api key"):
            provider.embed_documents(["text"])

        assert client.embed_documents.call_count == 1

    def test_transient_error_should_be_retried(self) -> None:
        """Should retry connection errors and return the later success."""
        # Arrange
        client = MagicMock()
        client.embed_documents.side_effect = [_connection_error(), [[0.1, 0.2]]]
        provider = LangChainEmbeddingProvider(client, "mock", EmbeddingSettings(max_retries=2))

        # Act
        with patch("time.sleep"):
            response = provider.embed_documents(["text"])

        # Assert
        assert response.vectors == [[0.1, 0.2]]
        assert client.embed_documents.call_count == 2

    def test_query_error_should_become_embedding_error(self) -> None:
        """Should wrap failures of query embedding."""
        # Arrange
        client = MagicMock()
        client.embed_query.side_effect = _connection_error()
        provider = LangChainEmbeddingProvider(client, "mock", EmbeddingSettings(max_retries=1))

        # Act & Assert
        with pytest.raises(EmbeddingError):
            provider.embed_query("connect")


class TestOpenAIEmbeddingProvider:
    """Test suite for OpenAIEmbeddingProvider construction."""

    @patch("docindex.core.embeddings.providers.OpenAIEmbeddings")
    def test_v3_model_should_request_dimensions(self, mock_embeddings: MagicMock) -> None:
        """Should pass dimensions for text-embedding-3 models and disable client retries."""
        # Act
        provider = OpenAIEmbeddingProvider(EmbeddingSettings(model="text-embedding-3-small", dimensions=512))

        # Assert
        mock_embeddings.assert_called_once_with(model="text-embedding-3-small", max_retries=0, dimensions=512)
        assert provider.model_name == "text-embedding-3-small"

    @patch("docindex.core.embeddings.providers.OpenAIEmbeddings")
    def test_legacy_model_should_not_request_dimensions(self, mock_embeddings: MagicMock) -> None:
        """Should omit dimensions for models that do not support them."""
        # Act
        OpenAIEmbeddingProvider(EmbeddingSettings(model="text-embedding-ada-002"))

        # Assert
        assert "dimensions" not in mock_embeddings.call_args.kwargs


class TestGetEmbeddingProvider:
    """Test suite for get_embedding_provider."""

    @patch("docindex.core.embeddings.providers.OpenAIEmbeddings")
    def test_openai_should_build_openai_provider(self, mock_embeddings: MagicMock) -> None:
        """Should return the OpenAI provider for provider='openai'."""
        assert isinstance(get_embedding_provider(EmbeddingSettings(provider="openai")), OpenAIEmbeddingProvider)

    def test_unknown_provider_should_raise(self) -> None:
        """Should reject provider names it cannot build."""
        with pytest.raises(EmbeddingError, match="Unknown embedding provider"):
            get_embedding_provider(EmbeddingSettings(provider="cohere"))
