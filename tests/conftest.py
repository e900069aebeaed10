"""
Shared test fixtures and configuration for entire test suite.

Provides: Sample API corpus, chunk factory, in-memory tracker, fake embedding
provider, local-mode Qdrant store, wired pipeline
Dependencies: pytest, langchain_core, qdrant_client, sqlalchemy
System role: Test infrastructure and fixture management
"""

import json
import shutil
import tempfile
from pathlib import Path

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding

from docindex.application.pipeline import IndexingPipeline
from docindex.boundary.vdb.qdrant_store import QdrantVectorStore
from docindex.configs.chunking import ChunkingSettings
from docindex.configs.embeddings import EmbeddingSettings
from docindex.configs.search import SearchSettings
from docindex.configs.settings import Settings
from docindex.configs.tracker import TrackerSettings
from docindex.configs.vector_store import VectorStoreSettings
from docindex.core.embeddings.providers import LangChainEmbeddingProvider
from docindex.core.embeddings.tracker import EmbeddingTracker
from docindex.core.parsing.json_parser import JsonApiParser
from docindex.models.chunk import ChunkMetadata, DocumentChunk
from docindex.models.parsed_content import ParsedContent

VECTOR_SIZE = 8

SAMPLE_API_SPEC = {
    "_meta": {"version": "2.0"},
    "Core": [
        {
            "title": "Endpoint",
            "content": [
                {
                    "type": "class",
                    "name": "Endpoint",
                    "description": "Entry point of the platform library.",
                    "methods": [
                        {
                            "name": "setup",
                            "description": "Loads the library assets and prepares the runtime.",
                            "snippet": "static async setup(folderPath: string): Promise<void>",
                            "methodType": "static",
                            "params": [
                                {
                                    "name": "folderPath",
                                    "description": "Path to the library assets",
                                    "type": {"name": "string"},
                                }
                            ],
                            "returns": [],
                        },
                        {
                            "name": "connect",
                            "description": "Opens a session for the given user key and bridge address.",
                            "snippet": "static async connect(userPrivKey: string, solutionId: string, bridgeUrl: string): Promise<Connection>",
                            "methodType": "static",
                            "params": [
                                {"name": "userPrivKey", "description": "User private key", "type": {"name": "string"}},
                                {"name": "solutionId", "description": "Solution identifier", "type": {"name": "string"}},
                                {"name": "bridgeUrl", "description": "Bridge address", "type": {"name": "string"}},
                            ],
                            "returns": [{"type": {"name": "Connection"}, "description": "Live session"}],
                        },
                    ],
                }
            ],
        }
    ],
    "Threads": [
        {
            "title": "ThreadApi",
            "content": [
                {
                    "type": "class",
                    "name": "ThreadApi",
                    "description": "Encrypted thread management.",
                    "methods": [
                        {
                            "name": "createThread",
                            "description": "Creates a new thread for a group of users.",
                            "snippet": "async createThread(contextId: string, users: UserWithPubKey[]): Promise<string>",
                            "params": [
                                {"name": "contextId", "description": "Owning context", "type": {"name": "string"}},
                                {"name": "users", "description": "Thread members", "type": {"name": "UserWithPubKey[]"}},
                            ],
                            "returns": [{"type": {"name": "string"}, "description": "Thread id"}],
                        }
                    ],
                },
                {
                    "type": "type",
                    "name": "UserWithPubKey",
                    "description": "User id paired with a public key.",
                    "snippet": "type UserWithPubKey = { userId: string; pubKey: string }",
                    "fields": [
                        {"name": "userId", "description": "User identifier", "type": {"name": "string"}},
                        {"name": "pubKey", "description": "Public key", "type": {"name": "string"}},
                    ],
                },
            ],
        }
    ],
}

CONNECT_ID = "Core-method-endpoint-connect"
SETUP_ID = "Core-method-endpoint-setup"
CREATE_THREAD_ID = "Threads-method-threadapi-createthread"


@pytest.fixture
def api_spec_json() -> str:
    """Provide a small JSON API spec with two namespaces."""
    return json.dumps(SAMPLE_API_SPEC)


@pytest.fixture
def parsed_items(api_spec_json: str) -> list[ParsedContent]:
    """Provide every item parsed from the sample spec."""
    return JsonApiParser(source_file="spec/out.js.json").parse_spec(api_spec_json)


@pytest.fixture
def method_items(parsed_items: list[ParsedContent]) -> list[ParsedContent]:
    """Provide the three method items: Endpoint.setup, Endpoint.connect, ThreadApi.createThread."""
    return [item for item in parsed_items if item.type == "method"]


@pytest.fixture
def make_chunk():
    """
    Factory for standalone chunks.

    Returns:
        Callable: make_chunk(chunk_id, content, **metadata) -> DocumentChunk
    """

    def _make(chunk_id: str, content: str = "Some documentation content.", **metadata) -> DocumentChunk:
        fields = {"type": "method", "namespace": "Core", "source_file": "spec/out.js.json", **metadata}
        return DocumentChunk(id=chunk_id, content=content, metadata=ChunkMetadata(**fields))

    return _make


@pytest.fixture
def tracker():
    """
    Create in-memory embedding tracker.

    Yields:
        EmbeddingTracker: Tracker on an ephemeral SQLite database
    """
    instance = EmbeddingTracker(TrackerSettings(db_path=":memory:"))
    yield instance
    instance.close()


@pytest.fixture
def embedding_settings() -> EmbeddingSettings:
    """Provide small-batch embedding settings that never back off."""
    return EmbeddingSettings(
        dimensions=VECTOR_SIZE,
        batch_size=2,
        concurrency=2,
        max_retries=1,
        retry_initial_wait=0.0,
        retry_max_wait=0.0,
    )


@pytest.fixture
def fake_provider(embedding_settings: EmbeddingSettings) -> LangChainEmbeddingProvider:
    """Provide a deterministic provider: equal texts always get equal vectors."""
    return LangChainEmbeddingProvider(
        DeterministicFakeEmbedding(size=VECTOR_SIZE),
        model_name="fake-embedding",
        settings=embedding_settings,
    )


@pytest.fixture
def vector_store_settings() -> VectorStoreSettings:
    """Provide local-mode Qdrant settings."""
    return VectorStoreSettings(
        store_type="memory",
        collection_name="test-docs",
        vector_size=VECTOR_SIZE,
        upsert_batch_size=2,
    )


@pytest.fixture
def vector_store(vector_store_settings: VectorStoreSettings):
    """
    Create initialized in-process Qdrant store.

    Yields:
        QdrantVectorStore: Store backed by QdrantClient(location=":memory:")
    """
    store = QdrantVectorStore(vector_store_settings)
    store.initialize()
    yield store
    store.close()


@pytest.fixture
def settings(
    embedding_settings: EmbeddingSettings,
    vector_store_settings: VectorStoreSettings,
) -> Settings:
    """Provide settings for method-level chunking without merging."""
    return Settings(
        chunking=ChunkingSettings(strategy="method-level", merge_related=False),
        embeddings=embedding_settings,
        tracker=TrackerSettings(db_path=":memory:"),
        vector_store=vector_store_settings,
        search=SearchSettings(),
    )


@pytest.fixture
def pipeline(settings: Settings, tracker: EmbeddingTracker, vector_store: QdrantVectorStore, fake_provider):
    """
    Create initialized pipeline over in-memory collaborators.

    Yields:
        IndexingPipeline: Ready pipeline, shut down after the test
    """
    instance = IndexingPipeline(
        settings=settings,
        tracker=tracker,
        vector_store=vector_store,
        embedding_provider=fake_provider,
    )
    instance.init()
    yield instance
    instance.shutdown()


@pytest.fixture
def temp_dir():
    """
    Create a temporary directory for test files.

    Yields:
        Path: Path to temporary directory
    """
    temp_path = Path(tempfile.mkdtemp(prefix="docindex_test_"))
    yield temp_path

    # Cleanup
    if temp_path.exists():
        shutil.rmtree(temp_path, ignore_errors=True)
