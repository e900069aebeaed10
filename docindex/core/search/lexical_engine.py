"""
Lexical search engine.

In-memory rank-and-retrieve over chunk text, independent of the vector
path. Chunks are staged per (language, namespace), then indexed in one
build. Language acts as a soft filter with a fixed compatibility relation
between related languages.

Dependencies: docindex.core.search backends
System role: Keyword retrieval alongside semantic search
"""

import logging
import threading
from collections import Counter
from dataclasses import dataclass
from typing import Protocol

from docindex.configs.search import SearchSettings
from docindex.core.search.bm25_index import BM25Index
from docindex.core.search.keyword_index import KeywordIndex
from docindex.models.chunk import DocumentChunk
from docindex.models.search import LexicalIndexStats, LexicalSearchResult

logger = logging.getLogger(__name__)

COMPATIBLE_LANGUAGES: set[frozenset[str]] = {
    frozenset({"typescript", "javascript"}),
    frozenset({"java", "kotlin"}),
    frozenset({"csharp", "dotnet"}),
}


def is_language_compatible(requested: str, candidate: str) -> bool:
    """Same language, or one of the fixed compatible pairs."""
    if requested == candidate:
        return True
    return frozenset({requested, candidate}) in COMPATIBLE_LANGUAGES


class LexicalBackend(Protocol):
    name: str

    def add_document(self, doc_id: str, text: str) -> None: ...

    def consolidate(self) -> None: ...

    def search(self, query: str, limit: int | None = None) -> list[tuple[str, float]]: ...

    def clear(self) -> None: ...


@dataclass(frozen=True)
class IndexedDocument:
    chunk: DocumentChunk
    namespace: str
    language: str


def _index_text(chunk: DocumentChunk) -> str:
    metadata = chunk.metadata
    names = " ".join(name for name in (metadata.class_name, metadata.method_name) if name)
    return f"{names}\n\n{chunk.content}" if names else chunk.content


class LexicalSearchEngine:
    """
    Lexical index over chunks with a BM25 or keyword-overlap backend.

    Mutation and search share one lock so a rebuild never interleaves with
    a query.
    """

    def __init__(self, backend: str | None = None, settings: SearchSettings | None = None) -> None:
        """
        Initialize the engine.

        Args:
            backend: 'bm25' or 'keyword', defaults to settings.backend
            settings: Ranking parameters and result limits

        Raises:
            ValueError: When backend is not a known backend name
        """
        self._settings = settings or SearchSettings()
        self._backend_name = backend or self._settings.backend
        self._backend = self._create_backend(self._backend_name)
        self._lock = threading.RLock()
        self._staged: dict[tuple[str, str], list[DocumentChunk]] = {}
        self._documents: dict[str, IndexedDocument] = {}

    def _create_backend(self, name: str) -> LexicalBackend:
        if name == "bm25":
            return BM25Index(k1=self._settings.bm25_k1, b=self._settings.bm25_b)
        if name == "keyword":
            return KeywordIndex()
        raise ValueError(f"Invalid lexical backend: {name}. Must be 'bm25' or 'keyword'.")

    @property
    def backend(self) -> str:
        return self._backend_name

    def add_namespace(self, namespace: str, chunks: list[DocumentChunk], language: str | None = None) -> None:
        """
        Stage the chunks of one namespace for the next build.

        Staging the same (language, namespace) again replaces its chunks.
        """
        language = language or self._settings.default_language
        with self._lock:
            self._staged[(language, namespace)] = list(chunks)

    def add_chunks(self, chunks: list[DocumentChunk], language: str | None = None) -> None:
        """Stage chunks grouped by their own namespace."""
        grouped: dict[str, list[DocumentChunk]] = {}
        for chunk in chunks:
            grouped.setdefault(chunk.metadata.namespace, []).append(chunk)
        with self._lock:
            for namespace, members in grouped.items():
                self.add_namespace(namespace, members, language)

    def build_indices(self) -> None:
        """Index every staged chunk into a fresh backend index."""
        with self._lock:
            self._backend.clear()
            self._documents.clear()
            for (language, namespace), chunks in self._staged.items():
                for chunk in chunks:
                    doc_id = f"{language}:{chunk.id}"
                    self._documents[doc_id] = IndexedDocument(chunk=chunk, namespace=namespace, language=language)
                    self._backend.add_document(doc_id, _index_text(chunk))
            self._backend.consolidate()

        logger.info(
            f"{__name__}:build_indices - Built lexical index",
            extra={"backend": self._backend_name, "documents": len(self._documents), "namespaces": len(self._staged)},
        )

    def consolidate(self) -> None:
        self.build_indices()

    def search(self, query: str, language: str | None = None, limit: int | None = None) -> list[LexicalSearchResult]:
        """
        Rank indexed chunks against a query.

        BM25 takes its top candidate_pool hits before the language filter;
        the keyword backend filters over every match.

        Args:
            query: Free-text query
            language: Soft filter on indexed language
            limit: Maximum number of results (defaults to result_limit)

        Returns:
            list[LexicalSearchResult]: Results with descending score
        """
        limit = limit or self._settings.result_limit
        pool = self._settings.candidate_pool if self._backend_name == "bm25" else None

        with self._lock:
            hits = self._backend.search(query, pool)
            results = []
            for doc_id, score in hits:
                document = self._documents.get(doc_id)
                if document is None:
                    continue
                if language and not is_language_compatible(language, document.language):
                    continue
                results.append(
                    LexicalSearchResult(
                        chunk=document.chunk,
                        score=score,
                        namespace=document.namespace,
                        language=document.language,
                        title=document.chunk.title,
                    )
                )
                if len(results) >= limit:
                    break

        logger.debug(f"{__name__}:search - {len(results)} results", extra={"query": query, "language": language})
        return results

    def search_methods(self, query: str, class_name: str | None = None, limit: int = 10) -> list[LexicalSearchResult]:
        candidates = self.search(query, limit=self._settings.candidate_pool)
        return [
            result
            for result in candidates
            if result.chunk.metadata.type == "method"
            and (class_name is None or result.chunk.metadata.class_name == class_name)
        ][:limit]

    def search_classes(self, query: str, namespace: str | None = None, limit: int = 10) -> list[LexicalSearchResult]:
        candidates = self.search(query, limit=self._settings.candidate_pool)
        return [
            result
            for result in candidates
            if result.chunk.metadata.type == "class" and (namespace is None or result.namespace == namespace)
        ][:limit]

    def get_stats(self) -> LexicalIndexStats:
        with self._lock:
            by_type = Counter(document.chunk.metadata.type for document in self._documents.values())
            return LexicalIndexStats(
                namespaces=len(self._staged),
                documents=len(self._documents),
                methods=by_type.get("method", 0),
                classes=by_type.get("class", 0),
                languages=sorted({language for language, _ in self._staged}),
                by_type=dict(by_type),
                backend=self._backend_name,
            )

    def clear(self) -> None:
        with self._lock:
            self._staged.clear()
            self._documents.clear()
            self._backend.clear()
