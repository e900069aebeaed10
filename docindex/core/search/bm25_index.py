"""
BM25 index.

Okapi BM25 over tokenized chunk text with document length normalization
and the smoothed idf ln(1 + (N - df + 0.5) / (df + 0.5)), which is always
positive.

Dependencies: math (stdlib)
System role: Default lexical ranking backend
"""

import math
from collections import Counter
from dataclasses import dataclass, field

from docindex.core.search.tokenizer import tokenize


@dataclass
class BM25Stats:
    """Corpus-wide statistics computed at consolidation."""

    N: int = 0
    avgdl: float = 0.0
    df: dict[str, int] = field(default_factory=dict)


class BM25Index:
    """In-memory BM25 ranking over added documents."""

    name = "bm25"

    def __init__(self, k1: float = 1.2, b: float = 0.75) -> None:
        self.k1 = k1
        self.b = b
        self._term_freqs: dict[str, Counter[str]] = {}
        self._lengths: dict[str, int] = {}
        self._stats = BM25Stats()

    def __len__(self) -> int:
        return len(self._term_freqs)

    def add_document(self, doc_id: str, text: str) -> None:
        tokens = tokenize(text)
        self._term_freqs[doc_id] = Counter(tokens)
        self._lengths[doc_id] = len(tokens)

    def consolidate(self) -> None:
        """Recompute document frequencies and average length."""
        df: Counter[str] = Counter()
        for freqs in self._term_freqs.values():
            df.update(freqs.keys())
        total = sum(self._lengths.values())
        n = len(self._term_freqs)
        self._stats = BM25Stats(N=n, avgdl=total / n if n else 0.0, df=dict(df))

    def idf(self, term: str) -> float:
        n_q = self._stats.df.get(term, 0)
        return math.log(1.0 + (self._stats.N - n_q + 0.5) / (n_q + 0.5))

    def score(self, query_terms: list[str], doc_id: str) -> float:
        freqs = self._term_freqs[doc_id]
        avgdl = self._stats.avgdl if self._stats.avgdl > 0 else 1.0
        norm = 1.0 - self.b + self.b * (self._lengths[doc_id] / avgdl)
        total = 0.0
        for term in query_terms:
            f = freqs.get(term, 0)
            if f == 0:
                continue
            total += self.idf(term) * (f * (self.k1 + 1.0)) / (f + self.k1 * norm)
        return total

    def search(self, query: str, limit: int | None = None) -> list[tuple[str, float]]:
        """
        Rank documents against a query.

        Args:
            query: Free-text query
            limit: Maximum hits, all matching documents when None

        Returns:
            list[tuple[str, float]]: (doc_id, score) pairs with score > 0, best first
        """
        terms = list(dict.fromkeys(tokenize(query)))
        if not terms or not self._stats.N:
            return []
        hits = [(doc_id, self.score(terms, doc_id)) for doc_id in self._term_freqs]
        ranked = sorted((hit for hit in hits if hit[1] > 0), key=lambda hit: hit[1], reverse=True)
        return ranked if limit is None else ranked[:limit]

    def clear(self) -> None:
        self._term_freqs.clear()
        self._lengths.clear()
        self._stats = BM25Stats()
