"""
Keyword overlap index.

Postings of every word of three or more characters. A document scores the
fraction of the query's qualifying words it contains.

Dependencies: None
System role: Fallback lexical backend
"""

from collections import defaultdict

from docindex.core.search.tokenizer import tokenize

MIN_WORD_LENGTH = 3


def _words(text: str) -> list[str]:
    return [word for word in tokenize(text) if len(word) >= MIN_WORD_LENGTH]


class KeywordIndex:
    """Word to document postings with overlap scoring."""

    name = "keyword"

    def __init__(self) -> None:
        self._postings: dict[str, set[str]] = defaultdict(set)
        self._documents: set[str] = set()

    def __len__(self) -> int:
        return len(self._documents)

    def add_document(self, doc_id: str, text: str) -> None:
        self._documents.add(doc_id)
        for word in _words(text):
            self._postings[word].add(doc_id)

    def consolidate(self) -> None:
        """Postings are maintained on insert; nothing to do."""

    def search(self, query: str, limit: int | None = None) -> list[tuple[str, float]]:
        words = list(dict.fromkeys(_words(query)))
        if not words:
            return []
        matched: dict[str, int] = defaultdict(int)
        for word in words:
            for doc_id in self._postings.get(word, ()):
                matched[doc_id] += 1
        ranked = sorted(
            ((doc_id, count / len(words)) for doc_id, count in matched.items()),
            key=lambda hit: (-hit[1], hit[0]),
        )
        return ranked if limit is None else ranked[:limit]

    def clear(self) -> None:
        self._postings.clear()
        self._documents.clear()
