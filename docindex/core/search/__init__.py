"""Lexical search: tokenizer, BM25 and keyword backends, and the search engine."""

from docindex.core.search.bm25_index import BM25Index, BM25Stats
from docindex.core.search.keyword_index import KeywordIndex
from docindex.core.search.lexical_engine import LexicalSearchEngine, is_language_compatible
from docindex.core.search.tokenizer import tokenize

__all__ = [
    "BM25Index",
    "BM25Stats",
    "KeywordIndex",
    "LexicalSearchEngine",
    "is_language_compatible",
    "tokenize",
]
