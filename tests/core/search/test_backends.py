"""
Test suite for the lexical backends.

Tests tokenization, BM25 statistics and ranking, and keyword-overlap
scoring.

System role: Verification of lexical ranking primitives
"""

import math

import pytest

from docindex.core.search.bm25_index import BM25Index
from docindex.core.search.keyword_index import KeywordIndex
from docindex.core.search.tokenizer import tokenize


class TestTokenize:
    """Test suite for tokenize."""

    def test_tokenize_should_lowercase_and_split_on_non_word_characters(self) -> None:
        """Should keep word characters and apostrophes only."""
        assert tokenize("Endpoint.connect(userPrivKey) isn't_ready!") == [
            "endpoint",
            "connect",
            "userprivkey",
            "isn't_ready",
        ]


class TestBM25Index:
    """Test suite for BM25Index."""

    @pytest.fixture
    def index(self) -> BM25Index:
        """Provide index over three small documents."""
        index = BM25Index()
        index.add_document("connect", "connect opens a session to the backend backend")
        index.add_document("setup", "setup loads the library assets")
        index.add_document("thread", "create a thread for users of the backend")
        index.consolidate()
        return index

    def test_idf_should_use_smoothed_formula(self, index: BM25Index) -> None:
        """Should compute ln(1 + (N - df + 0.5) / (df + 0.5))."""
        assert index.idf("setup") == pytest.approx(math.log(1 + 2.5 / 1.5))
        assert index.idf("backend") == pytest.approx(math.log(1 + 1.5 / 2.5))
        assert index.idf("missing") == pytest.approx(math.log(1 + 3.5 / 0.5))

    def test_idf_should_stay_positive_for_common_terms(self, index: BM25Index) -> None:
        """Should never go negative, even for a term in every document."""
        assert index.idf("the") > 0

    def test_search_should_rank_best_match_first(self, index: BM25Index) -> None:
        """Should rank documents containing rarer and more frequent query terms higher."""
        # Act
        hits = index.search("connect backend")

        # Assert
        assert hits[0][0] == "connect"
        assert [doc_id for doc_id, _ in hits] == ["connect", "thread"]
        assert hits[0][1] > hits[1][1] > 0

    def test_search_should_ignore_repeated_query_terms(self, index: BM25Index) -> None:
        """Should score a repeated query word once."""
        assert index.search("backend backend") == index.search("backend")

    def test_search_should_respect_limit(self, index: BM25Index) -> None:
        """Should return at most limit hits."""
        assert len(index.search("the", limit=2)) == 2

    def test_search_before_consolidate_should_return_nothing(self) -> None:
        """Should need consolidation before answering queries."""
        # Arrange
        index = BM25Index()
        index.add_document("a", "connect")

        # Assert
        assert index.search("connect") == []

    def test_clear_should_reset_index(self, index: BM25Index) -> None:
        """Should forget documents and statistics."""
        # Act
        index.clear()

        # Assert
        assert len(index) == 0
        assert index.search("connect") == []


class TestKeywordIndex:
    """Test suite for KeywordIndex."""

    @pytest.fixture
    def index(self) -> KeywordIndex:
        """Provide keyword index over two documents."""
        index = KeywordIndex()
        index.add_document("connect", "connect opens a session to the backend")
        index.add_document("thread", "create a thread on the backend")
        return index

    def test_score_should_be_fraction_of_matched_query_words(self, index: KeywordIndex) -> None:
        """Should divide matched words by the query's words of three or more characters."""
        # Act
        hits = dict(index.search("connect to backend"))

        # Assert
        assert hits == {"connect": 1.0, "thread": 0.5}

    def test_short_words_should_be_ignored(self, index: KeywordIndex) -> None:
        """Should return nothing for queries made of words shorter than three characters."""
        assert index.search("a to on") == []

    def test_ties_should_order_by_document_id(self, index: KeywordIndex) -> None:
        """Should break equal scores by id for stable output."""
        assert [doc_id for doc_id, _ in index.search("the backend")] == ["connect", "thread"]
