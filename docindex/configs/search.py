"""
Lexical search configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Lexical search backend selection
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from docindex.configs.base import BaseSettings


class SearchSettings(BaseSettings):
    """Lexical search engine configuration."""

    model_config = SettingsConfigDict(env_prefix="DOCINDEX_SEARCH_")

    backend: Literal["bm25", "keyword"] = Field(
        default="bm25",
        description="Ranking backend: 'bm25' or the 'keyword' overlap fallback",
    )
    default_language: str = Field(default="typescript", description="Language assigned to indexed chunks")
    candidate_pool: int = Field(default=15, ge=1, description="BM25 hits taken before language filtering")
    result_limit: int = Field(default=10, ge=1, description="Results returned per query")
    bm25_k1: float = Field(default=1.2, description="BM25 term frequency saturation")
    bm25_b: float = Field(default=0.75, description="BM25 length normalization")
