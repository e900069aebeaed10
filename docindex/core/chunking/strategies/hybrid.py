"""
Hybrid chunking.

Chooses the best-suited strategy per item from its structure, then
post-processes the produced chunks: cross-references between related
pieces, size normalisation, and descriptive tags.

Dependencies: re (stdlib)
System role: Default strategy of the chunking pipeline
"""

import re
from dataclasses import dataclass
from typing import Literal

from docindex.core.chunking.strategies.base import ChunkingStrategy
from docindex.core.chunking.strategies.context_aware import ContextAwareStrategy
from docindex.core.chunking.strategies.hierarchical import HierarchicalStrategy
from docindex.core.chunking.strategies.method_level import MethodLevelStrategy
from docindex.core.chunking.text_utils import (
    ANY_HEADING_PATTERN,
    PARAGRAPH_BREAK_PATTERN,
    count_methods,
    word_set,
)
from docindex.models.chunk import DocumentChunk, unique_ordered
from docindex.models.parsed_content import ParsedContent

MIN_SIZE = 200
MAX_SIZE = 2000
MAX_RELATED = 3
RELEVANCE_THRESHOLD = 0.3
STEP_PATTERN = re.compile(r"step \d+|first|then|next|finally", re.IGNORECASE)


@dataclass
class ContentProfile:
    method_count: int
    section_count: int
    has_strong_hierarchy: bool
    complexity: Literal["low", "medium", "high"]
    primary_focus: Literal["reference", "tutorial", "mixed"]


def analyze_content(item: ParsedContent) -> ContentProfile:
    text = item.content
    method_count = count_methods(text)
    section_count = len(ANY_HEADING_PATTERN.findall(text))
    h1 = len(re.findall(r"^#\s+", text, re.MULTILINE))
    h2 = len(re.findall(r"^#{2}\s+", text, re.MULTILINE))
    h3 = len(re.findall(r"^#{3}\s+", text, re.MULTILINE))

    if len(text) > 3000 or method_count > 8 or section_count > 6:
        complexity = "high"
    elif len(text) > 1500 or method_count > 3 or section_count > 3:
        complexity = "medium"
    else:
        complexity = "low"

    if item.type == "example" or STEP_PATTERN.search(text):
        focus = "tutorial"
    elif "```" in text and method_count > 0:
        focus = "mixed"
    else:
        focus = "reference"

    return ContentProfile(
        method_count=method_count,
        section_count=section_count,
        has_strong_hierarchy=h1 > 0 and h2 > 1 and (h3 > 0 or section_count > 5),
        complexity=complexity,
        primary_focus=focus,
    )


def relevance_score(a: DocumentChunk, b: DocumentChunk) -> float:
    """Heuristic relatedness of two chunks, capped at 1.0."""
    score = 0.0
    if a.metadata.namespace == b.metadata.namespace:
        score += 0.3
    if a.metadata.class_name == b.metadata.class_name:
        score += 0.4
    shared_methods = set(a.metadata.related_methods) & set(b.metadata.related_methods)
    score += len(shared_methods) * 0.1
    score += len(set(a.metadata.tags) & set(b.metadata.tags)) * 0.05

    words_a, words_b = word_set(a.content), word_set(b.content)
    union = words_a | words_b
    if union:
        score += len(words_a & words_b) / len(union) * 0.2
    return min(score, 1.0)


class HybridStrategy(ChunkingStrategy):
    """Dispatch to method-level, context-aware, or hierarchical per item."""

    name = "hybrid"

    def __init__(self) -> None:
        self._method_level = MethodLevelStrategy()
        self._context_aware = ContextAwareStrategy()
        self._hierarchical = HierarchicalStrategy()

    def select_strategy(self, item: ParsedContent) -> ChunkingStrategy:
        profile = analyze_content(item)
        if item.type == "method":
            return self._method_level
        if item.type == "class" and profile.method_count > 5:
            return self._context_aware
        if profile.has_strong_hierarchy:
            return self._hierarchical
        if item.type == "example" and profile.section_count > 3:
            return self._context_aware
        return self._method_level

    def should_split(self, item: ParsedContent) -> bool:
        return self.select_strategy(item).should_split(item)

    def split_logic(self, item: ParsedContent) -> list[DocumentChunk]:
        chunks = self.select_strategy(item).split_logic(item)
        chunks = self._add_cross_references(chunks)
        chunks = self._optimize_sizes(chunks)
        return self._tag(item, chunks)

    def keep_whole(self, item: ParsedContent) -> DocumentChunk:
        return self._tag(item, [self.select_strategy(item).keep_whole(item)])[0]

    @staticmethod
    def _tag(item: ParsedContent, chunks: list[DocumentChunk]) -> list[DocumentChunk]:
        profile = analyze_content(item)
        return [
            chunk.with_tags("hybrid-chunked", f"complexity-{profile.complexity}", f"focus-{profile.primary_focus}")
            for chunk in chunks
        ]

    @staticmethod
    def _add_cross_references(chunks: list[DocumentChunk]) -> list[DocumentChunk]:
        linked = []
        for chunk in chunks:
            scored = [
                (relevance_score(chunk, other), other)
                for other in chunks
                if other.id != chunk.id
            ]
            related = sorted(
                (pair for pair in scored if pair[0] > RELEVANCE_THRESHOLD),
                key=lambda pair: pair[0],
                reverse=True,
            )[:MAX_RELATED]
            if not related:
                linked.append(chunk)
                continue
            links = "".join(f"- [{other.title}](#{other.id})\n" for _, other in related)
            linked.append(chunk.model_copy(update={"content": f"{chunk.content}\n\n## Related Sections\n\n{links}"}))
        return linked

    def _optimize_sizes(self, chunks: list[DocumentChunk]) -> list[DocumentChunk]:
        optimized = []
        index = 0
        while index < len(chunks):
            chunk = chunks[index]
            if len(chunk.content) < MIN_SIZE and index + 1 < len(chunks):
                following = chunks[index + 1]
                if (
                    len(chunk.content) + len(following.content) <= MAX_SIZE
                    and chunk.metadata.namespace == following.metadata.namespace
                    and chunk.metadata.class_name == following.metadata.class_name
                ):
                    optimized.append(self._merge_pair(chunk, following))
                    index += 2
                    continue
            if len(chunk.content) > MAX_SIZE:
                optimized.extend(self._split_large(chunk))
            else:
                optimized.append(chunk)
            index += 1
        return optimized

    @staticmethod
    def _merge_pair(first: DocumentChunk, second: DocumentChunk) -> DocumentChunk:
        metadata = first.metadata.model_copy(
            update={
                "tags": unique_ordered([*first.metadata.tags, *second.metadata.tags]),
                "related_methods": unique_ordered([*first.metadata.related_methods, *second.metadata.related_methods]),
            }
        )
        return DocumentChunk(
            id=f"{first.id}-merged",
            content=f"{first.content}\n\n---\n\n{second.content}",
            metadata=metadata,
        )

    @staticmethod
    def _split_large(chunk: DocumentChunk) -> list[DocumentChunk]:
        content = chunk.content
        if ANY_HEADING_PATTERN.search(content):
            parts = re.split(r"(?=^#{1,6}\s+)", content, flags=re.MULTILINE)
            joiner = ""
        else:
            parts = PARAGRAPH_BREAK_PATTERN.split(content)
            joiner = "\n\n"

        pieces = []
        current = ""
        for part in parts:
            candidate = f"{current}{joiner if current else ''}{part}"
            if len(candidate) <= MAX_SIZE:
                current = candidate
                continue
            if current.strip():
                pieces.append(current)
            current = part
        if current.strip():
            pieces.append(current)

        if not pieces:
            return [chunk]
        return [
            DocumentChunk(
                id=f"{chunk.id}-part-{index}",
                content=piece.strip(),
                metadata=chunk.metadata.with_tags("sub-chunk", f"part-{index}"),
            )
            for index, piece in enumerate(pieces)
        ]
