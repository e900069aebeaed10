"""
Chunk optimizer.

Runs five ordered passes over a chunk set: deduplication, oversized split,
merge of related small chunks, quality scoring, and priority sort. Each of
the first four passes can be toggled.

Dependencies: pydantic
System role: Final chunking stage before embedding tracking
"""

import logging
import re

from pydantic import BaseModel, Field, model_validator

from docindex.configs.chunking import ChunkingSettings
from docindex.core.chunking.text_utils import (
    ANY_HEADING_PATTERN,
    PARAGRAPH_BREAK_PATTERN,
    jaccard,
    normalized_hash,
    overlap_tail,
)
from docindex.models.chunk import QUALITY_TAG_PREFIX, DocumentChunk, unique_ordered

logger = logging.getLogger(__name__)

DUPLICATE_THRESHOLD = 0.9
RELATED_THRESHOLD = 0.3
MERGE_SIZE_RATIO = 0.6
MERGE_SEPARATOR = "\n\n---\n\n"


class OptimizationOptions(BaseModel):
    """Size limits and pass toggles for the optimizer."""

    max_chunk_size: int = Field(default=1500, gt=0)
    overlap_size: int = Field(default=200, ge=0)
    deduplication: bool = True
    split_oversized: bool = True
    merge_related: bool = True
    quality_scoring: bool = True

    @model_validator(mode="after")
    def _check_overlap(self) -> "OptimizationOptions":
        if self.overlap_size * 2 >= self.max_chunk_size:
            raise ValueError("overlap_size must be smaller than half of max_chunk_size")
        return self

    @classmethod
    def from_settings(cls, settings: ChunkingSettings) -> "OptimizationOptions":
        return cls(
            max_chunk_size=settings.max_chunk_size,
            overlap_size=settings.overlap_size,
            deduplication=settings.deduplication,
            split_oversized=settings.split_oversized,
            merge_related=settings.merge_related,
            quality_scoring=settings.quality_scoring,
        )


class QualityScore(BaseModel):
    """Heuristic quality breakdown, every field in [0, 1]."""

    overall: float
    completeness: float
    specificity: float
    usefulness: float
    clarity: float


def _clamp(value: float) -> float:
    return max(0.0, min(value, 1.0))


def score_quality(chunk: DocumentChunk) -> QualityScore:
    """
    Score a chunk on completeness, specificity, usefulness, and clarity.

    Args:
        chunk: Chunk to score

    Returns:
        QualityScore: Sub-scores and their mean
    """
    content = chunk.content
    metadata = chunk.metadata

    completeness = 0.5
    if "```" in content:
        completeness += 0.2
    if "##" in content:
        completeness += 0.1
    if "Parameters" in content or "Returns" in content:
        completeness += 0.1
    if "Common Issues" in content or "Troubleshooting" in content:
        completeness += 0.1

    specificity = 0.3
    if metadata.type == "method":
        specificity += 0.3
    if "example" in content or "Example" in content:
        specificity += 0.2
    if len(content.split(".")) > 5:
        specificity += 0.1
    if metadata.use_cases:
        specificity += 0.1

    usefulness = 0.4
    usefulness += {"critical": 0.3, "high": 0.2, "medium": 0.1}.get(metadata.importance, 0.0)
    if "await" in content or "async" in content:
        usefulness += 0.1
    if "try" in content or "catch" in content or "error" in content:
        usefulness += 0.1
    if metadata.common_mistakes:
        usefulness += 0.1

    clarity = 0.5
    headers = len(re.findall(r"^#{1,6}\s+", content, re.MULTILINE))
    clarity += min(headers * 0.1, 0.3)
    if 200 < len(content) < 2000:
        clarity += 0.1
    if "This" in content or "Here" in content:
        clarity += 0.1

    parts = [_clamp(completeness), _clamp(specificity), _clamp(usefulness), _clamp(clarity)]
    return QualityScore(
        overall=_clamp(sum(parts) / len(parts)),
        completeness=parts[0],
        specificity=parts[1],
        usefulness=parts[2],
        clarity=parts[3],
    )


class ChunkOptimizer:
    """Deduplicate, resize, score, and order chunks."""

    def __init__(self, options: OptimizationOptions | None = None) -> None:
        self._options = options or OptimizationOptions()

    def optimize(self, chunks: list[DocumentChunk], options: OptimizationOptions | None = None) -> list[DocumentChunk]:
        """
        Run the enabled passes in order.

        Args:
            chunks: Chunks to optimize
            options: Per-call options, defaults to the optimizer's options

        Returns:
            list[DocumentChunk]: Optimized chunks in priority order
        """
        opts = options or self._options
        result = list(chunks)

        if opts.deduplication:
            result = self.remove_duplicates(result)
        if opts.split_oversized:
            result = self.split_oversized(result, opts)
        if opts.merge_related:
            result = self.merge_related(result, opts)
        if opts.quality_scoring:
            result = [self._with_quality(chunk) for chunk in result]
        result = self.sort_by_priority(result)

        logger.info(
            f"{__name__}:optimize - Optimized chunks",
            extra={"input_chunks": len(chunks), "output_chunks": len(result)},
        )
        return result

    @staticmethod
    def remove_duplicates(chunks: list[DocumentChunk]) -> list[DocumentChunk]:
        """Drop near-duplicates, keeping the higher-importance copy in the earlier slot."""
        unique: list[DocumentChunk] = []
        hashes: list[str] = []

        for chunk in chunks:
            content_hash = normalized_hash(chunk.content)
            for index, existing in enumerate(unique):
                if hashes[index] == content_hash or jaccard(chunk.content, existing.content) > DUPLICATE_THRESHOLD:
                    if chunk.metadata.importance_rank > existing.metadata.importance_rank:
                        unique[index] = chunk
                        hashes[index] = content_hash
                    break
            else:
                unique.append(chunk)
                hashes.append(content_hash)

        if len(unique) < len(chunks):
            logger.debug(f"{__name__}:remove_duplicates - Removed {len(chunks) - len(unique)} duplicates")
        return unique

    def split_oversized(self, chunks: list[DocumentChunk], options: OptimizationOptions) -> list[DocumentChunk]:
        result = []
        for chunk in chunks:
            if len(chunk.content) <= options.max_chunk_size:
                result.append(chunk)
            else:
                result.extend(self.split_chunk(chunk, options))
        return result

    def split_chunk(self, chunk: DocumentChunk, options: OptimizationOptions) -> list[DocumentChunk]:
        """
        Split one chunk at logical boundaries into pieces of at most max_chunk_size.

        Each piece after the first starts with up to overlap_size characters
        from the end of the piece before it.
        """
        max_size, overlap = options.max_chunk_size, options.overlap_size
        pieces: list[str] = []
        current = ""

        for section in self._logical_boundaries(chunk.content):
            candidate = f"{current}\n\n{section}" if current else section
            if len(candidate) <= max_size:
                current = candidate
                continue
            if current:
                pieces.append(current)
            current = overlap_tail(current, overlap) + section
            if len(current) > max_size:
                fragments = self._split_large_section(current, max_size, overlap)
                pieces.extend(fragments[:-1])
                current = fragments[-1] if fragments else ""

        if current.strip():
            pieces.append(current)
        if not pieces:
            return [chunk]

        return [
            DocumentChunk(
                id=f"{chunk.id}-part-{index}",
                content=piece,
                metadata=chunk.metadata.with_tags("sub-chunk", f"part-{index}"),
            )
            for index, piece in enumerate(pieces)
        ]

    @staticmethod
    def _logical_boundaries(content: str) -> list[str]:
        starts = [match.start() for match in ANY_HEADING_PATTERN.finditer(content)]
        sections = []
        last = 0
        for start in starts:
            if start > last:
                section = content[last:start].strip()
                if section:
                    sections.append(section)
                last = start
        remaining = content[last:].strip()
        if remaining:
            sections.append(remaining)

        if len(sections) <= 1:
            return [p for p in PARAGRAPH_BREAK_PATTERN.split(content) if p.strip()]
        return sections

    @staticmethod
    def _split_large_section(text: str, max_size: int, overlap: int) -> list[str]:
        pieces = []
        remaining = text
        while len(remaining) > max_size:
            window = remaining[:max_size]
            sentence_end = window.rfind(". ")
            line_end = window.rfind("\n")
            if sentence_end > max_size / 2:
                cut = sentence_end + 1
            elif line_end > max_size / 2:
                cut = line_end
            else:
                cut = max_size
            piece = remaining[:cut].strip()
            if piece:
                pieces.append(piece)
            remaining = overlap_tail(piece, overlap) + remaining[cut:].strip()
        if remaining.strip():
            pieces.append(remaining.strip())
        return pieces

    def merge_related(self, chunks: list[DocumentChunk], options: OptimizationOptions) -> list[DocumentChunk]:
        """Greedily merge small related chunks; each chunk is merged at most once."""
        result = []
        processed: set[str] = set()
        threshold = options.max_chunk_size * MERGE_SIZE_RATIO

        for chunk in chunks:
            if chunk.id in processed:
                continue
            processed.add(chunk.id)

            group = [chunk]
            merged_length = len(chunk.content)
            if merged_length <= threshold:
                for other in chunks:
                    if other.id in processed or len(other.content) > threshold:
                        continue
                    if not (self._is_related(chunk, other) and self._is_similar(chunk, other)):
                        continue
                    length = merged_length + len(MERGE_SEPARATOR) + len(other.content)
                    if length > options.max_chunk_size:
                        continue
                    group.append(other)
                    processed.add(other.id)
                    merged_length = length

            result.append(self._merge(group) if len(group) > 1 else chunk)
        return result

    @staticmethod
    def _is_related(a: DocumentChunk, b: DocumentChunk) -> bool:
        ma, mb = a.metadata, b.metadata
        if ma.namespace == mb.namespace and ma.class_name == mb.class_name:
            return True
        if mb.qualified_name in ma.related_methods or ma.qualified_name in mb.related_methods:
            return True
        if len(set(ma.tags) & set(mb.tags)) >= 2:
            return True
        return jaccard(a.content, b.content) > RELATED_THRESHOLD

    @staticmethod
    def _is_similar(a: DocumentChunk, b: DocumentChunk) -> bool:
        if a.metadata.class_name == b.metadata.class_name:
            return True
        if len(set(a.metadata.tags) & set(b.metadata.tags)) >= 3:
            return True
        return jaccard(a.content, b.content) > RELATED_THRESHOLD

    @staticmethod
    def _merge(group: list[DocumentChunk]) -> DocumentChunk:
        primary = group[0]

        def union(field: str) -> list[str]:
            return unique_ordered([value for chunk in group for value in getattr(chunk.metadata, field)])

        metadata = primary.metadata.model_copy(
            update={
                field: union(field)
                for field in ("tags", "related_methods", "dependencies", "use_cases", "common_mistakes")
            }
        )
        return DocumentChunk(
            id=f"merged-{primary.id}-{len(group)}",
            content=MERGE_SEPARATOR.join(chunk.content for chunk in group),
            metadata=metadata,
        )

    @staticmethod
    def _with_quality(chunk: DocumentChunk) -> DocumentChunk:
        score = score_quality(chunk)
        tags = [tag for tag in chunk.metadata.tags if not tag.startswith(QUALITY_TAG_PREFIX)]
        tags.append(f"{QUALITY_TAG_PREFIX}{score.overall:.2f}")
        return chunk.model_copy(update={"metadata": chunk.metadata.model_copy(update={"tags": tags})})

    @staticmethod
    def sort_by_priority(chunks: list[DocumentChunk]) -> list[DocumentChunk]:
        """Stable sort by importance rank, then quality, both descending."""
        return sorted(chunks, key=lambda chunk: (-chunk.metadata.importance_rank, -chunk.quality))
