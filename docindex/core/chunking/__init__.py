"""Chunk construction, enhancement, and optimization."""

from docindex.core.chunking.builder import ChunkBuilder, ChunkingPipeline, chunk_statistics, validate_chunks
from docindex.core.chunking.enhancer import ChunkEnhancer, EnhancementOptions
from docindex.core.chunking.optimizer import ChunkOptimizer, OptimizationOptions, QualityScore, score_quality

__all__ = [
    "ChunkBuilder",
    "ChunkEnhancer",
    "ChunkOptimizer",
    "ChunkingPipeline",
    "EnhancementOptions",
    "OptimizationOptions",
    "QualityScore",
    "chunk_statistics",
    "score_quality",
    "validate_chunks",
]
