"""Chunking strategies and the registry that names them."""

from docindex.core.chunking.strategies.base import (
    ChunkingStrategy,
    StrategyRegistry,
    chunk_id,
    render_item,
    single_chunk,
)
from docindex.core.chunking.strategies.context_aware import ContextAwareStrategy
from docindex.core.chunking.strategies.hierarchical import HierarchicalStrategy
from docindex.core.chunking.strategies.hybrid import HybridStrategy
from docindex.core.chunking.strategies.method_level import MethodLevelStrategy


def default_registry() -> StrategyRegistry:
    """Registry holding the four built-in strategies."""
    return StrategyRegistry(
        {
            strategy.name: strategy
            for strategy in (
                MethodLevelStrategy(),
                ContextAwareStrategy(),
                HierarchicalStrategy(),
                HybridStrategy(),
            )
        }
    )


__all__ = [
    "ChunkingStrategy",
    "ContextAwareStrategy",
    "HierarchicalStrategy",
    "HybridStrategy",
    "MethodLevelStrategy",
    "StrategyRegistry",
    "chunk_id",
    "default_registry",
    "render_item",
    "single_chunk",
]
