"""
Chunking strategy contract and registry.

A strategy decides per parsed item whether it should be split and, if so,
how. Items a strategy leaves whole are rendered by render_item.

Dependencies: abc (stdlib)
System role: Extension point of the chunk builder
"""

from abc import ABC, abstractmethod
from typing import Any

from docindex.core.chunking.text_utils import slugify
from docindex.core.exceptions import UnknownStrategyError
from docindex.models.chunk import DocumentChunk, unique_ordered
from docindex.models.parsed_content import ParsedContent


def chunk_id(item: ParsedContent, suffix: str | None = None) -> str:
    """
    Deterministic chunk id for an item.

    Args:
        item: Parsed item the chunk derives from
        suffix: Optional discriminator for split pieces

    Returns:
        str: {namespace}-{type}-{slug(name)}[-{slug(suffix)}]
    """
    namespace = item.metadata.namespace or "general"
    base = f"{namespace}-{item.metadata.type}-{slugify(item.name)}"
    return f"{base}-{slugify(suffix)}" if suffix else base


def render_item(item: ParsedContent) -> str:
    """Render an item as one chunk: heading, description, content, examples, parameters, returns."""
    text = f"# {item.name}\n\n{item.description}\n\n{item.content}"

    if item.examples:
        text += "\n\n## Examples\n\n"
        for index, example in enumerate(item.examples, start=1):
            title = f": {example.title}" if example.title else ""
            text += f"### Example {index}{title}\n\n"
            text += f"{example.explanation}\n\n"
            text += f"```{example.language}\n{example.code}\n```\n\n"

    if item.parameters:
        text += "\n\n## Parameters\n\n"
        for param in item.parameters:
            text += f"- **{param.name}** ({param.type.render()}): {param.description}\n"

    if item.returns:
        text += "\n\n## Returns\n\n"
        for ret in item.returns:
            text += f"- **{ret.type.name}**: {ret.description}\n"

    return text


def single_chunk(item: ParsedContent) -> DocumentChunk:
    return DocumentChunk(id=chunk_id(item), content=render_item(item), metadata=item.metadata)


class ChunkingStrategy(ABC):
    """Base class for chunking strategies."""

    name: str = ""

    @abstractmethod
    def should_split(self, item: ParsedContent) -> bool:
        """Return True when the item should become several chunks."""
        ...

    @abstractmethod
    def split_logic(self, item: ParsedContent) -> list[DocumentChunk]:
        """Split an item into chunks."""
        ...

    def keep_whole(self, item: ParsedContent) -> DocumentChunk:
        """Render an item the strategy does not split."""
        return single_chunk(item)

    @staticmethod
    def derive_chunk(
        item: ParsedContent,
        content: str,
        suffix: str | None,
        tags: list[str],
        **metadata_updates: Any,
    ) -> DocumentChunk:
        """Build a chunk from an item with extra tags and metadata overrides."""
        updates = {"tags": unique_ordered([*item.metadata.tags, *tags]), **metadata_updates}
        return DocumentChunk(
            id=chunk_id(item, suffix),
            content=content,
            metadata=item.metadata.model_copy(update=updates),
        )


class StrategyRegistry:
    """Name -> strategy lookup owned by a chunk builder."""

    def __init__(self, strategies: dict[str, ChunkingStrategy] | None = None) -> None:
        self._strategies: dict[str, ChunkingStrategy] = dict(strategies or {})

    def register(self, name: str, strategy: ChunkingStrategy) -> None:
        self._strategies[name] = strategy

    def get(self, name: str) -> ChunkingStrategy:
        """
        Look up a strategy.

        Raises:
            UnknownStrategyError: When no strategy is registered under name
        """
        try:
            return self._strategies[name]
        except KeyError:
            raise UnknownStrategyError(name, available=self.names()) from None

    def names(self) -> list[str]:
        return list(self._strategies)

    def __contains__(self, name: object) -> bool:
        return name in self._strategies
