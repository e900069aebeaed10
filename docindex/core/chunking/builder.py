"""
Chunk builder and chunking pipeline.

The builder turns parsed items into chunks with a named strategy and keeps
chunk ids unique within a build. The chunking pipeline chains build,
enhancement, optimization, and validation.

Dependencies: pydantic
System role: Entry point of the chunking layer
"""

import logging
import time
from collections import Counter

from docindex.configs.chunking import ChunkingSettings
from docindex.core.chunking.enhancer import ChunkEnhancer
from docindex.core.chunking.optimizer import ChunkOptimizer, OptimizationOptions
from docindex.core.chunking.strategies import ChunkingStrategy, StrategyRegistry, default_registry
from docindex.core.exceptions import ChunkValidationError
from docindex.models.chunk import DocumentChunk
from docindex.models.chunking import ChunkingResult, ChunkingRunInfo, ChunkStatistics, ValidationReport
from docindex.models.parsed_content import ParsedContent

logger = logging.getLogger(__name__)

LARGE_CHUNK_WARNING = 5000
SMALL_CHUNK_WARNING = 50
SIZE_BUCKETS: list[tuple[str, int | None]] = [
    ("0-500", 500),
    ("501-1000", 1000),
    ("1001-1500", 1500),
    ("1501-2000", 2000),
    ("2000+", None),
]


class ChunkBuilder:
    """Build chunks from parsed items with a registered strategy."""

    def __init__(self, registry: StrategyRegistry | None = None) -> None:
        self._registry = registry or default_registry()

    def register_strategy(self, name: str, strategy: ChunkingStrategy) -> None:
        self._registry.register(name, strategy)

    def available_strategies(self) -> list[str]:
        return self._registry.names()

    def build(self, items: list[ParsedContent], strategy: str) -> list[DocumentChunk]:
        """
        Build chunks for every item.

        Args:
            items: Parsed documentation items
            strategy: Registered strategy name

        Returns:
            list[DocumentChunk]: Chunks with ids unique within this build

        Raises:
            UnknownStrategyError: When strategy is not registered
        """
        chosen = self._registry.get(strategy)
        chunks: list[DocumentChunk] = []
        for item in items:
            if chosen.should_split(item):
                chunks.extend(chosen.split_logic(item))
            else:
                chunks.append(chosen.keep_whole(item))
        return self._disambiguate(chunks)

    @staticmethod
    def _disambiguate(chunks: list[DocumentChunk]) -> list[DocumentChunk]:
        seen: Counter[str] = Counter()
        taken = {chunk.id for chunk in chunks}
        result = []
        for chunk in chunks:
            seen[chunk.id] += 1
            if seen[chunk.id] == 1:
                result.append(chunk)
                continue
            suffix = seen[chunk.id]
            while f"{chunk.id}-{suffix}" in taken:
                suffix += 1
            new_id = f"{chunk.id}-{suffix}"
            taken.add(new_id)
            result.append(chunk.model_copy(update={"id": new_id}))
        return result


def validate_chunks(chunks: list[DocumentChunk]) -> ValidationReport:
    """
    Check chunks for missing ids, empty content, and extreme sizes.

    Never raises; problems are reported in the returned report.
    """
    report = ValidationReport()
    for index, chunk in enumerate(chunks):
        problems = []
        if not chunk.id:
            problems.append(ChunkValidationError(f"Chunk {index}: Missing ID", chunk_index=index))
        if not chunk.content.strip():
            problems.append(ChunkValidationError(f"Chunk {index}: Empty content", chunk_index=index, chunk_id=chunk.id))
        if problems:
            report.errors.extend(problem.message for problem in problems)
            report.invalid_ids.append(chunk.id)

        size = len(chunk.content)
        if size > LARGE_CHUNK_WARNING:
            report.warnings.append(f"Chunk {index}: Very large content ({size} chars)")
        if size < SMALL_CHUNK_WARNING:
            report.warnings.append(f"Chunk {index}: Very small content ({size} chars)")
    return report


def _average_size(chunks: list[DocumentChunk]) -> int:
    if not chunks:
        return 0
    return round(sum(len(chunk.content) for chunk in chunks) / len(chunks))


def chunk_statistics(chunks: list[DocumentChunk]) -> ChunkStatistics:
    """Size histogram plus type and namespace distributions."""
    sizes = {label: 0 for label, _ in SIZE_BUCKETS}
    for chunk in chunks:
        length = len(chunk.content)
        for label, upper in SIZE_BUCKETS:
            if upper is None or length <= upper:
                sizes[label] += 1
                break

    return ChunkStatistics(
        total_chunks=len(chunks),
        average_size=_average_size(chunks),
        size_distribution=sizes,
        type_distribution=dict(Counter(chunk.metadata.type for chunk in chunks)),
        namespace_distribution=dict(Counter(chunk.metadata.namespace for chunk in chunks)),
    )


class ChunkingPipeline:
    """Build, enhance, optimize, and validate in one call."""

    def __init__(
        self,
        builder: ChunkBuilder | None = None,
        enhancer: ChunkEnhancer | None = None,
        optimizer: ChunkOptimizer | None = None,
    ) -> None:
        self.builder = builder or ChunkBuilder()
        self._enhancer = enhancer or ChunkEnhancer()
        self._optimizer = optimizer or ChunkOptimizer()

    def process(self, items: list[ParsedContent], options: ChunkingSettings | None = None) -> ChunkingResult:
        """
        Run the chunking stages selected by options.

        Args:
            items: Parsed documentation items
            options: Strategy, sizes, and stage toggles

        Returns:
            ChunkingResult: Chunks, run metadata, and validation report

        Raises:
            UnknownStrategyError: When options.strategy is not registered
        """
        opts = options or ChunkingSettings()
        started = time.perf_counter()

        chunks = self.builder.build(items, opts.strategy)
        if opts.enhance_content:
            chunks = self._enhancer.enhance_all(chunks)
        if opts.optimize_chunks:
            chunks = self._optimizer.optimize(chunks, OptimizationOptions.from_settings(opts))
        validation = validate_chunks(chunks) if opts.validate_output else ValidationReport()

        elapsed_ms = (time.perf_counter() - started) * 1000
        result = ChunkingResult(
            chunks=chunks,
            metadata=ChunkingRunInfo(
                total_input_items=len(items),
                total_output_chunks=len(chunks),
                average_chunk_size=_average_size(chunks),
                processing_time_ms=elapsed_ms,
                strategy=opts.strategy,
            ),
            validation=validation,
        )

        logger.info(
            f"{__name__}:process - Chunked {len(items)} items into {len(chunks)} chunks",
            extra={
                "strategy": opts.strategy,
                "processing_time_ms": round(elapsed_ms, 2),
                "validation_errors": len(validation.errors),
            },
        )
        return result
