"""
Embedding generator.

Turns chunks into vectors in concurrent batches and records every outcome
in the embedding tracker. A failed batch never aborts the run; its chunks
are marked failed and picked up again by a later retry.

Workers only call the provider. Each finished batch is handed to the
optional sink (the vector store upsert) on the calling thread, and its
chunks are marked completed only after the sink returns.

Dependencies: concurrent.futures (stdlib), docindex.core.embeddings.providers
System role: Embedding stage of the indexing pipeline
"""

import logging
import math
import threading
from collections.abc import Callable
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import datetime, timezone

from docindex.configs.embeddings import EmbeddingSettings
from docindex.core.embeddings.providers import EmbeddingProvider, estimate_tokens
from docindex.core.embeddings.tracker import EmbeddingTracker
from docindex.core.exceptions import DocIndexException, TrackerError
from docindex.models.chunk import DocumentChunk
from docindex.models.embedding import EmbeddingInfo, EmbeddingResult, EmbeddingRunReport
from docindex.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "..."

BatchSink = Callable[[list[DocumentChunk], list[EmbeddingResult]], object]


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """
    Cosine similarity of two vectors.

    Args:
        a: First vector
        b: Second vector

    Returns:
        float: Similarity in [-1, 1], or 0.0 when either vector is all zeros

    Raises:
        ValueError: When the vectors differ in dimension
    """
    if len(a) != len(b):
        raise ValueError(f"Embeddings must have the same dimensions ({len(a)} != {len(b)})")
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


@dataclass
class BatchOutcome:
    results: list[EmbeddingResult] = field(default_factory=list)
    failed_ids: list[str] = field(default_factory=list)


class EmbeddingGenerator:
    """Batch, embed, and record chunks."""

    def __init__(
        self,
        provider: EmbeddingProvider,
        tracker: EmbeddingTracker | None = None,
        settings: EmbeddingSettings | None = None,
    ) -> None:
        """
        Initialize the generator.

        Args:
            provider: Embedding backend
            tracker: Ledger to record outcomes in; outcomes are not recorded when None
            settings: Batch size, token limit, and concurrency
        """
        self._provider = provider
        self._tracker = tracker
        self._settings = settings or EmbeddingSettings()

    def prepare_text(self, chunk: DocumentChunk) -> str:
        """
        Prefix chunk content with its type, method, class, and namespace.

        Text longer than max_tokens is cut to max_tokens * 3 characters.
        """
        metadata = chunk.metadata
        parts = [f"Type: {metadata.type}"]
        if metadata.method_name:
            parts.append(f"Method: {metadata.method_name}")
        if metadata.class_name:
            parts.append(f"Class: {metadata.class_name}")
        if metadata.namespace:
            parts.append(f"Namespace: {metadata.namespace}")
        parts.append(chunk.content)
        text = "\n\n".join(parts)

        if estimate_tokens(text) > self._settings.max_tokens:
            return text[: self._settings.max_tokens * 3] + TRUNCATION_MARKER
        return text

    def embed(self, chunks: list[DocumentChunk], cancel_event: threading.Event | None = None) -> list[EmbeddingResult]:
        """
        Embed chunks and return the successful vectors.

        Args:
            chunks: Chunks needing embeddings
            cancel_event: Stops submission of further batches once set

        Returns:
            list[EmbeddingResult]: One result per successfully embedded chunk
        """
        return self.run(chunks, cancel_event).results

    def run(
        self,
        chunks: list[DocumentChunk],
        cancel_event: threading.Event | None = None,
        sink: BatchSink | None = None,
    ) -> EmbeddingRunReport:
        """
        Embed chunks in concurrent batches.

        At most `concurrency` batches are in flight. After cancellation the
        in-flight batches finish and the rest are reported as skipped.

        Args:
            chunks: Chunks needing embeddings
            cancel_event: Stops submission of further batches once set
            sink: Receives (chunks, results) of each embedded batch before
                they are marked completed; a raising sink fails the batch

        Returns:
            EmbeddingRunReport: Results, failed ids, and skipped ids
        """
        report = EmbeddingRunReport()
        if not chunks:
            return report

        size = self._settings.batch_size
        batches = [chunks[i : i + size] for i in range(0, len(chunks), size)]
        queued = iter(batches)
        concurrency = self._settings.concurrency

        logger.info(
            f"{__name__}:run - Embedding {len(chunks)} chunks",
            extra={"batches": len(batches), "batch_size": size, "concurrency": concurrency},
        )

        def cancelled() -> bool:
            return cancel_event is not None and cancel_event.is_set()

        in_flight: dict[Future, list[DocumentChunk]] = {}
        with ThreadPoolExecutor(max_workers=concurrency, thread_name_prefix="embed") as executor:
            while True:
                while len(in_flight) < concurrency and not cancelled():
                    batch = next(queued, None)
                    if batch is None:
                        break
                    in_flight[executor.submit(self._process_batch, batch)] = batch
                    report.batches += 1
                if not in_flight:
                    break
                done, _ = wait(list(in_flight), return_when=FIRST_COMPLETED)
                for future in done:
                    batch = in_flight.pop(future)
                    outcome = self._commit(batch, self._collect(future, batch), sink)
                    report.results.extend(outcome.results)
                    report.failed_ids.extend(outcome.failed_ids)

        if cancelled():
            report.cancelled = True
            report.skipped_ids = [chunk.id for batch in queued for chunk in batch]
            logger.warning(
                f"{__name__}:run - Embedding cancelled",
                extra={"skipped": len(report.skipped_ids)},
            )

        logger.info(
            f"{__name__}:run - Embedding run finished",
            extra={
                "embedded": len(report.results),
                "failed": len(report.failed_ids),
                "skipped": len(report.skipped_ids),
            },
        )
        return report

    def _process_batch(self, batch: list[DocumentChunk]) -> BatchOutcome:
        outcome = BatchOutcome()
        texts = [self.prepare_text(chunk) for chunk in batch]

        try:
            response = self._provider.embed_documents(texts)
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:_process_batch - Batch failed",
                e,
                batch_size=len(batch),
                first_chunk=batch[0].id,
            )
            for chunk in batch:
                self._record_failure(chunk.id, str(e))
                outcome.failed_ids.append(chunk.id)
            return outcome

        timestamp = datetime.now(timezone.utc)
        for index, (chunk, text) in enumerate(zip(batch, texts)):
            vector = response.vectors[index] if index < len(response.vectors) else None
            if not vector:
                self._record_failure(
                    chunk.id,
                    f"Provider returned {len(response.vectors)} vectors for {len(batch)} texts",
                )
                outcome.failed_ids.append(chunk.id)
                continue

            outcome.results.append(
                EmbeddingResult(
                    chunk_id=chunk.id,
                    embedding=vector,
                    metadata=EmbeddingInfo(model=response.model, tokens=estimate_tokens(text), timestamp=timestamp),
                )
            )
        return outcome

    def _collect(self, future: Future, batch: list[DocumentChunk]) -> BatchOutcome:
        try:
            return future.result()
        except DocIndexException as e:
            log_exception_with_context(
                logger,
                f"{__name__}:_collect - Batch bookkeeping failed",
                e,
                batch_size=len(batch),
                first_chunk=batch[0].id,
            )
            return BatchOutcome(failed_ids=[chunk.id for chunk in batch])

    def _commit(self, batch: list[DocumentChunk], outcome: BatchOutcome, sink: BatchSink | None) -> BatchOutcome:
        if not outcome.results:
            return outcome

        if sink is not None:
            by_id = {chunk.id: chunk for chunk in batch}
            try:
                sink([by_id[result.chunk_id] for result in outcome.results], outcome.results)
            except Exception as e:
                log_exception_with_context(
                    logger,
                    f"{__name__}:_commit - Storing batch failed",
                    e,
                    batch_size=len(outcome.results),
                    first_chunk=outcome.results[0].chunk_id,
                )
                for result in outcome.results:
                    self._record_failure(result.chunk_id, f"Vector upsert failed: {e}")
                return BatchOutcome(failed_ids=[*outcome.failed_ids, *(r.chunk_id for r in outcome.results)])

        committed = BatchOutcome(failed_ids=list(outcome.failed_ids))
        for result in outcome.results:
            if self._tracker is not None:
                try:
                    self._tracker.mark_embedding_completed(
                        result.chunk_id,
                        embedding_id=result.embedding_id,
                        model_name=result.metadata.model,
                        tokens_used=result.metadata.tokens,
                        dimensions=len(result.embedding),
                    )
                except TrackerError as e:
                    log_exception_with_context(
                        logger, f"{__name__}:_commit - Could not record embedding", e, chunk_id=result.chunk_id
                    )
                    committed.failed_ids.append(result.chunk_id)
                    continue
            committed.results.append(result)
        return committed

    def _record_failure(self, chunk_id: str, message: str) -> None:
        if self._tracker is None:
            return
        try:
            self._tracker.mark_embedding_failed(chunk_id, message)
        except TrackerError as e:
            log_exception_with_context(
                logger, f"{__name__}:_record_failure - Could not record failure", e, chunk_id=chunk_id
            )

    def embed_query(self, text: str) -> list[float]:
        """
        Embed a search query with the generator's provider.

        Raises:
            EmbeddingError: When the provider fails
        """
        return self._provider.embed_query(text)
