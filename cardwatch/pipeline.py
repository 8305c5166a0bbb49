"""
Streaming pipeline
Wait for the window boundary, process whatever arrived, commit, repeat
"""
import asyncio
import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence

from cardwatch.commit import BatchCommitter
from cardwatch.enrichment import EnrichmentEngine
from cardwatch.entities import Transaction
from cardwatch.exceptions import BatchProcessingError
from cardwatch.parser import parse_line
from cardwatch.sources.base import LineSource
from cardwatch.window import WindowAccumulator

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Outcome of one processed tick"""
    batch_size: int = 0
    distinct_accounts: int = 0
    committed: int = 0
    alerts: Dict[str, int] = field(default_factory=dict)
    cache_hits: int = 0
    cache_misses: int = 0
    elapsed_ms: float = 0.0

    @property
    def is_empty(self) -> bool:
        return self.batch_size == 0


@dataclass
class PipelineStats:
    ticks: int = 0
    empty_ticks: int = 0
    batches_committed: int = 0
    batches_failed: int = 0
    transactions_committed: int = 0
    lines_rejected: int = 0


class StreamingPipeline:
    """
    Drives the micro-batch cycle

    Ingest runs as its own task and keeps filling the open window while a
    batch is being processed. Batches themselves are processed one at a time.
    """

    def __init__(self, source: LineSource, accumulator: WindowAccumulator,
                 engine: EnrichmentEngine, committer: BatchCommitter):
        self.source = source
        self.accumulator = accumulator
        self.engine = engine
        self.committer = committer
        self.stats = PipelineStats()
        self._ingest_task: Optional[asyncio.Task] = None

    async def _ingest(self):
        async for line in self.source:
            transaction = parse_line(line)
            if transaction is None:
                self.stats.lines_rejected += 1
                continue
            self.accumulator.add(transaction)

    def _on_ingest_done(self, task: asyncio.Task):
        if task.cancelled():
            return
        if task.exception() is not None:
            logger.error(f"❌ Ingest stopped: {task.exception()}")
            self.accumulator.stop()
        else:
            logger.info("Source exhausted, waiting for shutdown")

    async def process_batch(self, batch: Sequence[Transaction]) -> BatchResult:
        """
        Enrich and commit one batch
        An empty batch touches no collaborator at all

        Raises:
            BatchProcessingError: the batch failed as a whole
        """
        if not batch:
            logger.debug("Empty window, nothing to process")
            return BatchResult()

        start = time.perf_counter()

        enriched = await self.engine.enrich(batch)
        try:
            committed = await self.committer.commit(enriched)
        except Exception as e:
            raise BatchProcessingError(
                f"Commit failed for batch of {len(enriched)}: {e}",
                batch_size=len(batch)
            ) from e

        result = BatchResult(
            batch_size=len(batch),
            distinct_accounts=len({t.account_no for t in batch}),
            committed=committed,
            alerts=dict(Counter(t.alert for t in enriched)),
            cache_hits=self.engine.last_cache_hits,
            cache_misses=self.engine.last_cache_misses,
            elapsed_ms=round((time.perf_counter() - start) * 1000, 2)
        )

        logger.info(
            f"✅ Committed {result.committed} transactions "
            f"({result.distinct_accounts} accounts, alerts={result.alerts}, "
            f"cache hits={result.cache_hits}/misses={result.cache_misses}) "
            f"in {result.elapsed_ms:.0f}ms"
        )
        return result

    async def _handle_tick(self, batch: Sequence[Transaction]):
        self.stats.ticks += 1
        if not batch:
            self.stats.empty_ticks += 1

        try:
            result = await self.process_batch(batch)
        except BatchProcessingError as e:
            self.stats.batches_failed += 1
            logger.error(f"❌ Batch of {len(batch)} failed, not retried: {e}", exc_info=True)
            return

        if not result.is_empty:
            self.stats.batches_committed += 1
            self.stats.transactions_committed += result.committed

    async def run(self):
        """Run until stop() is called or ingest fails"""
        logger.info(f"Starting pipeline (window={self.accumulator.window_seconds}s)")

        self._ingest_task = asyncio.create_task(self._ingest())
        self._ingest_task.add_done_callback(self._on_ingest_done)

        try:
            async for batch in self.accumulator.ticks():
                await self._handle_tick(batch)
        finally:
            await self._shutdown()

        if not self._ingest_task.cancelled() and self._ingest_task.exception() is not None:
            raise self._ingest_task.exception()

        logger.info(
            f"Pipeline stopped: {self.stats.batches_committed} batches, "
            f"{self.stats.transactions_committed} transactions committed, "
            f"{self.stats.batches_failed} failed, {self.stats.lines_rejected} lines rejected"
        )

    def stop(self):
        """Finish the current batch, drop the open window, then stop"""
        logger.info("Shutdown requested")
        self.accumulator.stop()

    async def _shutdown(self):
        task = self._ingest_task
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        await self.source.close()
