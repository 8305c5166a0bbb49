"""
Enrichment & merge engine
Scores every transaction of a batch against cached account context, then
rebuilds the batch by transaction identifier
"""
import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence

from cardwatch.constants import DEFAULT_MAX_CONCURRENCY, DEFAULT_SCORING_WORKERS
from cardwatch.context_cache import BatchContextCache
from cardwatch.entities import Transaction
from cardwatch.exceptions import BatchConsistencyError, BatchProcessingError
from cardwatch.repositories.base import TransactionStore
from cardwatch.scoring import Scorer

logger = logging.getLogger(__name__)


def merge_by_identifier(original: Sequence[Transaction],
                        enriched_by_id: Dict[int, Transaction]) -> List[Transaction]:
    """
    Map the original batch's identifiers through the enrichment lookup
    Keeps original order; each identifier appears once

    Raises:
        BatchConsistencyError: an original identifier has no enriched record
    """
    merged = []
    emitted = set()

    for transaction in original:
        transaction_id = transaction.transaction_id
        if transaction_id in emitted:
            continue

        enriched = enriched_by_id.get(transaction_id)
        if enriched is None:
            raise BatchConsistencyError(transaction_id, batch_size=len(original))

        merged.append(enriched)
        emitted.add(transaction_id)

    return merged


class EnrichmentEngine:
    """
    Attaches alert labels to a batch

    Each call to enrich() owns a fresh BatchContextCache, so context never
    outlives the batch it was fetched for. The scorer runs on worker threads.
    """

    def __init__(self, store: TransactionStore, scorer: Scorer,
                 scoring_workers: int = DEFAULT_SCORING_WORKERS,
                 max_concurrency: int = DEFAULT_MAX_CONCURRENCY):
        self.store = store
        self.scorer = scorer
        self.max_concurrency = max_concurrency
        self._executor = ThreadPoolExecutor(
            max_workers=scoring_workers,
            thread_name_prefix="cardwatch-scoring"
        )
        self.last_cache_hits = 0
        self.last_cache_misses = 0

    async def enrich(self, batch: Sequence[Transaction]) -> List[Transaction]:
        """
        Score a batch and return the enriched records in original order

        Raises:
            BatchProcessingError: store or scorer failure, whole batch failed
            BatchConsistencyError: merge found an unscored identifier
        """
        if not batch:
            return []

        unique = self._dedupe(batch)
        cache = BatchContextCache(self.store)
        semaphore = asyncio.Semaphore(self.max_concurrency)

        try:
            results = await asyncio.gather(
                *(self._score_one(txn, cache, semaphore) for txn in unique),
                return_exceptions=True
            )
            self.last_cache_hits = cache.hits
            self.last_cache_misses = cache.misses
        finally:
            cache.close()

        enriched_by_id: Dict[int, Transaction] = {}
        for transaction, result in zip(unique, results):
            if isinstance(result, BaseException):
                raise BatchProcessingError(
                    f"Enrichment failed for transaction {transaction.transaction_id}: {result}",
                    batch_size=len(batch),
                    account_no=transaction.account_no
                ) from result
            enriched_by_id[result.transaction_id] = result

        return merge_by_identifier(batch, enriched_by_id)

    async def _score_one(self, transaction: Transaction, cache: BatchContextCache,
                         semaphore: asyncio.Semaphore) -> Transaction:
        async with semaphore:
            context = await cache.get(transaction.account_no)

            loop = asyncio.get_running_loop()
            label = await loop.run_in_executor(
                self._executor,
                self.scorer,
                context.account,
                transaction,
                context.history
            )

        return transaction.model_copy(update={"alert": label})

    @staticmethod
    def _dedupe(batch: Sequence[Transaction]) -> List[Transaction]:
        """First arrival wins for a repeated identifier"""
        seen: Dict[int, Transaction] = {}
        for transaction in batch:
            if transaction.transaction_id not in seen:
                seen[transaction.transaction_id] = transaction

        duplicates = len(batch) - len(seen)
        if duplicates:
            logger.warning(f"⚠️ Collapsed {duplicates} duplicate transaction id(s) in batch")
        return list(seen.values())

    def close(self, wait: bool = True):
        self._executor.shutdown(wait=wait)
