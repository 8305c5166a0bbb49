"""
Commit stage
One upsert per non-empty enriched batch
"""
import logging
from typing import Sequence

from cardwatch.entities import Transaction
from cardwatch.repositories.base import TransactionStore

logger = logging.getLogger(__name__)


class BatchCommitter:
    """Hands an enriched batch to the store as a single logical write"""

    def __init__(self, store: TransactionStore):
        self.store = store

    async def commit(self, batch: Sequence[Transaction]) -> int:
        """Upsert the batch; returns the number of records written"""
        if not batch:
            return 0

        await self.store.upsert_transactions(list(batch))
        logger.debug(f"💾 Committed {len(batch)} transactions")
        return len(batch)
