"""
Batch context cache
Per-batch memoization of account and recent-history lookups
"""
import asyncio
import logging
from typing import Dict

from cardwatch.entities import BatchContext
from cardwatch.exceptions import ContextCacheClosedError
from cardwatch.repositories.base import TransactionStore

logger = logging.getLogger(__name__)


class BatchContextCache:
    """
    Account context scoped to exactly one batch

    The first reference to an account issues one fetch_account and one
    fetch_recent_transactions call; every later reference in the batch gets
    the same BatchContext back. Population is serialized per account, so
    concurrent first references never fetch twice.
    """

    def __init__(self, store: TransactionStore):
        self.store = store
        self.hits = 0
        self.misses = 0
        self._entries: Dict[str, BatchContext] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._closed = False

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def closed(self) -> bool:
        return self._closed

    async def get(self, account_no: str) -> BatchContext:
        """Get (account, recent history) for an account, fetching once per batch"""
        self._check_open()

        context = self._entries.get(account_no)
        if context is not None:
            self.hits += 1
            return context

        lock = self._locks.setdefault(account_no, asyncio.Lock())
        async with lock:
            self._check_open()

            context = self._entries.get(account_no)
            if context is not None:
                self.hits += 1
                return context

            self.misses += 1
            account = await self.store.fetch_account(account_no)
            history = await self.store.fetch_recent_transactions(account_no)

            context = BatchContext(account=account, history=tuple(history))
            self._entries[account_no] = context

            if account is None:
                logger.debug(f"Account {account_no} not found, scoring without profile")
            return context

    def close(self):
        """Discard every entry; the cache cannot be used again"""
        self._entries.clear()
        self._locks.clear()
        self._closed = True

    def _check_open(self):
        if self._closed:
            raise ContextCacheClosedError("Batch context cache used after its batch ended")
