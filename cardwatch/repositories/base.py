"""
Store interface required by the streaming job
"""
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from cardwatch.entities import Account, Transaction


class TransactionStore(ABC):
    """Account lookup, recent history and transaction persistence"""

    @abstractmethod
    async def fetch_account(self, account_no: str) -> Optional[Account]:
        """Account profile, or None if unknown"""
        pass

    @abstractmethod
    async def fetch_recent_transactions(self, account_no: str) -> List[Transaction]:
        """Most recent prior transactions, newest first (possibly empty)"""
        pass

    @abstractmethod
    async def upsert_transactions(self, transactions: Sequence[Transaction]) -> None:
        """Insert or replace by transaction_id, all-or-nothing"""
        pass

    async def close(self) -> None:
        """Release connections (no-op by default)"""
        return None
