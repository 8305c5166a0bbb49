# tests/conftest.py

import asyncio
from typing import List, Optional

import pytest

from cardwatch.entities import Account, Transaction
from cardwatch.repositories.memory_store import InMemoryTransactionStore
from cardwatch.sources.base import LineSource


class RecordingStore(InMemoryTransactionStore):
    """In-memory store that records every collaborator call"""

    def __init__(self, *args, fetch_delay: float = 0, **kwargs):
        super().__init__(*args, **kwargs)
        self.fetch_delay = fetch_delay
        self.account_calls: List[str] = []
        self.history_calls: List[str] = []
        self.upsert_calls: List[List[Transaction]] = []
        self.fail_upsert = False
        self.fail_fetch_for: Optional[str] = None

    @property
    def total_calls(self) -> int:
        return len(self.account_calls) + len(self.history_calls) + len(self.upsert_calls)

    async def fetch_account(self, account_no):
        self.account_calls.append(account_no)
        if self.fetch_delay:
            await asyncio.sleep(self.fetch_delay)
        if account_no == self.fail_fetch_for:
            raise ConnectionError(f"store unavailable for {account_no}")
        return await super().fetch_account(account_no)

    async def fetch_recent_transactions(self, account_no):
        self.history_calls.append(account_no)
        return await super().fetch_recent_transactions(account_no)

    async def upsert_transactions(self, transactions):
        self.upsert_calls.append(list(transactions))
        if self.fail_upsert:
            raise ConnectionError("write failed")
        await super().upsert_transactions(transactions)


class SpyScorer:
    """Scorer that records its inputs and returns a fixed label"""

    def __init__(self, label: str = "LOW", fail_on: Optional[int] = None):
        self.label = label
        self.fail_on = fail_on
        self.calls = []

    def __call__(self, account, transaction, recent_history):
        self.calls.append({
            "account": account,
            "transaction": transaction,
            "history": recent_history,
        })
        if transaction.transaction_id == self.fail_on:
            raise ValueError(f"cannot score {transaction.transaction_id}")
        return self.label


class ListLineSource(LineSource):
    """Emits fixed lines, then idles until cancelled"""

    def __init__(self, lines: List[str]):
        self._lines = lines
        self.closed = False

    async def lines(self):
        for line in self._lines:
            yield line
        await asyncio.Event().wait()

    async def close(self):
        self.closed = True


def make_transaction(transaction_id: int, account_no: str = "A1", amount: float = 100.0,
                     merchant: str = "x", category: str = "y",
                     transaction_date: str = "2024-01-01") -> Transaction:
    return Transaction(
        transaction_id=transaction_id,
        account_no=account_no,
        merchant=merchant,
        category=category,
        amount=amount,
        transaction_date=transaction_date
    )


@pytest.fixture()
def account():
    return Account(account_no="A1", holder_name="Test Holder", credit_limit=5000.0, home_region="CA")


@pytest.fixture()
def store(account):
    return RecordingStore(accounts=[account])


@pytest.fixture()
def scorer():
    return SpyScorer()
