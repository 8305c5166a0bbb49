# tests/test_memory_store.py

import pytest

from cardwatch.entities import Account
from cardwatch.repositories.memory_store import InMemoryTransactionStore
from conftest import make_transaction


class TestInMemoryTransactionStore:

    @pytest.mark.asyncio
    async def test_accounts(self):
        """✅ Seeded accounts are found, others are None."""
        store = InMemoryTransactionStore(accounts=[Account(account_no="A1")])
        assert (await store.fetch_account("A1")).account_no == "A1"
        assert await store.fetch_account("B2") is None

    @pytest.mark.asyncio
    async def test_history_bounded_newest_first(self):
        """✅ History is newest first and bounded."""
        store = InMemoryTransactionStore(history_limit=2)
        await store.upsert_transactions([
            make_transaction(1, transaction_date="2024-01-01"),
            make_transaction(2, transaction_date="2024-01-03"),
            make_transaction(3, transaction_date="2024-01-02"),
        ])

        history = await store.fetch_recent_transactions("A1")
        assert [t.transaction_id for t in history] == [2, 3]

    @pytest.mark.asyncio
    async def test_stored_records_are_copies(self):
        """✅ Callers can't mutate stored rows through their own instances."""
        store = InMemoryTransactionStore()
        txn = make_transaction(1)
        await store.upsert_transactions([txn])
        txn.alert = "HIGH"

        assert store.all_transactions()[0].alert is None

    @pytest.mark.asyncio
    async def test_upsert_replaces_by_id(self):
        """✅ Same id overwrites."""
        store = InMemoryTransactionStore()
        await store.upsert_transactions([make_transaction(1, amount=1.0)])
        await store.upsert_transactions([make_transaction(1, amount=2.0)])

        assert [t.amount for t in store.all_transactions()] == [2.0]
