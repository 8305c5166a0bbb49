# tests/test_commit.py

import pytest

from cardwatch.commit import BatchCommitter
from conftest import make_transaction


class TestBatchCommitter:
    """Tests for the commit stage"""

    @pytest.mark.asyncio
    async def test_single_upsert_per_batch(self, store):
        """✅ A batch is one upsert call carrying every record."""
        committer = BatchCommitter(store)
        batch = [make_transaction(i) for i in range(1, 6)]

        written = await committer.commit(batch)

        assert written == 5
        assert len(store.upsert_calls) == 1
        assert [t.transaction_id for t in store.upsert_calls[0]] == [1, 2, 3, 4, 5]

    @pytest.mark.asyncio
    async def test_empty_batch_makes_no_call(self, store):
        """✅ No spurious empty writes."""
        assert await BatchCommitter(store).commit([]) == 0
        assert store.upsert_calls == []

    @pytest.mark.asyncio
    async def test_failure_propagates_without_partial_state(self, store):
        """✅ A failed write surfaces and leaves the store untouched."""
        store.fail_upsert = True

        with pytest.raises(ConnectionError):
            await BatchCommitter(store).commit([make_transaction(1), make_transaction(2)])
        assert store.all_transactions() == []
