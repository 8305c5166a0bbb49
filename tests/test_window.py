# tests/test_window.py

import asyncio

import pytest

from cardwatch.window import WindowAccumulator
from conftest import make_transaction


class TestWindowAccumulator:
    """Tests for tick-based batching"""

    def test_rejects_non_positive_window(self):
        """✅ Window length must be positive."""
        with pytest.raises(ValueError):
            WindowAccumulator(0)

    def test_drain_swaps_buffer(self):
        """✅ drain() hands over the window and starts a new one."""
        acc = WindowAccumulator(1.0)
        acc.add(make_transaction(1))
        acc.add(make_transaction(2))

        batch = acc.drain()
        assert [t.transaction_id for t in batch] == [1, 2]
        assert acc.pending == 0

        acc.add(make_transaction(3))
        assert [t.transaction_id for t in acc.drain()] == [3]

    @pytest.mark.asyncio
    async def test_one_batch_per_tick(self):
        """✅ Each tick releases what arrived since the previous one."""
        acc = WindowAccumulator(0.05)
        acc.add(make_transaction(1))

        batches = []
        async for batch in acc.ticks():
            batches.append([t.transaction_id for t in batch])
            if len(batches) == 1:
                acc.add(make_transaction(2))
                acc.add(make_transaction(3))
            if len(batches) == 3:
                acc.stop()

        assert batches == [[1], [2, 3], []]
        assert acc.ticks_fired == 3

    @pytest.mark.asyncio
    async def test_empty_ticks_still_fire(self):
        """✅ An idle window still produces a (empty) tick."""
        acc = WindowAccumulator(0.02)
        batches = []
        async for batch in acc.ticks():
            batches.append(batch)
            if len(batches) == 2:
                acc.stop()

        assert batches == [[], []]

    @pytest.mark.asyncio
    async def test_stop_drops_partial_window(self):
        """✅ Stopping mid-window drops, never flushes, pending transactions."""
        acc = WindowAccumulator(10.0)
        acc.add(make_transaction(1))

        async def stop_soon():
            await asyncio.sleep(0.02)
            acc.stop()

        stopper = asyncio.create_task(stop_soon())
        batches = [batch async for batch in acc.ticks()]
        await stopper

        assert batches == []
        assert acc.pending == 0

    @pytest.mark.asyncio
    async def test_stop_before_start(self):
        """✅ A stopped accumulator yields nothing."""
        acc = WindowAccumulator(0.01)
        acc.stop()
        assert [batch async for batch in acc.ticks()] == []

    @pytest.mark.asyncio
    async def test_overrun_coalesces(self):
        """✅ Slow processing never produces a backlog of ticks."""
        acc = WindowAccumulator(0.02)
        loop = asyncio.get_running_loop()

        fired_at = []
        async for _ in acc.ticks():
            fired_at.append(loop.time())
            if len(fired_at) == 1:
                await asyncio.sleep(0.1)  # overrun several windows
            if len(fired_at) == 3:
                acc.stop()

        # second tick fires right after the overrun, third waits a full window again
        assert fired_at[2] - fired_at[1] >= 0.01
