"""
Window accumulator
Turns a continuous arrival stream into one batch per fixed-length tick
"""
import asyncio
import logging
from typing import AsyncIterator, List, Optional

from cardwatch.entities import Transaction

logger = logging.getLogger(__name__)


class WindowAccumulator:
    """
    Buffers parsed transactions and releases them on a fixed schedule

    Tick boundaries sit at start + n * window_seconds and do not drift with
    processing time. The consumer of ticks() must finish with a batch before
    the next one is produced.
    """

    def __init__(self, window_seconds: float):
        if window_seconds <= 0:
            raise ValueError(f"window_seconds must be positive, got {window_seconds}")

        self.window_seconds = window_seconds
        self.ticks_fired = 0
        self._buffer: List[Transaction] = []
        self._stop_requested = False
        self._stopped: Optional[asyncio.Event] = None

    @property
    def pending(self) -> int:
        """Transactions buffered in the open window"""
        return len(self._buffer)

    def add(self, transaction: Transaction):
        self._buffer.append(transaction)

    def drain(self) -> List[Transaction]:
        """Hand over the open window and start a fresh one"""
        batch, self._buffer = self._buffer, []
        return batch

    def stop(self):
        """End ticks() at its next suspension point; the open window is dropped"""
        self._stop_requested = True
        if self._stopped is not None:
            self._stopped.set()

    async def _wait_for_boundary(self, delay: float) -> bool:
        """Sleep until the boundary. Returns True if stopped meanwhile."""
        try:
            await asyncio.wait_for(self._stopped.wait(), timeout=delay)
            return True
        except asyncio.TimeoutError:
            return False

    async def ticks(self) -> AsyncIterator[List[Transaction]]:
        """Yield exactly one batch (possibly empty) per tick until stopped"""
        loop = asyncio.get_running_loop()
        self._stopped = asyncio.Event()
        if self._stop_requested:
            self._stopped.set()

        next_boundary = loop.time() + self.window_seconds

        try:
            while not self._stopped.is_set():
                delay = next_boundary - loop.time()
                if delay > 0 and await self._wait_for_boundary(delay):
                    break

                overrun = loop.time() - next_boundary
                if overrun >= self.window_seconds:
                    skipped = int(overrun // self.window_seconds)
                    next_boundary += skipped * self.window_seconds
                    logger.warning(
                        f"⚠️ Processing overran {skipped} window(s), coalescing into one batch"
                    )
                next_boundary += self.window_seconds

                self.ticks_fired += 1
                yield self.drain()
        finally:
            dropped = len(self.drain())
            if dropped:
                logger.warning(f"Dropped {dropped} transactions from unfinished window")
