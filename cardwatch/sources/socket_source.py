"""
TCP text source
Reads UTF-8, newline-delimited records from a long-lived connection
(e.g. `nc -lk 9999` or cardwatch-simulate)
"""
import asyncio
import logging
from typing import AsyncIterator, Optional

from cardwatch.constants import DEFAULT_RECONNECT_DELAY_SEC, MAX_LINE_BYTES
from cardwatch.sources.base import LineSource

logger = logging.getLogger(__name__)


class SocketLineSource(LineSource):
    """
    Line source over a TCP connection
    Reconnects after reconnect_delay seconds; None means stop at end of stream
    Lines longer than max_line_bytes are skipped, not fatal
    """

    def __init__(self, host: str, port: int,
                 reconnect_delay: Optional[float] = DEFAULT_RECONNECT_DELAY_SEC,
                 max_line_bytes: int = MAX_LINE_BYTES):
        self.host = host
        self.port = port
        self.reconnect_delay = reconnect_delay
        self.max_line_bytes = max_line_bytes
        self.undecodable_lines = 0
        self.oversized_lines = 0
        self._writer: Optional[asyncio.StreamWriter] = None

    async def _read_lines(self, reader: asyncio.StreamReader) -> AsyncIterator[bytes]:
        """Raw lines until end of stream, over-long lines discarded"""
        oversized = False

        while True:
            try:
                raw = await reader.readuntil(b"\n")
            except asyncio.LimitOverrunError as e:
                # Throw away the buffered part and keep looking for the line end
                await reader.readexactly(e.consumed)
                oversized = True
                continue
            except asyncio.IncompleteReadError as e:
                if oversized:
                    self.oversized_lines += 1
                elif e.partial:
                    yield e.partial
                return

            if oversized:
                oversized = False
                self.oversized_lines += 1
                logger.debug(f"Rejected line longer than {self.max_line_bytes} bytes")
                continue

            yield raw

    async def lines(self) -> AsyncIterator[str]:
        while True:
            try:
                reader, self._writer = await asyncio.open_connection(
                    self.host, self.port, limit=self.max_line_bytes
                )
                logger.info(f"✅ Connected to {self.host}:{self.port}")

                async for raw in self._read_lines(reader):
                    try:
                        yield raw.decode("utf-8")
                    except UnicodeDecodeError:
                        self.undecodable_lines += 1
                        logger.debug(f"Rejected undecodable line: {raw!r}")

                logger.warning(f"Connection to {self.host}:{self.port} closed by peer")
            except OSError as e:
                logger.warning(f"⚠️ Connection to {self.host}:{self.port} failed: {e}")
                if self.reconnect_delay is None:
                    raise
            finally:
                await self.close()

            if self.reconnect_delay is None:
                return

            logger.info(f"Reconnecting in {self.reconnect_delay:.1f}s...")
            await asyncio.sleep(self.reconnect_delay)

    async def close(self) -> None:
        writer, self._writer = self._writer, None
        if writer is None:
            return

        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass
