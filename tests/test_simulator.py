# tests/test_simulator.py

import asyncio
import socket
from unittest.mock import MagicMock

import pytest
from kafka.errors import KafkaError

from cardwatch.parser import parse_line
from cardwatch.simulator import KafkaLinePublisher, TransactionLineGenerator, serve_lines


class TestTransactionLineGenerator:
    """Tests for the feed generator"""

    def test_exact_count(self):
        """✅ lines(count) yields exactly count lines."""
        generator = TransactionLineGenerator(seed=42)
        assert len(list(generator.lines(250))) == 250

    def test_clean_feed_parses(self):
        """✅ With no malformed share every line parses, ids increase."""
        generator = TransactionLineGenerator(seed=7, malformed_rate=0.0)
        transactions = [parse_line(line) for line in generator.lines(200)]

        assert all(t is not None for t in transactions)
        ids = [t.transaction_id for t in transactions]
        assert ids == sorted(ids)
        assert len(set(ids)) == len(ids)

    def test_malformed_lines_rejected(self):
        """✅ Malformed lines are mixed in and rejected by the parser."""
        generator = TransactionLineGenerator(seed=1, malformed_rate=0.5)
        parsed = [parse_line(line) for line in generator.lines(300)]

        rejected = parsed.count(None)
        assert 0 < rejected < len(parsed)

    def test_seeded_is_reproducible(self):
        """✅ Same seed, same feed."""
        first = list(TransactionLineGenerator(seed=3).lines(50))
        second = list(TransactionLineGenerator(seed=3).lines(50))
        assert first == second


class TestKafkaLinePublisher:
    """Tests for the Kafka publisher (producer mocked)"""

    def test_publish(self):
        """✅ Every line is sent and the producer flushed."""
        producer = MagicMock()
        publisher = KafkaLinePublisher("broker:9092", "tx", producer=producer)

        assert publisher.publish(["a", "b"]) is True
        assert producer.send.call_count == 2
        producer.send.assert_any_call("tx", value="a")
        producer.flush.assert_called_once()

    def test_publish_failure(self):
        """✅ Kafka errors are reported as a failed publish."""
        producer = MagicMock()
        producer.send.return_value.get.side_effect = KafkaError("boom")
        publisher = KafkaLinePublisher("broker:9092", "tx", producer=producer)

        assert publisher.publish(["a"]) is False


def free_port() -> int:
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class TestServeLines:
    """Tests for the TCP feed server"""

    @pytest.mark.asyncio
    async def test_client_receives_lines(self):
        """✅ A connected client reads count parseable lines, then EOF."""
        port = free_port()
        generator = TransactionLineGenerator(seed=5, malformed_rate=0.0)
        server = asyncio.create_task(serve_lines("127.0.0.1", port, generator, rate_per_sec=0, count=5))

        try:
            for _ in range(100):
                try:
                    reader, writer = await asyncio.open_connection("127.0.0.1", port)
                    break
                except OSError:
                    await asyncio.sleep(0.02)
            else:
                pytest.fail("feed server never accepted a connection")

            lines = [raw.decode("utf-8") async for raw in reader]
            writer.close()
        finally:
            server.cancel()
            await asyncio.gather(server, return_exceptions=True)

        transactions = [parse_line(line) for line in lines]
        assert len(transactions) == 5
        assert [t.transaction_id for t in transactions] == [1, 2, 3, 4, 5]
