#!/usr/bin/env python3
"""
Transaction feed simulator - stands in for `nc -lk 9999`
Usage: cardwatch-simulate --sink tcp --port 9999 --rate 20
       cardwatch-simulate --sink kafka --kafka-bootstrap localhost:9092 --count 500
"""
import argparse
import asyncio
import logging
import os
import random
import sys
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterator, List, Optional

from kafka import KafkaProducer
from kafka.errors import KafkaError

from cardwatch.constants import DEFAULT_KAFKA_TOPIC, FIELD_DELIMITER

logger = logging.getLogger(__name__)


class FeedPattern(Enum):
    """Line patterns emitted by the generator"""
    REGULAR_PURCHASE = ("regular_purchase", 0.85)
    CARD_TESTING = ("card_testing", 0.05)
    LARGE_PURCHASE = ("large_purchase", 0.05)
    MALFORMED = ("malformed", 0.05)

    def __init__(self, pattern_name: str, default_rate: float):
        self.pattern_name = pattern_name
        self.default_rate = default_rate


class TransactionLineGenerator:
    """
    Produces comma-delimited feed lines with increasing transaction ids
    Card testing emits a burst of small charges on one account
    """

    MERCHANTS = ['Amazon', 'Walmart', 'Target', 'Shell', 'Starbucks', 'BestBuy', 'Uber']
    CATEGORIES = ['grocery', 'fuel', 'electronics', 'dining', 'travel', 'retail']

    def __init__(self, accounts: Optional[List[str]] = None, seed: Optional[int] = None,
                 start_id: int = 1, malformed_rate: float = FeedPattern.MALFORMED.default_rate):
        self.accounts = accounts or [f"ACC{n:04d}" for n in range(1, 51)]
        self.random = random.Random(seed)
        self.next_id = start_id
        self.malformed_rate = malformed_rate
        self.clock = datetime(2024, 1, 1, 9, 0, 0)

    def _pattern_rates(self) -> dict:
        rates = {p: p.default_rate for p in FeedPattern}
        rates[FeedPattern.MALFORMED] = self.malformed_rate
        return rates

    def _line(self, account_no: str, merchant: str, category: str, amount: float) -> str:
        transaction_id = self.next_id
        self.next_id += 1
        self.clock += timedelta(seconds=self.random.randint(1, 90))

        return FIELD_DELIMITER.join([
            str(transaction_id),
            account_no,
            merchant,
            category,
            f"{amount:.2f}",
            self.clock.strftime('%Y-%m-%d %H:%M:%S'),
        ])

    def _regular(self) -> List[str]:
        return [self._line(
            self.random.choice(self.accounts),
            self.random.choice(self.MERCHANTS),
            self.random.choice(self.CATEGORIES),
            round(self.random.uniform(5, 250), 2)
        )]

    def _card_testing(self) -> List[str]:
        """3-8 tiny charges on one account, same merchant"""
        account_no = self.random.choice(self.accounts)
        merchant = self.random.choice(self.MERCHANTS)
        return [
            self._line(account_no, merchant, 'retail', round(self.random.uniform(0.5, 2.0), 2))
            for _ in range(self.random.randint(3, 8))
        ]

    def _large(self) -> List[str]:
        return [self._line(
            self.random.choice(self.accounts),
            self.random.choice(self.MERCHANTS),
            'electronics',
            round(self.random.uniform(2000, 9999), 2)
        )]

    def _malformed(self) -> List[str]:
        candidates = [
            f"{self.next_id},{self.random.choice(self.accounts)},Amazon,retail",
            f"{self.next_id},{self.random.choice(self.accounts)},Amazon,retail,notanumber,2024-01-01",
            f"abc,{self.random.choice(self.accounts)},Amazon,retail,10.00,2024-01-01",
        ]
        return [self.random.choice(candidates)]

    def generate(self) -> List[str]:
        """One pattern's worth of lines"""
        rates = self._pattern_rates()
        pattern = self.random.choices(list(rates), weights=list(rates.values()))[0]

        if pattern == FeedPattern.CARD_TESTING:
            return self._card_testing()
        elif pattern == FeedPattern.LARGE_PURCHASE:
            return self._large()
        elif pattern == FeedPattern.MALFORMED:
            return self._malformed()
        else:
            return self._regular()

    def lines(self, count: Optional[int] = None) -> Iterator[str]:
        """Yield lines forever, or exactly count lines"""
        emitted = 0
        while count is None or emitted < count:
            for line in self.generate():
                if count is not None and emitted >= count:
                    return
                yield line
                emitted += 1


class KafkaLinePublisher:
    """Publishes raw feed lines to a Kafka topic"""

    def __init__(self, bootstrap_servers: str = None, topic: str = DEFAULT_KAFKA_TOPIC,
                 producer: Optional[KafkaProducer] = None):
        # Single source for env var logic
        self.bootstrap_servers = (
            bootstrap_servers or
            os.getenv('KAFKA_BOOTSTRAP_SERVERS', 'localhost:9092')
        )
        self.topic = topic

        if producer is None:
            logger.info(f"Connecting to Kafka: {self.bootstrap_servers}")
            producer = KafkaProducer(
                bootstrap_servers=self.bootstrap_servers.split(','),
                value_serializer=lambda v: v.encode('utf-8'),
                acks='all',
                retries=3,
                max_in_flight_requests_per_connection=5
            )
        self.producer = producer

    def publish(self, lines: List[str]) -> bool:
        """Publish batch of lines to Kafka"""
        try:
            for line in lines:
                future = self.producer.send(self.topic, value=line)
                future.get(timeout=10)

            self.producer.flush()
            logger.info(f"Published {len(lines)} lines to {self.topic}")
            return True

        except KafkaError as e:
            logger.error(f"Failed to publish lines: {e}")
            return False

    def close(self):
        """Close producer connection"""
        if self.producer:
            self.producer.close()


async def serve_lines(host: str, port: int, generator: TransactionLineGenerator,
                      rate_per_sec: float, count: Optional[int] = None):
    """
    TCP server streaming generated lines to every connected client
    Each client gets its own stream, like `nc -lk`
    """
    interval = 1.0 / rate_per_sec if rate_per_sec > 0 else 0

    async def handle_client(reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        peer = writer.get_extra_info('peername')
        logger.info(f"Client connected: {peer}")
        try:
            for line in generator.lines(count):
                writer.write((line + "\n").encode('utf-8'))
                await writer.drain()
                if interval:
                    await asyncio.sleep(interval)
        except ConnectionError:
            logger.info(f"Client disconnected: {peer}")
        finally:
            writer.close()

    server = await asyncio.start_server(handle_client, host, port)
    logger.info(f"Serving transaction feed on {host}:{port}")

    async with server:
        await server.serve_forever()


def setup_logging(verbose: bool = False):
    """Configure logging"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        format='%(asctime)s [%(levelname)s] %(message)s',
        level=level,
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def parse_args(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(description='CardWatch Transaction Feed Simulator')

    parser.add_argument('--sink', default='tcp', choices=['tcp', 'kafka'],
                        help='Serve lines over TCP or publish to Kafka')
    parser.add_argument('--host', default='localhost', help='TCP bind host')
    parser.add_argument('--port', type=int, default=9999, help='TCP bind port')
    parser.add_argument('--rate', type=float, default=10.0,
                        help='Lines per second per TCP client')
    parser.add_argument('--count', type=int, default=None,
                        help='Stop after this many lines (default: endless for TCP, 1000 for Kafka)')
    parser.add_argument('--malformed-rate', type=float, default=FeedPattern.MALFORMED.default_rate,
                        help='Share of malformed lines')
    parser.add_argument('--seed', type=int, default=None, help='Random seed')
    parser.add_argument('--kafka-bootstrap', default=None,
                        help='Kafka bootstrap servers')
    parser.add_argument('--kafka-topic', default=DEFAULT_KAFKA_TOPIC,
                        help='Kafka topic name')
    parser.add_argument('--verbose', action='store_true',
                        help='Enable debug logging')

    return parser.parse_args(argv)


def main(argv=None):
    """Main execution"""
    args = parse_args(argv)
    setup_logging(args.verbose)

    generator = TransactionLineGenerator(seed=args.seed, malformed_rate=args.malformed_rate)

    try:
        if args.sink == 'kafka':
            publisher = KafkaLinePublisher(args.kafka_bootstrap, args.kafka_topic)
            try:
                ok = publisher.publish(list(generator.lines(args.count or 1000)))
            finally:
                publisher.close()
            sys.exit(0 if ok else 1)

        asyncio.run(serve_lines(args.host, args.port, generator, args.rate, args.count))

    except KeyboardInterrupt:
        logger.warning("Simulator interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Simulator failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
