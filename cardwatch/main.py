#!/usr/bin/env python3
"""
Credit card transaction streaming CLI
Usage: cardwatch <hostname> <port> [--window-seconds 20] [--store memory]

To run locally, start a feed first (`nc -lk 9999` or
`cardwatch-simulate --port 9999`) then `cardwatch localhost 9999 --store memory`
"""
import argparse
import asyncio
import logging
import signal
import sys

from pydantic import ValidationError

from cardwatch.commit import BatchCommitter
from cardwatch.config import StreamConfig
from cardwatch.constants import (
    DEFAULT_HISTORY_LIMIT,
    DEFAULT_KAFKA_GROUP_ID,
    DEFAULT_KAFKA_TOPIC,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_RECONNECT_DELAY_SEC,
    DEFAULT_SCORING_WORKERS,
    DEFAULT_WINDOW_SECONDS,
)
from cardwatch.database import create_engine, create_schema, create_session_factory
from cardwatch.enrichment import EnrichmentEngine
from cardwatch.exceptions import ConfigurationError
from cardwatch.pipeline import StreamingPipeline
from cardwatch.repositories import InMemoryTransactionStore, SqlTransactionStore
from cardwatch.scoring import Scorer, load_scorer
from cardwatch.sources import KafkaLineSource, SocketLineSource
from cardwatch.window import WindowAccumulator

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Configure logging"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        format='%(asctime)s [%(levelname)s] %(message)s',
        level=level,
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='cardwatch',
        description='Windowed fraud alerting for credit card transaction feeds'
    )

    parser.add_argument('host', help='Feed host (TCP source) or Kafka bootstrap host')
    parser.add_argument('port', type=int, help='Feed port')
    parser.add_argument('--window-seconds', type=float, default=DEFAULT_WINDOW_SECONDS,
                        help='Batch window length in seconds')
    parser.add_argument('--history-limit', type=int, default=DEFAULT_HISTORY_LIMIT,
                        help='Recent transactions fetched per account')
    parser.add_argument('--scoring-workers', type=int, default=DEFAULT_SCORING_WORKERS,
                        help='Threads running the scorer')
    parser.add_argument('--max-concurrency', type=int, default=DEFAULT_MAX_CONCURRENCY,
                        help='Transactions enriched concurrently within a batch')
    parser.add_argument('--source', default='socket', choices=['socket', 'kafka'],
                        help='Where raw lines come from')
    parser.add_argument('--reconnect-delay', type=float, default=DEFAULT_RECONNECT_DELAY_SEC,
                        help='Seconds before reconnecting a dropped TCP feed')
    parser.add_argument('--kafka-topic', default=DEFAULT_KAFKA_TOPIC,
                        help='Kafka topic name')
    parser.add_argument('--kafka-group-id', default=DEFAULT_KAFKA_GROUP_ID,
                        help='Kafka consumer group')
    parser.add_argument('--store', default='postgres', choices=['postgres', 'memory'],
                        help='Account/transaction store')
    parser.add_argument('--database-url', default=None,
                        help='Overrides DB_URL / DB_* environment variables')
    parser.add_argument('--create-schema', action='store_true',
                        help='Create tables before starting')
    parser.add_argument('--scorer', default=None,
                        help='Custom scorer as module:attribute')
    parser.add_argument('--verbose', action='store_true',
                        help='Enable debug logging')

    return parser


def create_source(config: StreamConfig):
    """Factory for the configured line source"""
    if config.source == 'kafka':
        return KafkaLineSource(
            bootstrap_servers=config.kafka_bootstrap,
            topic=config.kafka_topic,
            group_id=config.kafka_group_id
        )
    return SocketLineSource(config.host, config.port, reconnect_delay=config.reconnect_delay)


async def run_pipeline(config: StreamConfig, scorer: Scorer):
    """Wire collaborators and run until SIGINT/SIGTERM"""

    engine = None
    if config.store == 'memory':
        store = InMemoryTransactionStore(history_limit=config.history_limit)
        logger.info("Using in-memory store")
    else:
        engine = create_engine(config.database_url)
        if config.create_schema:
            await create_schema(engine)
            logger.info("✅ Schema ready")
        store = SqlTransactionStore(create_session_factory(engine), history_limit=config.history_limit)

    enrichment = EnrichmentEngine(
        store,
        scorer,
        scoring_workers=config.scoring_workers,
        max_concurrency=config.max_concurrency
    )
    pipeline = StreamingPipeline(
        source=create_source(config),
        accumulator=WindowAccumulator(config.window_seconds),
        engine=enrichment,
        committer=BatchCommitter(store)
    )

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, pipeline.stop)
        except (NotImplementedError, RuntimeError):
            # Windows event loops have no signal handlers
            pass

    try:
        await pipeline.run()
    finally:
        enrichment.close()
        await store.close()
        if engine is not None:
            await engine.dispose()


def main(argv=None):
    """Main execution"""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = StreamConfig.from_args(args)
        scorer = load_scorer(config.scorer)
    except (ValidationError, ConfigurationError) as e:
        parser.print_usage(sys.stderr)
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    logger.info(f"Feed: {config.source} {config.address}, window: {config.window_seconds}s, store: {config.store}")

    try:
        asyncio.run(run_pipeline(config, scorer))
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Pipeline failed: {e}", exc_info=True)
        sys.exit(1)

    sys.exit(0)


if __name__ == '__main__':
    main()
