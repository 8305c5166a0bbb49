"""
Kafka text source with configurable bootstrap servers
"""
import asyncio
import logging
import os
from typing import AsyncIterator, Optional

from kafka import KafkaConsumer

from cardwatch.constants import DEFAULT_KAFKA_GROUP_ID, DEFAULT_KAFKA_TOPIC
from cardwatch.sources.base import LineSource

logger = logging.getLogger(__name__)


def _decode(value: Optional[bytes]) -> Optional[str]:
    # Tombstone records carry no value
    if value is None:
        return None
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError:
        return None


class KafkaLineSource(LineSource):
    """Consumes raw feed lines from a Kafka topic"""

    def __init__(self, bootstrap_servers: str = None, topic: str = DEFAULT_KAFKA_TOPIC,
                 group_id: str = DEFAULT_KAFKA_GROUP_ID, poll_timeout_ms: int = 500,
                 consumer: Optional[KafkaConsumer] = None):
        # Single source for env var logic
        self.bootstrap_servers = (
            bootstrap_servers or
            os.getenv('KAFKA_BOOTSTRAP_SERVERS', 'localhost:9092')
        )
        self.topic = topic
        self.group_id = group_id
        self.poll_timeout_ms = poll_timeout_ms
        self.consumer = consumer

    def _connect(self) -> KafkaConsumer:
        logger.info(f"Connecting to Kafka: {self.bootstrap_servers} (topic={self.topic})")

        return KafkaConsumer(
            self.topic,
            bootstrap_servers=self.bootstrap_servers.split(','),
            group_id=self.group_id,
            value_deserializer=_decode,
            auto_offset_reset='latest',
            enable_auto_commit=True
        )

    async def lines(self) -> AsyncIterator[str]:
        if self.consumer is None:
            self.consumer = await asyncio.to_thread(self._connect)

        while True:
            batches = await asyncio.to_thread(self.consumer.poll, timeout_ms=self.poll_timeout_ms)
            for records in batches.values():
                for record in records:
                    if record.value is None:
                        logger.debug(f"Rejected undecodable record at offset {record.offset}")
                        continue
                    yield record.value

    async def close(self) -> None:
        """Close consumer connection"""
        if self.consumer:
            await asyncio.to_thread(self.consumer.close)
            self.consumer = None
