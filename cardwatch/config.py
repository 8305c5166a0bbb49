"""
Startup configuration, read once
"""
import os
from typing import Literal, Optional

from pydantic import BaseModel, Field

from cardwatch.constants import (
    DEFAULT_HISTORY_LIMIT,
    DEFAULT_KAFKA_GROUP_ID,
    DEFAULT_KAFKA_TOPIC,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_RECONNECT_DELAY_SEC,
    DEFAULT_SCORING_WORKERS,
    DEFAULT_WINDOW_SECONDS,
)


class StreamConfig(BaseModel):
    """Streaming job configuration"""
    host: str = Field(min_length=1)
    port: int = Field(ge=1, le=65535)

    window_seconds: float = Field(default=DEFAULT_WINDOW_SECONDS, gt=0)
    history_limit: int = Field(default=DEFAULT_HISTORY_LIMIT, ge=1)
    scoring_workers: int = Field(default=DEFAULT_SCORING_WORKERS, ge=1)
    max_concurrency: int = Field(default=DEFAULT_MAX_CONCURRENCY, ge=1)

    source: Literal["socket", "kafka"] = "socket"
    reconnect_delay: Optional[float] = Field(default=DEFAULT_RECONNECT_DELAY_SEC, ge=0)
    kafka_topic: str = DEFAULT_KAFKA_TOPIC
    kafka_group_id: str = DEFAULT_KAFKA_GROUP_ID

    store: Literal["postgres", "memory"] = "postgres"
    database_url: Optional[str] = None
    create_schema: bool = False

    scorer: Optional[str] = None

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    @property
    def kafka_bootstrap(self) -> str:
        """KAFKA_BOOTSTRAP_SERVERS wins over the positional address"""
        return os.getenv("KAFKA_BOOTSTRAP_SERVERS") or self.address

    @classmethod
    def from_args(cls, args) -> "StreamConfig":
        return cls(
            host=args.host,
            port=args.port,
            window_seconds=args.window_seconds,
            history_limit=args.history_limit,
            scoring_workers=args.scoring_workers,
            max_concurrency=args.max_concurrency,
            source=args.source,
            reconnect_delay=args.reconnect_delay,
            kafka_topic=args.kafka_topic,
            kafka_group_id=args.kafka_group_id,
            store=args.store,
            database_url=args.database_url,
            create_schema=args.create_schema,
            scorer=args.scorer
        )
