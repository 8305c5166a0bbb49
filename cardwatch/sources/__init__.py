from .base import LineSource
from .socket_source import SocketLineSource
from .kafka_source import KafkaLineSource

__all__ = [
    "LineSource",
    "SocketLineSource",
    "KafkaLineSource",
]
