from .base import TransactionStore
from .memory_store import InMemoryTransactionStore
from .transaction_repository import SqlTransactionStore

__all__ = [
    "TransactionStore",
    "InMemoryTransactionStore",
    "SqlTransactionStore",
]
