"""
ORM models
- AccountRecord (accounts)
- TransactionRecord (transactions)
"""

from .account import AccountRecord
from .transaction import TransactionRecord

__all__ = [
    "AccountRecord",
    "TransactionRecord",
]
