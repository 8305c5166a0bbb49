"""
Transaction Repository - Data access layer
Account lookup, recent history and batch upsert over async SQLAlchemy
"""
import logging
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker

from cardwatch.constants import DEFAULT_HISTORY_LIMIT
from cardwatch.database.models import AccountRecord, TransactionRecord
from cardwatch.entities import Account, Transaction
from cardwatch.mappers import (
    map_account_record,
    map_account_to_record,
    map_transaction_record,
    map_transaction_to_record
)
from cardwatch.repositories.base import TransactionStore

logger = logging.getLogger(__name__)


class SqlTransactionStore(TransactionStore):
    """Repository for accounts and transactions database operations"""

    def __init__(self, session_factory: async_sessionmaker,
                 history_limit: int = DEFAULT_HISTORY_LIMIT):
        self.session_factory = session_factory
        self.history_limit = history_limit

    async def fetch_account(self, account_no: str) -> Optional[Account]:
        async with self.session_factory() as session:
            query = select(AccountRecord).where(AccountRecord.account_no == account_no)
            result = await session.execute(query)
            record = result.scalar_one_or_none()

        return map_account_record(record) if record else None

    async def fetch_recent_transactions(self, account_no: str) -> List[Transaction]:
        """
        Most recent transactions for an account
        Newest first, bounded by history_limit
        """
        query = (
            select(TransactionRecord)
            .where(TransactionRecord.account_no == account_no)
            .order_by(TransactionRecord.transaction_date.desc(), TransactionRecord.transaction_id.desc())
            .limit(self.history_limit)
        )

        async with self.session_factory() as session:
            result = await session.execute(query)
            records = result.scalars().all()

        return [map_transaction_record(record) for record in records]

    async def upsert_transactions(self, transactions: Sequence[Transaction]) -> None:
        """
        Insert or replace by transaction_id in a single DB transaction
        Either every record is written or none is
        """
        if not transactions:
            return

        async with self.session_factory() as session:
            async with session.begin():
                for transaction in transactions:
                    await session.merge(map_transaction_to_record(transaction))

        logger.debug(f"💾 Upserted {len(transactions)} transactions")

    async def save_accounts(self, accounts: Sequence[Account]) -> None:
        """Insert or replace account profiles (seeding and admin use)"""
        async with self.session_factory() as session:
            async with session.begin():
                for account in accounts:
                    await session.merge(map_account_to_record(account))
