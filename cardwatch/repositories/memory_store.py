"""
In-memory transaction store for demo runs and tests
"""
from typing import Dict, Iterable, List, Optional, Sequence

from cardwatch.constants import DEFAULT_HISTORY_LIMIT
from cardwatch.entities import Account, Transaction
from cardwatch.repositories.base import TransactionStore


class InMemoryTransactionStore(TransactionStore):
    """
    Dict-backed store keyed by account number and transaction id

    Upserts build a complete copy of the table before swapping it in, so a
    failing batch leaves no partial writes behind.
    """

    def __init__(self, accounts: Optional[Iterable[Account]] = None,
                 history_limit: int = DEFAULT_HISTORY_LIMIT):
        self.history_limit = history_limit
        self._accounts: Dict[str, Account] = {}
        self._transactions: Dict[int, Transaction] = {}

        for account in accounts or []:
            self.add_account(account)

    def add_account(self, account: Account):
        self._accounts[account.account_no] = account

    def all_transactions(self) -> List[Transaction]:
        """Every stored transaction, in insertion order"""
        return list(self._transactions.values())

    async def fetch_account(self, account_no: str) -> Optional[Account]:
        return self._accounts.get(account_no)

    async def fetch_recent_transactions(self, account_no: str) -> List[Transaction]:
        history = [t for t in self._transactions.values() if t.account_no == account_no]
        history.sort(key=lambda t: (t.transaction_date, t.transaction_id), reverse=True)
        return [t.model_copy() for t in history[:self.history_limit]]

    async def upsert_transactions(self, transactions: Sequence[Transaction]) -> None:
        staged = dict(self._transactions)
        for transaction in transactions:
            staged[transaction.transaction_id] = transaction.model_copy()
        self._transactions = staged
