"""
Shared entities between ingestion, scoring and persistence
Maps to the comma-delimited transaction feed
"""

from typing import Optional, Tuple
from pydantic import BaseModel, ConfigDict

from cardwatch.constants import ACTIVE_ACCOUNT_STATUS


class Transaction(BaseModel):
    """
    Single card transaction
    Maps to one line of the feed; alert is set during enrichment
    """
    transaction_id: int
    account_no: str
    merchant: str
    category: str
    amount: float
    transaction_date: str  # opaque, as delivered upstream
    alert: Optional[str] = None


class Account(BaseModel):
    """
    Account profile used as scoring baseline
    Looked up by account number, may be absent
    """
    model_config = ConfigDict(frozen=True)

    account_no: str
    holder_name: Optional[str] = None
    credit_limit: Optional[float] = None
    home_region: Optional[str] = None
    status: str = ACTIVE_ACCOUNT_STATUS


class BatchContext(BaseModel):
    """
    Scoring context for one account within one batch
    Shared by every transaction of that account in the batch
    """
    model_config = ConfigDict(frozen=True)

    account: Optional[Account] = None
    history: Tuple[Transaction, ...] = ()
